from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of a member within a company."""

    ADMIN = "admin"
    HR = "hr"
    DEPARTMENT_HEAD = "department_head"
    EMPLOYEE = "employee"


class AttendanceStatus(str, Enum):
    """Normalized attendance status stored in the database."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    ON_LEAVE = "on_leave"


class CheckAction(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class FlowState(str, Enum):
    """States of a single check-in/check-out attempt."""

    CAPTURING = "capturing"
    VALIDATING_GEOFENCE = "validating_geofence"
    VERIFYING_FACE = "verifying_face"
    RECORDING = "recording"
    DONE = "done"
    FAILED = "failed"
