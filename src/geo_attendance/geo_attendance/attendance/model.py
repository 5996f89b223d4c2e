from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Optional

from ..core.enums import AttendanceStatus


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance row per user, company and day."""

    attendance_id: int
    company_id: str
    user_id: str
    work_date: date
    status: AttendanceStatus
    check_in_time: Optional[datetime] = None
    check_in_lat: Optional[float] = None
    check_in_lng: Optional[float] = None
    check_in_photo: Optional[str] = None
    check_out_time: Optional[datetime] = None
    check_out_lat: Optional[float] = None
    check_out_lng: Optional[float] = None
    check_out_photo: Optional[str] = None
    hours_worked: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        # Photos are data URLs; only report whether they exist.
        return {
            "id": self.attendance_id,
            "company_id": self.company_id,
            "user_id": self.user_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "check_in_time": _iso(self.check_in_time),
            "check_in_location": (
                {"lat": self.check_in_lat, "lng": self.check_in_lng} if self.check_in_lat is not None else None
            ),
            "has_check_in_photo": bool(self.check_in_photo),
            "check_out_time": _iso(self.check_out_time),
            "check_out_location": (
                {"lat": self.check_out_lat, "lng": self.check_out_lng} if self.check_out_lat is not None else None
            ),
            "has_check_out_photo": bool(self.check_out_photo),
            "hours_worked": self.hours_worked,
        }
