from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_user_and_date(self, *, company_id: str, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_user(self, *, company_id: str, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_company_date(self, *, company_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create_checkin(
        self,
        *,
        company_id: str,
        user_id: str,
        work_date: date,
        check_in_time: datetime,
        latitude: float,
        longitude: float,
        photo_ref: Optional[str],
        status: AttendanceStatus,
    ) -> int:
        """Insert today's row; raises AlreadyCheckedIn on a uniqueness conflict."""
        raise NotImplementedError

    def update_checkin(
        self,
        *,
        attendance_id: int,
        check_in_time: datetime,
        latitude: float,
        longitude: float,
        photo_ref: Optional[str],
        status: AttendanceStatus,
    ) -> bool:
        """Fill check-in fields of a row that has none yet."""
        raise NotImplementedError

    def update_checkout(
        self,
        *,
        attendance_id: int,
        check_out_time: datetime,
        latitude: float,
        longitude: float,
        photo_ref: Optional[str],
        hours_worked: float,
    ) -> bool:
        """Fill check-out fields of a row that has none yet."""
        raise NotImplementedError
