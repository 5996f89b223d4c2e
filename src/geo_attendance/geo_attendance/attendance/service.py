from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional, Sequence

from ..common.datetime_utils import ensure_utc, hours_between
from ..core.constants import DEFAULT_HISTORY_LIMIT, MAX_HISTORY_LIMIT
from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyCheckedIn, AlreadyCheckedOut, InvalidState, NoCheckInFound, UpstreamFailure
from .model import AttendanceRecord
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceRecorder:
    """Writes the single daily attendance row of a user in a company.

    Callers are expected to have validated the location and the identity
    already; this class only guards the daily-row invariants.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def _reload(self, *, company_id: str, user_id: str, work_date: date) -> AttendanceRecord:
        record = self._attendance.get_for_user_and_date(company_id=company_id, user_id=user_id, work_date=work_date)
        if record is None:
            raise UpstreamFailure("Attendance record was not persisted")
        return record

    def require_check_in_open(self, user_id: str, company_id: str, today: date) -> Optional[AttendanceRecord]:
        """Return today's row (if any) when a check-in is still possible."""
        existing = self._attendance.get_for_user_and_date(company_id=company_id, user_id=user_id, work_date=today)
        if existing and existing.check_in_time is not None:
            raise AlreadyCheckedIn("Already checked in today")
        return existing

    def require_check_out_open(self, user_id: str, company_id: str, today: date) -> AttendanceRecord:
        """Return today's row when it has a check-in and no check-out yet."""
        record = self._attendance.get_for_user_and_date(company_id=company_id, user_id=user_id, work_date=today)
        if record is None or record.check_in_time is None:
            raise NoCheckInFound("No check-in found for today. Please check in first.")
        if record.check_out_time is not None:
            raise AlreadyCheckedOut("Already checked out today")
        return record

    def record_check_in(
        self,
        user_id: str,
        company_id: str,
        timestamp: datetime,
        latitude: float,
        longitude: float,
        photo_ref: Optional[str],
    ) -> AttendanceRecord:
        timestamp = ensure_utc(timestamp)
        today = timestamp.date()

        existing = self.require_check_in_open(user_id, company_id, today)

        if existing:
            updated = self._attendance.update_checkin(
                attendance_id=existing.attendance_id,
                check_in_time=timestamp,
                latitude=latitude,
                longitude=longitude,
                photo_ref=photo_ref,
                status=AttendanceStatus.PRESENT,
            )
            if not updated:
                raise AlreadyCheckedIn("Already checked in today")
        else:
            self._attendance.create_checkin(
                company_id=company_id,
                user_id=user_id,
                work_date=today,
                check_in_time=timestamp,
                latitude=latitude,
                longitude=longitude,
                photo_ref=photo_ref,
                status=AttendanceStatus.PRESENT,
            )

        logger.info("User %s checked in for company %s on %s", user_id, company_id, today)
        return self._reload(company_id=company_id, user_id=user_id, work_date=today)

    def record_check_out(
        self,
        user_id: str,
        company_id: str,
        timestamp: datetime,
        latitude: float,
        longitude: float,
        photo_ref: Optional[str],
    ) -> AttendanceRecord:
        timestamp = ensure_utc(timestamp)
        today = timestamp.date()

        record = self.require_check_out_open(user_id, company_id, today)

        if timestamp < record.check_in_time:
            logger.error(
                "Check-out at %s precedes check-in at %s for user %s",
                timestamp.isoformat(),
                record.check_in_time.isoformat(),
                user_id,
            )
            raise InvalidState("Check-out time is earlier than check-in time")

        hours = hours_between(record.check_in_time, timestamp)
        updated = self._attendance.update_checkout(
            attendance_id=record.attendance_id,
            check_out_time=timestamp,
            latitude=latitude,
            longitude=longitude,
            photo_ref=photo_ref,
            hours_worked=hours,
        )
        if not updated:
            raise AlreadyCheckedOut("Already checked out today")

        logger.info("User %s checked out for company %s after %.2fh", user_id, company_id, hours)
        return self._reload(company_id=company_id, user_id=user_id, work_date=today)

    def get_today(self, user_id: str, company_id: str, today: date) -> Optional[AttendanceRecord]:
        return self._attendance.get_for_user_and_date(company_id=company_id, user_id=user_id, work_date=today)

    def get_history(
        self, user_id: str, company_id: str, *, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> Sequence[AttendanceRecord]:
        limit = max(1, min(int(limit), MAX_HISTORY_LIMIT))
        return self._attendance.get_recent_for_user(company_id=company_id, user_id=user_id, limit=limit)

    def list_for_company_date(self, company_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        return self._attendance.list_for_company_date(company_id=company_id, work_date=work_date)
