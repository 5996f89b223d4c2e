from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..common.datetime_utils import from_db_datetime, to_db_datetime
from ..core.enums import AttendanceStatus
from ..core.exceptions import AlreadyCheckedIn
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, company_id, user_id, work_date, status,
    check_in_time, check_in_lat, check_in_lng, check_in_photo,
    check_out_time, check_out_lat, check_out_lng, check_out_photo,
    hours_worked
"""


def _opt_float(value: Any) -> Optional[float]:
    return float(value) if value is not None else None


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        company_id=r["company_id"],
        user_id=r["user_id"],
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        check_in_time=from_db_datetime(r.get("check_in_time")),
        check_in_lat=_opt_float(r.get("check_in_lat")),
        check_in_lng=_opt_float(r.get("check_in_lng")),
        check_in_photo=r.get("check_in_photo"),
        check_out_time=from_db_datetime(r.get("check_out_time")),
        check_out_lat=_opt_float(r.get("check_out_lat")),
        check_out_lng=_opt_float(r.get("check_out_lng")),
        check_out_photo=r.get("check_out_photo"),
        hours_worked=_opt_float(r.get("hours_worked")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_user_and_date(self, *, company_id: str, user_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE company_id=%s AND user_id=%s AND work_date=%s
                """,
                (company_id, user_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_recent_for_user(self, *, company_id: str, user_id: str, limit: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE company_id=%s AND user_id=%s
                ORDER BY work_date DESC
                LIMIT %s
                """,
                (company_id, user_id, int(limit)),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_company_date(self, *, company_id: str, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE company_id=%s AND work_date=%s
                ORDER BY check_in_time ASC
                """,
                (company_id, work_date),
            )
            return [_to_record(r) for r in fetchall(cur)]

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_records(
                        company_id, user_id, work_date, status,
                        check_in_time, check_in_lat, check_in_lng, check_in_photo
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        company_id,
                        user_id,
                        work_date,
                        status.value,
                        to_db_datetime(check_in_time),
                        latitude,
                        longitude,
                        photo_ref,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            # Lost a race against a concurrent check-in of the same day.
            raise AlreadyCheckedIn("Already checked in today") from exc

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in_time=%s, check_in_lat=%s, check_in_lng=%s, check_in_photo=%s, status=%s
                WHERE attendance_id=%s AND check_in_time IS NULL
                """,
                (to_db_datetime(check_in_time), latitude, longitude, photo_ref, status.value, int(attendance_id)),
            )
            return cur.rowcount > 0

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_out_time=%s, check_out_lat=%s, check_out_lng=%s, check_out_photo=%s, hours_worked=%s
                WHERE attendance_id=%s AND check_out_time IS NULL
                """,
                (to_db_datetime(check_out_time), latitude, longitude, photo_ref, hours_worked, int(attendance_id)),
            )
            return cur.rowcount > 0
