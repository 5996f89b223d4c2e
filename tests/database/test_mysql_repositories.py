from __future__ import annotations

from datetime import date, datetime, timezone

import mysql.connector
import pytest

from src.geo_attendance.geo_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from src.geo_attendance.geo_attendance.core.enums import AttendanceStatus, Role
from src.geo_attendance.geo_attendance.core.exceptions import AlreadyCheckedIn, AlreadyMember, UpstreamFailure
from src.geo_attendance.geo_attendance.database.bootstrap import iter_sql_statements
from src.geo_attendance.geo_attendance.faces.mysql_reference_photo_repository import MySQLReferencePhotoRepository
from src.geo_attendance.geo_attendance.faces.repository import ReferenceAlreadyEnrolled
from src.geo_attendance.geo_attendance.geofences.mysql_geofence_repository import MySQLGeofenceRepository
from src.geo_attendance.geo_attendance.members.mysql_invite_code_repository import MySQLInviteCodeRepository
from src.geo_attendance.geo_attendance.members.mysql_member_repository import MySQLMembershipRepository
from src.geo_attendance.geo_attendance.members.repository import InviteCodeTaken


class FakeCursor:
    def __init__(self, *, rows=None, error=None):
        self._rows = list(rows or [])
        self._error = error
        self.executed = []
        self.lastrowid = 42
        self.rowcount = 1
        self.closed = False

    def execute(self, sql, params=None):
        self.executed.append((sql, params))
        if self._error:
            raise self._error

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return self._rows

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, dictionary=True):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeFactory:
    def __init__(self, cursor=None, connect_error=None):
        self.cursor = cursor or FakeCursor()
        self.connection = FakeConnection(self.cursor)
        self._connect_error = connect_error

    def connect(self):
        if self._connect_error:
            raise self._connect_error
        return self.connection


def _checkin_kwargs():
    return dict(
        company_id="c-1",
        user_id="u-1",
        work_date=date(2026, 3, 2),
        check_in_time=datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc),
        latitude=40.0,
        longitude=-73.0,
        photo_ref="data:image/jpeg;base64,AAAA",
        status=AttendanceStatus.PRESENT,
    )


def test_create_checkin_stores_naive_utc_and_commits():
    factory = FakeFactory()
    repo = MySQLAttendanceRepository(factory)

    assert repo.create_checkin(**_checkin_kwargs()) == 42

    _, params = factory.cursor.executed[0]
    assert params[3] == "present"
    assert params[4] == datetime(2026, 3, 2, 9, 0)
    assert factory.connection.committed
    assert factory.connection.closed


def test_duplicate_day_maps_to_already_checked_in():
    factory = FakeFactory(FakeCursor(error=mysql.connector.IntegrityError(msg="Duplicate entry")))
    repo = MySQLAttendanceRepository(factory)

    with pytest.raises(AlreadyCheckedIn):
        repo.create_checkin(**_checkin_kwargs())
    assert factory.connection.rolled_back


def test_connector_errors_become_upstream_failure():
    repo = MySQLGeofenceRepository(FakeFactory(FakeCursor(error=mysql.connector.OperationalError(msg="gone away"))))

    with pytest.raises(UpstreamFailure):
        repo.list_for_company("c-1")


def test_connect_failure_becomes_upstream_failure():
    repo = MySQLGeofenceRepository(FakeFactory(connect_error=mysql.connector.InterfaceError(msg="refused")))

    with pytest.raises(UpstreamFailure):
        repo.list_for_company("c-1")


def test_attendance_row_mapping():
    row = {
        "attendance_id": 3,
        "company_id": "c-1",
        "user_id": "u-1",
        "work_date": date(2026, 3, 2),
        "status": "present",
        "check_in_time": datetime(2026, 3, 2, 9, 0),
        "check_in_lat": 40.0,
        "check_in_lng": -73.0,
        "check_in_photo": None,
        "check_out_time": datetime(2026, 3, 2, 17, 30),
        "check_out_lat": None,
        "check_out_lng": None,
        "check_out_photo": None,
        "hours_worked": "8.50",
    }
    repo = MySQLAttendanceRepository(FakeFactory(FakeCursor(rows=[row])))

    rec = repo.get_for_user_and_date(company_id="c-1", user_id="u-1", work_date=date(2026, 3, 2))

    assert rec.check_in_time == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)
    assert rec.hours_worked == 8.5
    assert rec.status == AttendanceStatus.PRESENT


def test_duplicate_primary_photo_maps_to_reference_already_enrolled():
    factory = FakeFactory(FakeCursor(error=mysql.connector.IntegrityError(msg="Duplicate entry")))
    repo = MySQLReferencePhotoRepository(factory)

    with pytest.raises(ReferenceAlreadyEnrolled):
        repo.create_primary(company_id="c-1", user_id="u-1", photo_ref="data:image/jpeg;base64,AAAA")


def test_sql_splitter_keeps_semicolons_in_quotes():
    sql = "CREATE TABLE a (x VARCHAR(3) DEFAULT ';');\nINSERT INTO a VALUES ('b;c');"

    assert list(iter_sql_statements(sql)) == [
        "CREATE TABLE a (x VARCHAR(3) DEFAULT ';')",
        "INSERT INTO a VALUES ('b;c')",
    ]


def test_duplicate_membership_maps_to_already_member():
    factory = FakeFactory(FakeCursor(error=mysql.connector.IntegrityError(msg="Duplicate entry")))
    repo = MySQLMembershipRepository(factory)

    with pytest.raises(AlreadyMember):
        repo.add(company_id="c-1", user_id="u-1", role=Role.EMPLOYEE)
    assert factory.connection.rolled_back


def test_invite_code_collision_maps_to_invite_code_taken():
    factory = FakeFactory(FakeCursor(error=mysql.connector.IntegrityError(msg="Duplicate entry")))
    repo = MySQLInviteCodeRepository(factory)

    with pytest.raises(InviteCodeTaken):
        repo.create(
            company_id="c-1", code="ABCD1234", role=Role.EMPLOYEE, max_uses=1, created_by="u-admin", expires_at=None
        )


def test_invite_row_mapping_and_guarded_claim():
    row = {
        "invite_id": 7,
        "company_id": "c-1",
        "code": "ABCD1234",
        "role": "hr",
        "max_uses": 3,
        "current_uses": 1,
        "created_by": "u-admin",
        "expires_at": datetime(2026, 3, 9, 9, 0),
        "created_at": None,
    }
    factory = FakeFactory(FakeCursor(rows=[row]))
    repo = MySQLInviteCodeRepository(factory)

    invite = repo.get_by_code("ABCD1234")
    assert invite.role == Role.HR
    assert invite.expires_at == datetime(2026, 3, 9, 9, 0, tzinfo=timezone.utc)
    assert invite.exhausted is False

    factory.cursor.rowcount = 0
    assert repo.claim_use(7) is False
    sql, params = factory.cursor.executed[-1]
    assert "current_uses < max_uses" in sql
    assert params == (7,)
