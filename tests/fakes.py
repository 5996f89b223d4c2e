from __future__ import annotations

import base64
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from src.geo_attendance.geo_attendance.attendance.model import AttendanceRecord
from src.geo_attendance.geo_attendance.core.enums import AttendanceStatus, Role
from src.geo_attendance.geo_attendance.core.exceptions import AlreadyCheckedIn, AlreadyMember, ConfigurationError
from src.geo_attendance.geo_attendance.faces.model import FaceComparison, ReferencePhoto
from src.geo_attendance.geo_attendance.faces.repository import ReferenceAlreadyEnrolled
from src.geo_attendance.geo_attendance.geofences.model import Geofence
from src.geo_attendance.geo_attendance.members.model import Company, InviteCode, Membership
from src.geo_attendance.geo_attendance.members.repository import InviteCodeTaken

COMPANY = "c-1"
USER = "u-1"

PHOTO = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xff\xe0captured-face").decode()
OTHER_PHOTO = "data:image/png;base64," + base64.b64encode(b"\x89PNGother-face").decode()


class InMemoryMembers:
    def __init__(self, members: Optional[list[Membership]] = None):
        self._by_key = {(m.company_id, m.user_id): m for m in members or []}

    def add(self, company_id: str, user_id: str, role: Role = Role.EMPLOYEE) -> None:
        if (company_id, user_id) in self._by_key:
            raise AlreadyMember("You are already a member of this company")
        self._by_key[(company_id, user_id)] = Membership(company_id=company_id, user_id=user_id, role=role)

    def get(self, *, company_id: str, user_id: str) -> Optional[Membership]:
        return self._by_key.get((company_id, user_id))


class InMemoryCompanies:
    def __init__(self):
        self.rows: dict[str, Company] = {}

    def create(self, *, company_id: str, name: str, admin_id: str) -> None:
        self.rows[company_id] = Company(company_id=company_id, name=name, admin_id=admin_id)

    def get(self, company_id: str) -> Optional[Company]:
        return self.rows.get(company_id)


class InMemoryInvites:
    def __init__(self):
        self.rows: dict[int, InviteCode] = {}
        self._id = 0

    def add(
        self,
        company_id: str,
        code: str,
        *,
        role: Role = Role.EMPLOYEE,
        max_uses: int = 1,
        current_uses: int = 0,
        expires_at: Optional[datetime] = None,
    ) -> InviteCode:
        invite_id = self.create(
            company_id=company_id, code=code, role=role, max_uses=max_uses, created_by="u-admin", expires_at=expires_at
        )
        self.rows[invite_id] = replace(self.rows[invite_id], current_uses=current_uses)
        return self.rows[invite_id]

    def create(self, *, company_id, code, role, max_uses, created_by, expires_at) -> int:
        if self.get_by_code(code) is not None:
            raise InviteCodeTaken(code)
        self._id += 1
        self.rows[self._id] = InviteCode(
            invite_id=self._id,
            company_id=company_id,
            code=code,
            role=role,
            max_uses=max_uses,
            created_by=created_by,
            expires_at=expires_at,
        )
        return self._id

    def get(self, invite_id: int) -> Optional[InviteCode]:
        return self.rows.get(invite_id)

    def get_by_code(self, code: str) -> Optional[InviteCode]:
        for invite in self.rows.values():
            if invite.code == code:
                return invite
        return None

    def claim_use(self, invite_id: int) -> bool:
        invite = self.rows[invite_id]
        if invite.exhausted:
            return False
        self.rows[invite_id] = replace(invite, current_uses=invite.current_uses + 1)
        return True

    def release_use(self, invite_id: int) -> None:
        invite = self.rows[invite_id]
        self.rows[invite_id] = replace(invite, current_uses=max(0, invite.current_uses - 1))


class InMemoryGeofences:
    def __init__(self):
        self._rows: dict[int, Geofence] = {}
        self._id = 0
        self.list_calls = 0

    def add(self, company_id: str, name: str, latitude: float, longitude: float, radius_meters: float) -> Geofence:
        gid = self.create(
            company_id=company_id, name=name, latitude=latitude, longitude=longitude, radius_meters=radius_meters
        )
        return self._rows[gid]

    def list_for_company(self, company_id: str):
        self.list_calls += 1
        return [g for g in self._rows.values() if g.company_id == company_id]

    def get(self, *, company_id: str, geofence_id: int):
        g = self._rows.get(geofence_id)
        return g if g and g.company_id == company_id else None

    def create(self, *, company_id, name, latitude, longitude, radius_meters) -> int:
        self._id += 1
        self._rows[self._id] = Geofence(
            geofence_id=self._id,
            company_id=company_id,
            name=name,
            latitude=latitude,
            longitude=longitude,
            radius_meters=radius_meters,
        )
        return self._id

    def delete(self, *, company_id: str, geofence_id: int) -> bool:
        if self.get(company_id=company_id, geofence_id=geofence_id) is None:
            return False
        del self._rows[geofence_id]
        return True


class InMemoryPhotos:
    def __init__(self):
        self.rows: list[ReferencePhoto] = []

    def get_primary(self, *, company_id: str, user_id: str) -> Optional[ReferencePhoto]:
        for p in self.rows:
            if p.company_id == company_id and p.user_id == user_id and p.is_primary:
                return p
        return None

    def create_primary(self, *, company_id: str, user_id: str, photo_ref: str) -> int:
        if self.get_primary(company_id=company_id, user_id=user_id):
            raise ReferenceAlreadyEnrolled("duplicate primary")
        photo = ReferencePhoto(
            photo_id=len(self.rows) + 1, company_id=company_id, user_id=user_id, photo_ref=photo_ref, is_primary=True
        )
        self.rows.append(photo)
        return photo.photo_id

    def delete_for_user(self, *, company_id: str, user_id: str) -> int:
        before = len(self.rows)
        self.rows = [p for p in self.rows if not (p.company_id == company_id and p.user_id == user_id)]
        return before - len(self.rows)


class InMemoryAttendance:
    def __init__(self):
        self._by_key: dict[tuple[str, str, date], AttendanceRecord] = {}
        self._id = 0
        self.writes = 0

    def put(self, record: AttendanceRecord) -> None:
        self._by_key[(record.company_id, record.user_id, record.work_date)] = record

    def get_for_user_and_date(self, *, company_id: str, user_id: str, work_date: date):
        return self._by_key.get((company_id, user_id, work_date))

    def get_recent_for_user(self, *, company_id: str, user_id: str, limit: int):
        items = [r for r in self._by_key.values() if r.company_id == company_id and r.user_id == user_id]
        items.sort(key=lambda r: r.work_date, reverse=True)
        return items[:limit]

    def list_for_company_date(self, *, company_id: str, work_date: date):
        return [r for r in self._by_key.values() if r.company_id == company_id and r.work_date == work_date]

    def create_checkin(self, *, company_id, user_id, work_date, check_in_time, latitude, longitude, photo_ref, status):
        if (company_id, user_id, work_date) in self._by_key:
            raise AlreadyCheckedIn("Already checked in today")
        self._id += 1
        self.writes += 1
        self.put(
            AttendanceRecord(
                attendance_id=self._id,
                company_id=company_id,
                user_id=user_id,
                work_date=work_date,
                status=status,
                check_in_time=check_in_time,
                check_in_lat=latitude,
                check_in_lng=longitude,
                check_in_photo=photo_ref,
            )
        )
        return self._id

    def _find(self, attendance_id: int):
        for r in self._by_key.values():
            if r.attendance_id == attendance_id:
                return r
        return None

    def update_checkin(self, *, attendance_id, check_in_time, latitude, longitude, photo_ref, status) -> bool:
        r = self._find(attendance_id)
        if r is None or r.check_in_time is not None:
            return False
        self.writes += 1
        self.put(
            replace(
                r,
                check_in_time=check_in_time,
                check_in_lat=latitude,
                check_in_lng=longitude,
                check_in_photo=photo_ref,
                status=status,
            )
        )
        return True

    def update_checkout(self, *, attendance_id, check_out_time, latitude, longitude, photo_ref, hours_worked) -> bool:
        r = self._find(attendance_id)
        if r is None or r.check_out_time is not None:
            return False
        self.writes += 1
        self.put(
            replace(
                r,
                check_out_time=check_out_time,
                check_out_lat=latitude,
                check_out_lng=longitude,
                check_out_photo=photo_ref,
                hours_worked=hours_worked,
            )
        )
        return True


class FakeComparator:
    def __init__(self, *results: FaceComparison, configured: bool = True):
        self._results = list(results)
        self.configured = configured
        self.calls: list[dict] = []

    def push(self, result) -> None:
        self._results.append(result)

    def ensure_configured(self) -> None:
        if not self.configured:
            raise ConfigurationError("AI_GATEWAY_API_KEY not configured")

    def compare(self, *, reference_photo: str, captured_photo: str) -> FaceComparison:
        self.calls.append({"reference_photo": reference_photo, "captured_photo": captured_photo})
        if not self._results:
            return FaceComparison(match=True, confidence=0.95, reason="same person")
        result = self._results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_record(**overrides) -> AttendanceRecord:
    data = dict(
        attendance_id=1,
        company_id=COMPANY,
        user_id=USER,
        work_date=date(2026, 3, 2),
        status=AttendanceStatus.PRESENT,
    )
    data.update(overrides)
    return AttendanceRecord(**data)


