from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceRecorder
from .checkin.service import CheckInOrchestrator
from .core.constants import (
    DEFAULT_AI_GATEWAY_URL,
    DEFAULT_AI_MODEL,
    DEFAULT_AI_TIMEOUT_SECONDS,
    FACE_MATCH_THRESHOLD,
    MAX_PHOTO_BYTES,
)
from .database.connection import DBConfig, DatabaseConnection
from .faces.comparator import AIGatewayFaceComparator, FaceComparator
from .faces.mysql_reference_photo_repository import MySQLReferencePhotoRepository
from .faces.repository import ReferencePhotoRepository
from .faces.service import FaceVerificationService
from .geofences.mysql_geofence_repository import MySQLGeofenceRepository
from .geofences.repository import GeofenceRepository
from .geofences.service import GeofenceService
from .members.mysql_company_repository import MySQLCompanyRepository
from .members.mysql_invite_code_repository import MySQLInviteCodeRepository
from .members.mysql_member_repository import MySQLMembershipRepository
from .members.repository import CompanyRepository, InviteCodeRepository, MembershipRepository
from .members.service import CompanyService, MembershipService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    members_repo: MembershipRepository
    companies_repo: CompanyRepository
    invites_repo: InviteCodeRepository
    geofences_repo: GeofenceRepository
    photos_repo: ReferencePhotoRepository
    attendance_repo: AttendanceRepository
    comparator: FaceComparator

    membership_service: MembershipService
    company_service: CompanyService
    geofence_service: GeofenceService
    face_service: FaceVerificationService
    attendance_recorder: AttendanceRecorder
    checkin_orchestrator: CheckInOrchestrator


def assemble(
    *,
    members_repo: MembershipRepository,
    companies_repo: CompanyRepository,
    invites_repo: InviteCodeRepository,
    geofences_repo: GeofenceRepository,
    photos_repo: ReferencePhotoRepository,
    attendance_repo: AttendanceRepository,
    comparator: FaceComparator,
    match_threshold: float = FACE_MATCH_THRESHOLD,
    max_photo_bytes: int = MAX_PHOTO_BYTES,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of the given repositories."""
    membership_service = MembershipService(members_repo)
    geofence_service = GeofenceService(geofences_repo)
    face_service = FaceVerificationService(
        photos_repo, comparator, match_threshold=match_threshold, max_photo_bytes=max_photo_bytes
    )
    company_service = CompanyService(
        companies_repo,
        invites_repo,
        members_repo,
        membership_service,
        face_service,
        max_photo_bytes=max_photo_bytes,
    )
    attendance_recorder = AttendanceRecorder(attendance_repo)
    checkin_orchestrator = CheckInOrchestrator(
        geofence_service, face_service, attendance_recorder, max_photo_bytes=max_photo_bytes
    )

    return Container(
        conn=conn,
        members_repo=members_repo,
        companies_repo=companies_repo,
        invites_repo=invites_repo,
        geofences_repo=geofences_repo,
        photos_repo=photos_repo,
        attendance_repo=attendance_repo,
        comparator=comparator,
        membership_service=membership_service,
        company_service=company_service,
        geofence_service=geofence_service,
        face_service=face_service,
        attendance_recorder=attendance_recorder,
        checkin_orchestrator=checkin_orchestrator,
    )


def build_container(*, db_config: dict, settings: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    comparator = AIGatewayFaceComparator(
        api_key=getattr(settings, "AI_GATEWAY_API_KEY", None),
        url=getattr(settings, "AI_GATEWAY_URL", DEFAULT_AI_GATEWAY_URL),
        model=getattr(settings, "AI_MODEL", DEFAULT_AI_MODEL),
        timeout=float(getattr(settings, "AI_TIMEOUT_SECONDS", DEFAULT_AI_TIMEOUT_SECONDS)),
    )

    return assemble(
        members_repo=MySQLMembershipRepository(conn),
        companies_repo=MySQLCompanyRepository(conn),
        invites_repo=MySQLInviteCodeRepository(conn),
        geofences_repo=MySQLGeofenceRepository(conn),
        photos_repo=MySQLReferencePhotoRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        comparator=comparator,
        match_threshold=float(getattr(settings, "FACE_MATCH_THRESHOLD", FACE_MATCH_THRESHOLD)),
        max_photo_bytes=int(getattr(settings, "MAX_PHOTO_BYTES", MAX_PHOTO_BYTES)),
        conn=conn,
    )
