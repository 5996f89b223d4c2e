from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from src.geo_attendance.geo_attendance.attendance.service import AttendanceRecorder
from src.geo_attendance.geo_attendance.checkin.service import CheckInOrchestrator
from src.geo_attendance.geo_attendance.core.constants import EARTH_RADIUS_METERS
from src.geo_attendance.geo_attendance.core.enums import CheckAction, FlowState
from src.geo_attendance.geo_attendance.core.exceptions import (
    AlreadyCheckedIn,
    AlreadyCheckedOut,
    ConfigurationError,
    FaceMismatch,
    GeofenceViolation,
    NoCheckInFound,
    UpstreamFailure,
    ValidationError,
)
from src.geo_attendance.geo_attendance.faces.model import FaceComparison
from src.geo_attendance.geo_attendance.faces.service import FaceVerificationService
from src.geo_attendance.geo_attendance.geofences.service import GeofenceService
from tests.fakes import COMPANY, OTHER_PHOTO, PHOTO, USER, FakeComparator

FAR_LAT = 40.0 + math.degrees(500 / EARTH_RADIUS_METERS)


@pytest.fixture
def build(geofences_repo, photos_repo, attendance_repo):
    def _build(comparator=None):
        faces = FaceVerificationService(photos_repo, comparator or FakeComparator())
        return CheckInOrchestrator(GeofenceService(geofences_repo), faces, AttendanceRecorder(attendance_repo))

    geofences_repo.add(COMPANY, "HQ", 40.0, -73.0, 100)
    return _build


def test_first_check_in_runs_every_step_and_enrolls(build, photos_repo, attendance_repo, fixed_now):
    orchestrator = build()

    result = orchestrator.check_in(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now)

    assert result.action == CheckAction.CHECK_IN
    assert result.states == (
        FlowState.CAPTURING,
        FlowState.VALIDATING_GEOFENCE,
        FlowState.VERIFYING_FACE,
        FlowState.RECORDING,
        FlowState.DONE,
    )
    assert result.location.within_boundary is True
    assert result.face.enrolled_now is True
    assert result.record.check_in_time == fixed_now
    assert len(photos_repo.rows) == 1
    assert attendance_repo.writes == 1
    assert result.to_dict()["geofence"]["nearest_site_name"] == "HQ"


def test_outside_geofence_fails_without_write(build, photos_repo, attendance_repo, fixed_now):
    comparator = FakeComparator()
    orchestrator = build(comparator)

    with pytest.raises(GeofenceViolation) as excinfo:
        orchestrator.check_in(USER, COMPANY, FAR_LAT, -73.0, PHOTO, now=fixed_now)

    assert excinfo.value.distance_meters == pytest.approx(500, abs=1)
    assert excinfo.value.nearest_site_name == "HQ"
    assert excinfo.value.to_dict()["distance_meters"] == 500
    assert comparator.calls == []
    assert photos_repo.rows == []
    assert attendance_repo.writes == 0


def test_face_mismatch_fails_without_write(build, photos_repo, attendance_repo, fixed_now):
    photos_repo.create_primary(company_id=COMPANY, user_id=USER, photo_ref=PHOTO)
    orchestrator = build(FakeComparator(FaceComparison(match=True, confidence=0.69, reason="blurry")))

    with pytest.raises(FaceMismatch) as excinfo:
        orchestrator.check_in(USER, COMPANY, 40.0, -73.0, OTHER_PHOTO, now=fixed_now)

    assert excinfo.value.confidence == 0.69
    assert excinfo.value.reason == "blurry"
    assert attendance_repo.writes == 0


def test_upstream_failure_fails_without_write(build, photos_repo, attendance_repo, fixed_now):
    photos_repo.create_primary(company_id=COMPANY, user_id=USER, photo_ref=PHOTO)
    orchestrator = build(FakeComparator(UpstreamFailure("AI verification failed")))

    with pytest.raises(UpstreamFailure):
        orchestrator.check_in(USER, COMPANY, 40.0, -73.0, OTHER_PHOTO, now=fixed_now)

    assert attendance_repo.writes == 0


def test_missing_credentials_blocks_check_in(build, photos_repo, attendance_repo, fixed_now):
    orchestrator = build(FakeComparator(configured=False))

    with pytest.raises(ConfigurationError):
        orchestrator.check_in(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now)

    assert photos_repo.rows == []
    assert attendance_repo.writes == 0


def test_invalid_input_stops_at_capture(build, geofences_repo, attendance_repo, fixed_now):
    orchestrator = build()

    with pytest.raises(ValidationError):
        orchestrator.check_in(USER, COMPANY, "north", -73.0, PHOTO, now=fixed_now)
    with pytest.raises(ValidationError):
        orchestrator.check_in(USER, COMPANY, 40.0, -73.0, "not-a-photo!", now=fixed_now)

    assert geofences_repo.list_calls == 0
    assert attendance_repo.writes == 0


def test_already_checked_in_discards_pending_enrollment(build, photos_repo, attendance_repo, fixed_now):
    orchestrator = build()
    orchestrator.check_in(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now)
    photos_repo.rows.clear()

    with pytest.raises(AlreadyCheckedIn):
        orchestrator.check_in(USER, COMPANY, 40.0, -73.0, OTHER_PHOTO, now=fixed_now + timedelta(minutes=5))

    assert photos_repo.rows == []
    assert attendance_repo.writes == 1


def test_check_out_after_check_in(build, fixed_now):
    orchestrator = build()
    orchestrator.check_in(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now)

    result = orchestrator.check_out(
        USER, COMPANY, 40.0005, -73.0, OTHER_PHOTO, now=datetime(2026, 3, 2, 17, 30, tzinfo=timezone.utc)
    )

    assert result.action == CheckAction.CHECK_OUT
    assert result.hours_worked == 8.5
    assert result.face.enrolled_now is False
    assert result.states[-1] == FlowState.DONE


def test_check_out_without_check_in_stops_before_geofence_and_face(build, geofences_repo, attendance_repo, fixed_now):
    comparator = FakeComparator()
    orchestrator = build(comparator)

    with pytest.raises(NoCheckInFound):
        orchestrator.check_out(USER, COMPANY, FAR_LAT, -73.0, PHOTO, now=fixed_now)

    assert geofences_repo.list_calls == 0
    assert comparator.calls == []
    assert attendance_repo.writes == 0


def test_second_check_out_stops_before_face(build, fixed_now):
    comparator = FakeComparator()
    orchestrator = build(comparator)
    orchestrator.check_in(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now)
    orchestrator.check_out(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now + timedelta(hours=8))
    calls = len(comparator.calls)

    with pytest.raises(AlreadyCheckedOut):
        orchestrator.check_out(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now + timedelta(hours=9))

    assert len(comparator.calls) == calls


def test_enrollment_storage_failure_keeps_attendance(build, photos_repo, attendance_repo, fixed_now, monkeypatch):
    orchestrator = build()

    def broken_create_primary(**kwargs):
        raise UpstreamFailure("Database query failed")

    monkeypatch.setattr(photos_repo, "create_primary", broken_create_primary)

    result = orchestrator.check_in(USER, COMPANY, 40.0, -73.0, PHOTO, now=fixed_now)

    assert result.face.verified is True
    assert result.face.enrolled_now is False
    assert attendance_repo.writes == 1


def test_clock_used_when_now_not_given(geofences_repo, photos_repo, attendance_repo):
    stamp = datetime(2026, 3, 3, 8, 15, tzinfo=timezone.utc)
    faces = FaceVerificationService(photos_repo, FakeComparator())
    orchestrator = CheckInOrchestrator(
        GeofenceService(geofences_repo), faces, AttendanceRecorder(attendance_repo), clock=lambda: stamp
    )

    result = orchestrator.check_in(USER, COMPANY, 1.0, 1.0, PHOTO)

    assert result.record.check_in_time == stamp
    assert result.location.within_boundary is True
