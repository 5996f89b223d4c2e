from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from ..attendance.model import AttendanceRecord
from ..attendance.service import AttendanceRecorder
from ..common.datetime_utils import ensure_utc, now_utc
from ..common.validators import require_coordinates, require_non_empty, require_photo
from ..core.constants import MAX_PHOTO_BYTES
from ..core.enums import CheckAction, FlowState
from ..core.exceptions import FaceMismatch, GeofenceViolation, InvalidState, UpstreamFailure
from ..faces.model import FaceVerification
from ..faces.service import FaceVerificationService
from ..geofences.model import LocationCheck
from ..geofences.service import GeofenceService
from .flow import CheckFlow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    action: CheckAction
    record: AttendanceRecord
    location: LocationCheck
    face: FaceVerification
    states: tuple[FlowState, ...]

    @property
    def hours_worked(self) -> Optional[float]:
        return self.record.hours_worked

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "action": self.action.value,
            "attendance": self.record.to_dict(),
            "hours_worked": self.hours_worked,
            "geofence": self.location.to_dict(),
            "face_verification": self.face.to_dict(),
            "states": [s.value for s in self.states],
        }


class CheckInOrchestrator:
    """Runs geofence -> face -> record for one check-in or check-out.

    Steps never retry. Any failure aborts the attempt before the attendance
    row is touched; a first-use enrollment is stored only after the row was
    written.
    """

    def __init__(
        self,
        geofences: GeofenceService,
        faces: FaceVerificationService,
        recorder: AttendanceRecorder,
        *,
        clock: Callable[[], datetime] = now_utc,
        max_photo_bytes: int = MAX_PHOTO_BYTES,
    ):
        self._geofences = geofences
        self._faces = faces
        self._recorder = recorder
        self._clock = clock
        self._max_photo_bytes = int(max_photo_bytes)

    def check_in(
        self, user_id: str, company_id: str, latitude: Any, longitude: Any, photo: Any, *, now: Optional[datetime] = None
    ) -> CheckResult:
        return self._run(CheckAction.CHECK_IN, user_id, company_id, latitude, longitude, photo, now)

    def check_out(
        self, user_id: str, company_id: str, latitude: Any, longitude: Any, photo: Any, *, now: Optional[datetime] = None
    ) -> CheckResult:
        return self._run(CheckAction.CHECK_OUT, user_id, company_id, latitude, longitude, photo, now)

    def _run(
        self,
        action: CheckAction,
        user_id: str,
        company_id: str,
        latitude: Any,
        longitude: Any,
        photo: Any,
        now: Optional[datetime],
    ) -> CheckResult:
        flow = CheckFlow(action)
        try:
            user_id = require_non_empty(user_id, "user_id")
            company_id = require_non_empty(company_id, "company_id")
            lat, lng = require_coordinates(latitude, longitude)
            captured = require_photo(photo, max_bytes=self._max_photo_bytes)
            logger.info("%s requested by user %s for company %s", action.value, user_id, company_id)

            timestamp = ensure_utc(now or self._clock())
            self._require_open(action, user_id, company_id, timestamp)

            flow.advance(FlowState.VALIDATING_GEOFENCE)
            location = self._geofences.validate_location(company_id, lat, lng)
            if not location.within_boundary:
                raise GeofenceViolation(
                    f"Not within geofence: {location.message}",
                    distance_meters=location.distance_meters,
                    nearest_site_name=location.nearest_site_name,
                    nearest_site_radius=location.nearest_site_radius,
                )

            flow.advance(FlowState.VERIFYING_FACE)
            face = self._faces.assess_identity(user_id, company_id, captured.data_url)
            if not face.verified:
                raise FaceMismatch(
                    f"Face verification failed: {face.reason or 'Unknown reason'}",
                    confidence=face.confidence,
                    reason=face.reason,
                )

            flow.advance(FlowState.RECORDING)
            record = self._record(flow, action, user_id, company_id, timestamp, lat, lng, captured.data_url)
            face = self._finish_enrollment(user_id, company_id, face)

            flow.advance(FlowState.DONE)
        except Exception as exc:
            if not flow.terminal:
                flow.fail(str(exc))
            logger.warning(
                "%s for user %s failed at %s: %s",
                action.value,
                user_id,
                flow.failed_at.value if flow.failed_at else flow.state.value,
                exc,
            )
            raise

        logger.info("%s completed for user %s (attendance %s)", action.value, user_id, record.attendance_id)
        return CheckResult(action=action, record=record, location=location, face=face, states=tuple(flow.history))

    def _require_open(self, action: CheckAction, user_id: str, company_id: str, timestamp: datetime) -> None:
        # Read-only; the recorder re-checks when it writes.
        if action == CheckAction.CHECK_IN:
            self._recorder.require_check_in_open(user_id, company_id, timestamp.date())
        else:
            self._recorder.require_check_out_open(user_id, company_id, timestamp.date())

    def _record(
        self,
        flow: CheckFlow,
        action: CheckAction,
        user_id: str,
        company_id: str,
        timestamp: datetime,
        lat: float,
        lng: float,
        photo_ref: str,
    ) -> AttendanceRecord:
        if not flow.may_write:
            raise InvalidState(f"Attendance cannot be written in state {flow.state.value}")
        if action == CheckAction.CHECK_IN:
            return self._recorder.record_check_in(user_id, company_id, timestamp, lat, lng, photo_ref)
        return self._recorder.record_check_out(user_id, company_id, timestamp, lat, lng, photo_ref)

    def _finish_enrollment(self, user_id: str, company_id: str, face: FaceVerification) -> FaceVerification:
        if face.pending_enrollment is None:
            return face
        try:
            enrolled = self._faces.enroll(user_id, company_id, face)
        except UpstreamFailure:
            # The attendance row is already committed; the next check enrolls again.
            logger.exception("Could not store reference photo for user %s", user_id)
            enrolled = False
        return FaceVerification(
            verified=face.verified,
            confidence=face.confidence,
            reason=face.reason,
            enrolled_now=enrolled,
        )
