from __future__ import annotations

import logging
from typing import Any, Optional

from ..common.validators import require_non_empty, require_photo
from ..core.constants import ENROLLMENT_CONFIDENCE, FACE_MATCH_THRESHOLD, MAX_PHOTO_BYTES
from ..core.exceptions import NotFound, ReferenceAlreadyRegistered
from .comparator import FaceComparator
from .model import FaceVerification, ReferencePhoto
from .repository import ReferenceAlreadyEnrolled, ReferencePhotoRepository

logger = logging.getLogger(__name__)


class FaceVerificationService:
    """Trust-on-first-use enrollment, then model-based comparison."""

    def __init__(
        self,
        photos: ReferencePhotoRepository,
        comparator: FaceComparator,
        *,
        match_threshold: float = FACE_MATCH_THRESHOLD,
        max_photo_bytes: int = MAX_PHOTO_BYTES,
    ):
        self._photos = photos
        self._comparator = comparator
        self._threshold = float(match_threshold)
        self._max_photo_bytes = int(max_photo_bytes)

    def assess_identity(self, user_id: str, company_id: str, captured_photo: Any) -> FaceVerification:
        """Decide whether the photo confirms the user, without storing anything.

        When no reference exists the result is verified and carries the photo
        in `pending_enrollment`; call `enroll` to store it.
        """
        # Without credentials no check can run, enrollment included.
        self._comparator.ensure_configured()

        user_id = require_non_empty(user_id, "user_id")
        company_id = require_non_empty(company_id, "company_id")
        photo = require_photo(captured_photo, max_bytes=self._max_photo_bytes)

        reference = self._photos.get_primary(company_id=company_id, user_id=user_id)
        if reference is None:
            logger.info("No reference photo for user %s in company %s, enrolling", user_id, company_id)
            return FaceVerification(
                verified=True,
                confidence=ENROLLMENT_CONFIDENCE,
                reason="First photo registered as reference",
                enrolled_now=True,
                pending_enrollment=photo.data_url,
            )

        return self._compare(reference, photo.data_url)

    def _compare(self, reference: ReferencePhoto, captured: str) -> FaceVerification:
        comparison = self._comparator.compare(reference_photo=reference.photo_ref, captured_photo=captured)
        verified = comparison.match is True and comparison.confidence > self._threshold
        return FaceVerification(
            verified=verified,
            confidence=comparison.confidence,
            reason=comparison.reason,
            enrolled_now=False,
        )

    def enroll(self, user_id: str, company_id: str, verification: FaceVerification) -> bool:
        """Store a pending enrollment. Returns False if another request won."""
        if not verification.pending_enrollment:
            return False
        try:
            photo_id = self._photos.create_primary(
                company_id=company_id, user_id=user_id, photo_ref=verification.pending_enrollment
            )
        except ReferenceAlreadyEnrolled:
            logger.warning("Reference photo for user %s in company %s was enrolled concurrently", user_id, company_id)
            return False
        logger.info("Enrolled reference photo %s for user %s in company %s", photo_id, user_id, company_id)
        return True

    def verify_identity(self, user_id: str, company_id: str, captured_photo: Any) -> FaceVerification:
        result = self.assess_identity(user_id, company_id, captured_photo)
        if result.pending_enrollment is None:
            return result

        if self.enroll(user_id, company_id, result):
            return FaceVerification(
                verified=True,
                confidence=result.confidence,
                reason=result.reason,
                enrolled_now=True,
            )

        # Lost the enrollment race: compare against the reference that won.
        reference = self._photos.get_primary(company_id=company_id, user_id=user_id)
        if reference is None:
            raise NotFound("Reference photo disappeared during enrollment")
        return self._compare(reference, result.pending_enrollment)

    def register_reference(self, user_id: str, company_id: str, photo: Any) -> ReferencePhoto:
        """Store `photo` as the user's primary reference (onboarding or admin action)."""
        user_id = require_non_empty(user_id, "user_id")
        company_id = require_non_empty(company_id, "company_id")
        captured = require_photo(photo, max_bytes=self._max_photo_bytes)

        try:
            photo_id = self._photos.create_primary(company_id=company_id, user_id=user_id, photo_ref=captured.data_url)
        except ReferenceAlreadyEnrolled as exc:
            raise ReferenceAlreadyRegistered("A reference photo is already enrolled for this user") from exc

        logger.info("Registered reference photo %s for user %s in company %s", photo_id, user_id, company_id)
        return ReferencePhoto(photo_id=photo_id, company_id=company_id, user_id=user_id, photo_ref=captured.data_url)

    def get_reference(self, user_id: str, company_id: str) -> Optional[ReferencePhoto]:
        return self._photos.get_primary(company_id=company_id, user_id=user_id)

    def reset_reference(self, user_id: str, company_id: str) -> None:
        """Remove the enrolled reference so the next check enrolls again."""
        deleted = self._photos.delete_for_user(company_id=company_id, user_id=user_id)
        if not deleted:
            raise NotFound("No reference photo enrolled for this user")
        logger.info("Reset reference photo for user %s in company %s", user_id, company_id)
