from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class ReferencePhoto:
    """Enrolled baseline image of a user within one company."""

    photo_id: int
    company_id: str
    user_id: str
    photo_ref: str
    is_primary: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class FaceComparison:
    """Structured judgment returned by the comparison model."""

    match: bool
    confidence: float
    reason: str


@dataclass(frozen=True)
class FaceVerification:
    verified: bool
    confidence: float
    reason: str
    enrolled_now: bool = False
    # Set by assess_identity when the photo still has to be stored as reference.
    pending_enrollment: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "verified": self.verified,
            "confidence": self.confidence,
            "reason": self.reason,
            "enrolled_now": self.enrolled_now,
        }
