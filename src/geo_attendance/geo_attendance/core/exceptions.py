from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "domain_error"
    http_status = 400

    def to_dict(self) -> dict[str, Any]:
        return {"success": False, "error": self.code, "message": str(self)}


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "invalid_input"


class AuthenticationError(DomainError):
    """Raised when there is no verified caller identity."""

    code = "unauthenticated"
    http_status = 401


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "forbidden"
    http_status = 403


class NotFound(DomainError):
    code = "not_found"
    http_status = 404


class UpstreamFailure(DomainError):
    """Storage or the AI gateway failed or timed out."""

    code = "upstream_failure"
    http_status = 502


class ConfigurationError(DomainError):
    """A required setting (e.g. AI credentials) is missing."""

    code = "configuration_error"
    http_status = 500


class InvalidState(DomainError):
    code = "invalid_state"
    http_status = 409


class AlreadyCheckedIn(DomainError):
    code = "already_checked_in"
    http_status = 409


class AlreadyCheckedOut(DomainError):
    code = "already_checked_out"
    http_status = 409


class NoCheckInFound(DomainError):
    code = "no_check_in_found"
    http_status = 409


class GeofenceViolation(DomainError):
    """Valid request, but outside every configured boundary."""

    code = "geofence_violation"
    http_status = 403

    def __init__(
        self,
        message: str,
        *,
        distance_meters: Optional[float] = None,
        nearest_site_name: Optional[str] = None,
        nearest_site_radius: Optional[float] = None,
    ):
        super().__init__(message)
        self.distance_meters = distance_meters
        self.nearest_site_name = nearest_site_name
        self.nearest_site_radius = nearest_site_radius

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["distance_meters"] = round(self.distance_meters) if self.distance_meters is not None else None
        data["nearest_site_name"] = self.nearest_site_name
        data["nearest_site_radius"] = self.nearest_site_radius
        return data


class FaceMismatch(DomainError):
    """Valid request, but the identity was not confirmed."""

    code = "face_mismatch"
    http_status = 403

    def __init__(self, message: str, *, confidence: float = 0.0, reason: str = ""):
        super().__init__(message)
        self.confidence = confidence
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["confidence"] = self.confidence
        data["reason"] = self.reason
        return data


class ReferenceAlreadyRegistered(DomainError):
    code = "reference_already_enrolled"
    http_status = 409


class AlreadyMember(DomainError):
    code = "already_member"
    http_status = 409


class InvalidInviteCode(DomainError):
    code = "invalid_invite_code"
    http_status = 404


class InviteExpired(DomainError):
    code = "invite_expired"
    http_status = 410


class InviteExhausted(DomainError):
    """The invite code has reached its maximum number of uses."""

    code = "invite_exhausted"
    http_status = 409
