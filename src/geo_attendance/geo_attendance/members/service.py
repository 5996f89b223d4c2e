from __future__ import annotations

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, Optional

from ..common.datetime_utils import now_utc
from ..common.validators import require_float, require_non_empty, require_photo
from ..core.constants import (
    INVITE_CODE_ALPHABET,
    INVITE_CODE_ATTEMPTS,
    INVITE_CODE_LENGTH,
    MAX_COMPANY_NAME_LENGTH,
    MAX_PHOTO_BYTES,
)
from ..core.enums import Role
from ..core.exceptions import (
    AlreadyMember,
    AuthenticationError,
    AuthorizationError,
    InvalidInviteCode,
    InviteExhausted,
    InviteExpired,
    ReferenceAlreadyRegistered,
    UpstreamFailure,
    ValidationError,
)
from ..faces.service import FaceVerificationService
from .model import Company, InviteCode, Membership
from .repository import CompanyRepository, InviteCodeRepository, InviteCodeTaken, MembershipRepository

logger = logging.getLogger(__name__)

INVITABLE_ROLES = (Role.HR, Role.DEPARTMENT_HEAD, Role.EMPLOYEE)


def generate_invite_code() -> str:
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


class MembershipService:
    def __init__(self, members: MembershipRepository):
        self._members = members

    def require_member(
        self,
        *,
        user_id: Optional[str],
        company_id: str,
        roles: Optional[Iterable[Role]] = None,
    ) -> Membership:
        """Resolve the caller's membership, optionally restricted to `roles`."""
        if not user_id:
            raise AuthenticationError("Not authenticated")
        company_id = require_non_empty(company_id, "company_id")

        membership = self._members.get(company_id=company_id, user_id=str(user_id))
        if not membership:
            raise AuthorizationError("You are not a member of this company")

        if roles is not None and membership.role not in set(roles):
            raise AuthorizationError("You do not have permission for this action")
        return membership


@dataclass(frozen=True)
class CompanyEnrollment:
    """Outcome of creating or joining a company."""

    company: Company
    membership: Membership
    reference_enrolled: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "company": self.company.to_dict(),
            "membership": self.membership.to_dict(),
            "reference_enrolled": self.reference_enrolled,
        }


class CompanyService:
    """Company onboarding: creation, invite codes and joining by code.

    Every new member hands in a face photo, which becomes the primary
    reference for later attendance checks.
    """

    def __init__(
        self,
        companies: CompanyRepository,
        invites: InviteCodeRepository,
        members: MembershipRepository,
        membership_service: MembershipService,
        faces: FaceVerificationService,
        *,
        clock: Callable[[], datetime] = now_utc,
        code_generator: Callable[[], str] = generate_invite_code,
        max_photo_bytes: int = MAX_PHOTO_BYTES,
    ):
        self._companies = companies
        self._invites = invites
        self._members = members
        self._membership_service = membership_service
        self._faces = faces
        self._clock = clock
        self._code_generator = code_generator
        self._max_photo_bytes = int(max_photo_bytes)

    def _require_user(self, user_id: Optional[str]) -> str:
        if not user_id:
            raise AuthenticationError("Not authenticated")
        return str(user_id)

    def _require_face_photo(self, photo: Any) -> str:
        if photo is None or not str(photo).strip():
            raise ValidationError("Face photo is required for security verification")
        return require_photo(photo, max_bytes=self._max_photo_bytes).data_url

    def _store_reference(self, user_id: str, company_id: str, photo: str) -> bool:
        # Membership stands even without a stored reference; the first check enrolls one.
        try:
            self._faces.register_reference(user_id, company_id, photo)
        except ReferenceAlreadyRegistered:
            logger.warning("User %s already has a reference photo in company %s; keeping it", user_id, company_id)
            return False
        except UpstreamFailure:
            logger.exception("Could not store reference photo for user %s in company %s", user_id, company_id)
            return False
        return True

    def create_company(self, *, user_id: Optional[str], name: Any, face_photo: Any) -> CompanyEnrollment:
        user_id = self._require_user(user_id)
        name = require_non_empty(name, "Company name")
        if len(name) > MAX_COMPANY_NAME_LENGTH:
            raise ValidationError(f"Company name must be at most {MAX_COMPANY_NAME_LENGTH} characters")
        photo = self._require_face_photo(face_photo)

        company_id = str(uuid.uuid4())
        self._companies.create(company_id=company_id, name=name, admin_id=user_id)
        self._members.add(company_id=company_id, user_id=user_id, role=Role.ADMIN)
        logger.info("Company %s (%s) created by user %s", company_id, name, user_id)

        enrolled = self._store_reference(user_id, company_id, photo)
        company = self._companies.get(company_id) or Company(company_id=company_id, name=name, admin_id=user_id)
        return CompanyEnrollment(
            company=company,
            membership=Membership(company_id=company_id, user_id=user_id, role=Role.ADMIN),
            reference_enrolled=enrolled,
        )

    def generate_invite(
        self,
        *,
        user_id: Optional[str],
        company_id: str,
        max_uses: Any = None,
        expires_in_days: Any = None,
        role: Any = None,
    ) -> InviteCode:
        self._membership_service.require_member(user_id=user_id, company_id=company_id, roles=(Role.ADMIN,))

        if max_uses in (None, "", 0):
            uses = 1
        elif isinstance(max_uses, bool) or not isinstance(max_uses, int) or max_uses < 0:
            raise ValidationError("max_uses must be a positive integer")
        else:
            uses = max_uses

        expires_at = None
        if expires_in_days not in (None, ""):
            days = require_float(expires_in_days, "expires_in_days")
            if days <= 0:
                raise ValidationError("expires_in_days must be greater than 0")
            expires_at = self._clock() + timedelta(days=days)

        try:
            invite_role = Role(role) if role else Role.EMPLOYEE
        except ValueError:
            raise ValidationError(f"Unknown role: {role}")
        if invite_role not in INVITABLE_ROLES:
            raise ValidationError("Invite codes cannot grant the admin role")

        for _ in range(INVITE_CODE_ATTEMPTS):
            code = self._code_generator()
            try:
                invite_id = self._invites.create(
                    company_id=company_id,
                    code=code,
                    role=invite_role,
                    max_uses=uses,
                    created_by=str(user_id),
                    expires_at=expires_at,
                )
            except InviteCodeTaken:
                logger.warning("Invite code collision, generating another")
                continue
            logger.info("Invite code %s created for company %s (max_uses=%s)", code, company_id, uses)
            invite = self._invites.get(invite_id)
            if invite is None:
                raise UpstreamFailure("Invite code was not persisted")
            return invite

        raise UpstreamFailure("Could not generate a unique invite code")

    def join_company(self, *, user_id: Optional[str], code: Any, face_photo: Any) -> CompanyEnrollment:
        user_id = self._require_user(user_id)
        photo = self._require_face_photo(face_photo)
        code = require_non_empty(code, "code").upper()
        logger.info("User %s attempting to join with code %s", user_id, code)

        invite = self._invites.get_by_code(code)
        if invite is None:
            raise InvalidInviteCode("Invalid invite code")
        if invite.is_expired(self._clock()):
            raise InviteExpired("Invite code has expired")
        if invite.exhausted:
            raise InviteExhausted("Invite code has reached maximum uses")
        if self._members.get(company_id=invite.company_id, user_id=user_id):
            raise AlreadyMember("You are already a member of this company")

        company = self._companies.get(invite.company_id)
        if company is None:
            raise InvalidInviteCode("Invalid invite code")

        if not self._invites.claim_use(invite.invite_id):
            raise InviteExhausted("Invite code has reached maximum uses")
        try:
            self._members.add(company_id=invite.company_id, user_id=user_id, role=invite.role)
        except AlreadyMember:
            self._invites.release_use(invite.invite_id)
            raise

        logger.info("User %s joined company %s as %s", user_id, invite.company_id, invite.role.value)
        enrolled = self._store_reference(user_id, invite.company_id, photo)
        return CompanyEnrollment(
            company=company,
            membership=Membership(company_id=invite.company_id, user_id=user_id, role=invite.role),
            reference_enrolled=enrolled,
        )
