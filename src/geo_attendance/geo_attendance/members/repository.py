from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from ..core.enums import Role
from .model import Company, InviteCode, Membership


class MembershipRepository(Protocol):
    def get(self, *, company_id: str, user_id: str) -> Optional[Membership]:
        raise NotImplementedError

    def add(self, *, company_id: str, user_id: str, role: Role) -> None:
        """Insert a membership; raises AlreadyMember on a uniqueness conflict."""
        raise NotImplementedError


class CompanyRepository(Protocol):
    def create(self, *, company_id: str, name: str, admin_id: str) -> None:
        raise NotImplementedError

    def get(self, company_id: str) -> Optional[Company]:
        raise NotImplementedError


class InviteCodeRepository(Protocol):
    def create(
        self,
        *,
        company_id: str,
        code: str,
        role: Role,
        max_uses: int,
        created_by: str,
        expires_at: Optional[datetime],
    ) -> int:
        """Insert a code; raises InviteCodeTaken if the code already exists."""
        raise NotImplementedError

    def get(self, invite_id: int) -> Optional[InviteCode]:
        raise NotImplementedError

    def get_by_code(self, code: str) -> Optional[InviteCode]:
        raise NotImplementedError

    def claim_use(self, invite_id: int) -> bool:
        """Increment current_uses unless max_uses is reached."""
        raise NotImplementedError

    def release_use(self, invite_id: int) -> None:
        raise NotImplementedError


class InviteCodeTaken(Exception):
    """Generated invite code collides with an existing one."""
