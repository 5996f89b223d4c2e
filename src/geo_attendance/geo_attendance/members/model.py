from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import Role


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Membership:
    """Domain entity: a user's role within one company."""

    company_id: str
    user_id: str
    role: Role

    def to_dict(self) -> dict[str, Any]:
        return {"company_id": self.company_id, "user_id": self.user_id, "role": self.role.value}


@dataclass(frozen=True)
class Company:
    company_id: str
    name: str
    admin_id: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.company_id,
            "name": self.name,
            "admin_id": self.admin_id,
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class InviteCode:
    """A shareable code that lets users join a company with a given role."""

    invite_id: int
    company_id: str
    code: str
    role: Role
    max_uses: int
    current_uses: int = 0
    created_by: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    @property
    def exhausted(self) -> bool:
        return self.current_uses >= self.max_uses

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.invite_id,
            "company_id": self.company_id,
            "code": self.code,
            "role": self.role.value,
            "max_uses": self.max_uses,
            "current_uses": self.current_uses,
            "expires_at": _iso(self.expires_at),
            "created_at": _iso(self.created_at),
        }
