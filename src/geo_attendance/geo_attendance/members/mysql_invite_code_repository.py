from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

import mysql.connector

from ..common.datetime_utils import from_db_datetime, to_db_datetime
from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import InviteCode
from .repository import InviteCodeRepository, InviteCodeTaken

_COLUMNS = "invite_id, company_id, code, role, max_uses, current_uses, created_by, expires_at, created_at"


def _to_invite(r: Dict[str, Any]) -> InviteCode:
    return InviteCode(
        invite_id=int(r["invite_id"]),
        company_id=r["company_id"],
        code=r["code"],
        role=Role(r["role"]),
        max_uses=int(r["max_uses"]),
        current_uses=int(r["current_uses"]),
        created_by=r.get("created_by"),
        expires_at=from_db_datetime(r.get("expires_at")),
        created_at=from_db_datetime(r.get("created_at")),
    )


class MySQLInviteCodeRepository(InviteCodeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO invite_codes(company_id, code, role, max_uses, created_by, expires_at)
                    VALUES(%s,%s,%s,%s,%s,%s)
                    """,
                    (company_id, code, role.value, int(max_uses), created_by, to_db_datetime(expires_at)),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            raise InviteCodeTaken(code) from exc

    def get(self, invite_id: int) -> Optional[InviteCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invite_codes WHERE invite_id=%s", (int(invite_id),))
            r = fetchone(cur)
            return _to_invite(r) if r else None

    def get_by_code(self, code: str) -> Optional[InviteCode]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM invite_codes WHERE code=%s", (code,))
            r = fetchone(cur)
            return _to_invite(r) if r else None

    def claim_use(self, invite_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE invite_codes
                SET current_uses = current_uses + 1
                WHERE invite_id=%s AND current_uses < max_uses
                """,
                (int(invite_id),),
            )
            return cur.rowcount > 0

    def release_use(self, invite_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE invite_codes SET current_uses = current_uses - 1 WHERE invite_id=%s AND current_uses > 0",
                (int(invite_id),),
            )
