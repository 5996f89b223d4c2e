from __future__ import annotations

from typing import Optional

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import AlreadyMember
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Membership
from .repository import MembershipRepository


class MySQLMembershipRepository(MembershipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, *, company_id: str, user_id: str) -> Optional[Membership]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT company_id, user_id, role
                FROM company_members
                WHERE company_id=%s AND user_id=%s
                """,
                (company_id, user_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Membership(company_id=r["company_id"], user_id=r["user_id"], role=Role(r["role"]))

    def add(self, *, company_id: str, user_id: str, role: Role) -> None:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO company_members(company_id, user_id, role) VALUES(%s,%s,%s)",
                    (company_id, user_id, role.value),
                )
        except mysql.connector.IntegrityError as exc:
            raise AlreadyMember("You are already a member of this company") from exc
