from __future__ import annotations

from typing import Optional

from ..common.datetime_utils import from_db_datetime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Company
from .repository import CompanyRepository


class MySQLCompanyRepository(CompanyRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, *, company_id: str, name: str, admin_id: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO companies(company_id, name, admin_id) VALUES(%s,%s,%s)",
                (company_id, name, admin_id),
            )

    def get(self, company_id: str) -> Optional[Company]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT company_id, name, admin_id, created_at FROM companies WHERE company_id=%s",
                (company_id,),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Company(
                company_id=r["company_id"],
                name=r["name"],
                admin_id=r["admin_id"],
                created_at=from_db_datetime(r.get("created_at")),
            )
