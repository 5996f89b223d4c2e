from __future__ import annotations

from typing import Optional

import mysql.connector

from ..common.datetime_utils import from_db_datetime
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import ReferencePhoto
from .repository import ReferenceAlreadyEnrolled, ReferencePhotoRepository


class MySQLReferencePhotoRepository(ReferencePhotoRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_primary(self, *, company_id: str, user_id: str) -> Optional[ReferencePhoto]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT photo_id, company_id, user_id, photo_ref, created_at
                FROM reference_photos
                WHERE company_id=%s AND user_id=%s AND is_primary=1
                """,
                (company_id, user_id),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ReferencePhoto(
                photo_id=int(r["photo_id"]),
                company_id=r["company_id"],
                user_id=r["user_id"],
                photo_ref=r["photo_ref"],
                is_primary=True,
                created_at=from_db_datetime(r.get("created_at")),
            )

    def create_primary(self, *, company_id: str, user_id: str, photo_ref: str) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO reference_photos(company_id, user_id, photo_ref, is_primary)
                    VALUES(%s,%s,%s,1)
                    """,
                    (company_id, user_id, photo_ref),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as exc:
            raise ReferenceAlreadyEnrolled(str(exc)) from exc

    def delete_for_user(self, *, company_id: str, user_id: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM reference_photos WHERE company_id=%s AND user_id=%s",
                (company_id, user_id),
            )
            return int(cur.rowcount)
