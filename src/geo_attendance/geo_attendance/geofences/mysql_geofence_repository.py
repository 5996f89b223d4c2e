from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Geofence
from .repository import GeofenceRepository


def _to_geofence(r: Dict[str, Any]) -> Geofence:
    return Geofence(
        geofence_id=int(r["geofence_id"]),
        company_id=r["company_id"],
        name=r["name"],
        latitude=float(r["latitude"]),
        longitude=float(r["longitude"]),
        radius_meters=float(r["radius_meters"]),
    )


class MySQLGeofenceRepository(GeofenceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_for_company(self, company_id: str) -> Sequence[Geofence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT geofence_id, company_id, name, latitude, longitude, radius_meters
                FROM geofences
                WHERE company_id=%s
                ORDER BY geofence_id ASC
                """,
                (company_id,),
            )
            return [_to_geofence(r) for r in fetchall(cur)]

    def get(self, *, company_id: str, geofence_id: int) -> Optional[Geofence]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT geofence_id, company_id, name, latitude, longitude, radius_meters
                FROM geofences
                WHERE company_id=%s AND geofence_id=%s
                """,
                (company_id, int(geofence_id)),
            )
            r = fetchone(cur)
            return _to_geofence(r) if r else None

    def create(self, *, company_id: str, name: str, latitude: float, longitude: float, radius_meters: float) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO geofences(company_id, name, latitude, longitude, radius_meters)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (company_id, name, latitude, longitude, radius_meters),
            )
            return int(cur.lastrowid)

    def delete(self, *, company_id: str, geofence_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM geofences WHERE company_id=%s AND geofence_id=%s",
                (company_id, int(geofence_id)),
            )
            return cur.rowcount > 0
