from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Geofence


class GeofenceRepository(Protocol):
    def list_for_company(self, company_id: str) -> Sequence[Geofence]:
        raise NotImplementedError

    def get(self, *, company_id: str, geofence_id: int) -> Optional[Geofence]:
        raise NotImplementedError

    def create(self, *, company_id: str, name: str, latitude: float, longitude: float, radius_meters: float) -> int:
        raise NotImplementedError

    def delete(self, *, company_id: str, geofence_id: int) -> bool:
        raise NotImplementedError
