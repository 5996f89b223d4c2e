from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Geofence:
    """A named circular site boundary belonging to one company."""

    geofence_id: int
    company_id: str
    name: str
    latitude: float
    longitude: float
    radius_meters: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.geofence_id,
            "company_id": self.company_id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius_meters": self.radius_meters,
        }


@dataclass(frozen=True)
class LocationCheck:
    """Result of validating a coordinate against a company's geofences.

    All site fields are None when the company has no geofence configured.
    """

    within_boundary: bool
    distance_meters: Optional[float] = None
    nearest_site_name: Optional[str] = None
    nearest_site_radius: Optional[float] = None

    @property
    def configured(self) -> bool:
        return self.nearest_site_name is not None

    @property
    def message(self) -> str:
        if not self.configured:
            return "No geofence configured"
        if self.within_boundary:
            return "Within geofence"
        return f"{round(self.distance_meters or 0)}m away from {self.nearest_site_name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "within_boundary": self.within_boundary,
            "distance_meters": round(self.distance_meters) if self.distance_meters is not None else None,
            "nearest_site_name": self.nearest_site_name,
            "nearest_site_radius": self.nearest_site_radius,
            "message": self.message,
        }
