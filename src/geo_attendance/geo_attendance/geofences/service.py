from __future__ import annotations

import logging
from typing import Any, Sequence

from ..common.geo import haversine_meters
from ..common.validators import require_coordinates, require_non_empty, require_positive
from ..core.constants import DEFAULT_GEOFENCE_RADIUS_METERS
from ..core.exceptions import NotFound, ValidationError
from .model import Geofence, LocationCheck
from .repository import GeofenceRepository

logger = logging.getLogger(__name__)


class GeofenceService:
    def __init__(self, geofences: GeofenceRepository):
        self._geofences = geofences

    def validate_location(self, company_id: str, latitude: Any, longitude: Any) -> LocationCheck:
        """Check a coordinate against every site registered for the company.

        A company without geofences allows any location. Otherwise the first
        site whose radius contains the point wins; when none does, the
        globally nearest site is reported.
        """
        company_id = require_non_empty(company_id, "company_id")
        lat, lng = require_coordinates(latitude, longitude)

        sites = self._geofences.list_for_company(company_id)
        if not sites:
            logger.info("No geofence configured for company %s", company_id)
            return LocationCheck(within_boundary=True)

        nearest: Geofence = sites[0]
        min_distance = float("inf")
        within = False

        for site in sites:
            distance = haversine_meters(lat, lng, site.latitude, site.longitude)
            logger.debug("Distance to %s: %.1fm (limit %.1fm)", site.name, distance, site.radius_meters)

            if distance < min_distance:
                min_distance = distance
                nearest = site

            if distance <= site.radius_meters:
                within = True
                break

        result = LocationCheck(
            within_boundary=within,
            distance_meters=min_distance,
            nearest_site_name=nearest.name,
            nearest_site_radius=nearest.radius_meters,
        )
        logger.info("Geofence check for company %s: %s", company_id, result.message)
        return result

    def list_geofences(self, company_id: str) -> Sequence[Geofence]:
        return self._geofences.list_for_company(require_non_empty(company_id, "company_id"))

    def create_geofence(
        self,
        *,
        company_id: str,
        name: Any,
        latitude: Any,
        longitude: Any,
        radius_meters: Any = DEFAULT_GEOFENCE_RADIUS_METERS,
    ) -> Geofence:
        company_id = require_non_empty(company_id, "company_id")
        name = require_non_empty(name, "name")
        lat, lng = require_coordinates(latitude, longitude)
        if lat == 0 and lng == 0:
            raise ValidationError("Please set a location for the geofence")
        radius = require_positive(
            DEFAULT_GEOFENCE_RADIUS_METERS if radius_meters is None else radius_meters,
            "radius_meters",
        )

        geofence_id = self._geofences.create(
            company_id=company_id, name=name, latitude=lat, longitude=lng, radius_meters=radius
        )
        logger.info("Created geofence %s (%s) for company %s", geofence_id, name, company_id)
        return Geofence(
            geofence_id=geofence_id,
            company_id=company_id,
            name=name,
            latitude=lat,
            longitude=lng,
            radius_meters=radius,
        )

    def delete_geofence(self, *, company_id: str, geofence_id: int) -> None:
        if not self._geofences.delete(company_id=company_id, geofence_id=int(geofence_id)):
            raise NotFound("Geofence not found")
        logger.info("Deleted geofence %s of company %s", geofence_id, company_id)
