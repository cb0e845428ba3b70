"""
Geo Resolver collaborator.

The engine does not geocode. It accepts anything with a
resolve(latitude, longitude) method returning a GeoResolution; the
default implementation only looks up the IANA timezone for coordinates
with timezonefinder. Historical DST rules then come from zoneinfo.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from timezonefinder import TimezoneFinder

from bazi_chart.errors import GeoResolutionFailed

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not -90.0 <= self.latitude <= 90.0:
            raise ValueError(f"latitude out of range: {self.latitude}")
        if not -180.0 <= self.longitude <= 180.0:
            raise ValueError(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True)
class GeoResolution:
    coordinates: Coordinates
    timezone_id: Optional[str]
    is_approximate: bool = False


class GeoResolver:
    def resolve(self, latitude: float, longitude: float) -> GeoResolution:
        raise NotImplementedError


class TimezoneFinderResolver(GeoResolver):
    """Timezone lookup from coordinates (offline, polygon based)."""

    def __init__(self, finder: Optional[TimezoneFinder] = None):
        self._finder = finder

    @property
    def finder(self) -> TimezoneFinder:
        if self._finder is None:
            self._finder = TimezoneFinder()
        return self._finder

    def resolve(self, latitude: float, longitude: float) -> GeoResolution:
        coordinates = Coordinates(latitude, longitude)
        tz_name = self.finder.timezone_at(lat=latitude, lng=longitude)
        if tz_name is None:
            raise GeoResolutionFailed(f"Could not determine timezone for ({latitude}, {longitude})")
        logger.debug("Resolved (%s, %s) to %s", latitude, longitude, tz_name)
        # Ocean zones (Etc/GMT±N) follow nautical offsets, not a civil clock
        return GeoResolution(coordinates, tz_name, is_approximate=tz_name.startswith("Etc/"))
