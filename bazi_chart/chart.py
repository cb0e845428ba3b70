"""
Chart assembly.
Turns a birth record into a complete BaZi chart: four pillars, luck
pillars, branch interactions and symbolic markers.

Usage from Python:
    from bazi_chart.chart import BirthInput, Coordinates, compute_chart
    chart = compute_chart(BirthInput(
        gender="male", local_timestamp="1990-01-15T14:30:00",
        timezone_id="Asia/Shanghai", coordinates=Coordinates(39.9042, 116.4074),
    ))
    chart.to_dict()

The chart is computed from true solar time when both a timezone and
coordinates are known; otherwise the clock time is used unchanged and
the result carries a warning.
"""

import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Optional

from bazi_chart.analysis import element_distribution
from bazi_chart.calendars import CalculationPath, CalendarStrategy, select_calendar
from bazi_chart.config import Settings
from bazi_chart.errors import GeoResolutionFailed
from bazi_chart.geo import Coordinates, GeoResolver
from bazi_chart.interactions import interaction_matrix
from bazi_chart.luck import Gender, LuckDirection, as_gender, luck_direction, luck_pillars
from bazi_chart.markers import annotate
from bazi_chart.pillars import FourPillars
from bazi_chart.solar_terms import solar_term_source
from bazi_chart.solar_time import SolarTimeResult, fallback_solar_time, true_solar_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BirthInput:
    gender: Gender
    local_timestamp: str  # wall clock at the birth place, "YYYY-MM-DDTHH:MM[:SS]"
    timezone_id: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    def __post_init__(self):
        object.__setattr__(self, "gender", as_gender(self.gender))


@dataclass(frozen=True)
class Chart:
    four_pillars: FourPillars
    luck_pillars: tuple
    interactions: tuple
    markers: tuple
    solar_time: SolarTimeResult
    calculation_path: CalculationPath
    luck_direction: LuckDirection
    element_distribution: MappingProxyType

    @property
    def day_master(self):
        return self.four_pillars.day_master

    def to_dict(self):
        return {
            "four_pillars": self.four_pillars.to_dict(),
            "day_master": {
                "stem": self.day_master.pinyin,
                "chinese": self.day_master.chinese,
                "element": self.day_master.element.value,
                "polarity": self.day_master.polarity.value,
            },
            "luck_direction": self.luck_direction.value,
            "luck_pillars": [lp.to_dict() for lp in self.luck_pillars],
            "interactions": [entry.to_dict() for entry in self.interactions],
            "markers": [marker.to_dict() for marker in self.markers],
            "element_distribution": dict(self.element_distribution),
            "solar_time": self.solar_time.to_dict(),
            "calculation_path": self.calculation_path.value,
        }


def solar_time_for(birth: BirthInput) -> SolarTimeResult:
    """True solar time when the location is known, else the uncorrected fallback."""
    if birth.timezone_id and birth.coordinates is not None:
        return true_solar_time(birth.local_timestamp, birth.timezone_id, birth.coordinates.longitude)
    return fallback_solar_time(birth.local_timestamp, birth.timezone_id)


def locate(birth: BirthInput, resolver: GeoResolver) -> BirthInput:
    """
    Fill in a missing timezone from the birth coordinates.

    A resolver failure leaves the birth record as it was, so the chart
    falls back to uncorrected clock time instead of failing.
    """
    if birth.timezone_id or birth.coordinates is None:
        return birth
    try:
        resolution = resolver.resolve(birth.coordinates.latitude, birth.coordinates.longitude)
    except GeoResolutionFailed as exc:
        logger.warning("Timezone lookup failed, solar time will not be corrected: %s", exc)
        return birth
    if resolution.is_approximate:
        logger.warning("Approximate timezone %s for %s", resolution.timezone_id, resolution.coordinates)
    return replace(birth, timezone_id=resolution.timezone_id)


def solar_term_offset_hours(solar: SolarTimeResult, settings: Settings) -> float:
    """
    UTC offset that puts ephemeris Jie crossings on the birth's clock.

    With a corrected birth time this is the local mean time of the birth
    longitude (standard offset plus the longitude correction); without a
    location the configured offset is used.
    """
    if not solar.applied:
        return settings.solar_term_utc_offset
    return solar.standard_offset_hours + solar.longitude_correction_minutes / 60


def compute_chart(birth: BirthInput, settings: Optional[Settings] = None,
                  calendar: Optional[CalendarStrategy] = None) -> Chart:
    """
    Compute a complete natal chart.

    Args:
        birth: birth record
        settings: engine settings (defaults to Settings())
        calendar: calendar strategy override (defaults to the one the
            settings select)

    Returns:
        Chart

    Raises:
        InvalidDateFormat: unparseable local_timestamp
        MissingTimezone: a timezone was given that zoneinfo does not know
    """
    settings = settings or Settings()
    solar = solar_time_for(birth)
    moment = solar.moment()

    settings = replace(settings, solar_term_utc_offset=solar_term_offset_hours(solar, settings))
    calendar = calendar or select_calendar(settings)

    reading = calendar.read(moment)
    pillars = reading.four_pillars()
    logger.info("Chart for %s (%s): %s %s %s %s [%s]", birth.local_timestamp, solar.corrected_local_timestamp,
                pillars.year, pillars.month, pillars.day, pillars.hour, reading.path.value)

    # Same boundaries as the month pillar
    terms = reading.terms or solar_term_source(settings.solar_terms, settings.solar_term_utc_offset,
                                               settings.ephe_path)
    luck = luck_pillars(
        year_stem=pillars.year.stem,
        month_stem=pillars.month.stem,
        month_branch=pillars.month.branch,
        gender=birth.gender,
        birth=moment,
        terms=terms,
        count=settings.luck_pillar_count,
    )

    return Chart(
        four_pillars=pillars,
        luck_pillars=luck,
        interactions=interaction_matrix(pillars),
        markers=annotate(pillars),
        solar_time=solar,
        calculation_path=reading.path,
        luck_direction=luck_direction(pillars.year.stem, birth.gender),
        element_distribution=MappingProxyType(element_distribution(pillars)),
    )
