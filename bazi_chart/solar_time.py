"""
True solar time correction.

Clock time is tied to a timezone's standard meridian; BaZi hours are tied
to the Sun. The correction has two parts:

- longitude: (longitude - central meridian) * 4 minutes per degree
- equation of time: a yearly wave of roughly -14 to +16 minutes

Daylight saving is stripped before the correction because solar time is
anchored to the meridian, not to a clock convention.

Conventions:
    Input and output timestamps are local wall-clock strings without a UTC
    offset, formatted YYYY-MM-DDTHH:MM:SS.
"""

import logging
import math
import re
from dataclasses import asdict, dataclass
from datetime import MAXYEAR, MINYEAR, datetime, timedelta, timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bazi_chart.errors import InvalidDateFormat, MissingCoordinates, MissingTimezone

logger = logging.getLogger(__name__)

# Corrections move a time by well under a day, so the edges of datetime's
# range are kept clear.
SUPPORTED_YEARS = range(MINYEAR + 1, MAXYEAR)
MINUTES_PER_DEGREE = 4.0
FALLBACK_WARNING = "True Solar Time not applied (location unknown)."

_TIMESTAMP_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})(?::(\d{2}))?$")


@dataclass(frozen=True)
class SolarTimeResult:
    corrected_local_timestamp: str
    longitude_correction_minutes: float
    equation_of_time_minutes: float
    timezone_id: Optional[str]
    applied: bool
    warning: Optional[str] = None
    display_timestamp: Optional[str] = None  # corrected instant on the zone's civil clock
    dst_active: bool = False
    standard_offset_hours: Optional[float] = None
    central_meridian: Optional[float] = None

    @property
    def total_correction_minutes(self) -> float:
        return self.longitude_correction_minutes + self.equation_of_time_minutes

    def moment(self) -> datetime:
        """The corrected wall-clock time as a naive datetime."""
        return parse_local_timestamp(self.corrected_local_timestamp)

    def to_dict(self) -> dict:
        return asdict(self)


# ============================================================
# PARSING
# ============================================================

def parse_local_timestamp(value) -> datetime:
    """
    Parse a local wall-clock timestamp.

    Accepts YYYY-MM-DDTHH:MM or YYYY-MM-DDTHH:MM:SS for years 2-9998.
    Offsets, fractions and impossible calendar dates are rejected.

    Raises:
        InvalidDateFormat
    """
    if not isinstance(value, str):
        raise InvalidDateFormat(value)
    match = _TIMESTAMP_RE.match(value.strip())
    if match is None:
        raise InvalidDateFormat(value)
    year, month, day, hour, minute, second = (int(g) if g else 0 for g in match.groups())
    if year not in SUPPORTED_YEARS:
        raise InvalidDateFormat(value)
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        raise InvalidDateFormat(value) from None


def format_timestamp(moment: datetime) -> str:
    # strftime does not zero-pad years before 1000 on every platform
    return moment.isoformat(sep="T", timespec="seconds")


# ============================================================
# CORRECTION COMPONENTS
# ============================================================

def longitude_correction(longitude: float, standard_meridian: float = 120.0) -> float:
    """
    Calculate the longitude (Local Mean Time) correction in minutes.

    Args:
        longitude: birth location longitude in degrees (east positive)
        standard_meridian: timezone central meridian (120.0 for China/CST)

    Returns:
        Correction in minutes (negative = subtract from clock time)

    Example:
        Nanning (108.37°E): correction = (108.37 - 120.0) * 4 = -46.52 min
    """
    return (longitude - standard_meridian) * MINUTES_PER_DEGREE


def equation_of_time(day_of_year: int) -> float:
    """
    Approximate equation of time in minutes for a day of the year.

    Sine-wave approximation; the true value swings between about -14 and
    +16 minutes and this stays within a minute of it.
    """
    b = math.radians((360.0 / 365.0) * (day_of_year - 81))
    return 9.87 * math.sin(2 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)


def resolve_zone(timezone_id: Optional[str]) -> ZoneInfo:
    if not timezone_id:
        raise MissingTimezone()
    try:
        return ZoneInfo(timezone_id)
    except (ZoneInfoNotFoundError, ValueError):
        raise MissingTimezone(timezone_id) from None


def standard_offset(local: datetime, zone: ZoneInfo):
    """
    Split the civil UTC offset of a wall-clock time into standard + DST.

    Returns:
        (clock_offset, standard_offset, dst) as timedeltas
    """
    aware = local.replace(tzinfo=zone)
    clock = aware.utcoffset()
    dst = aware.dst() or timedelta(0)
    return clock, clock - dst, dst


def central_meridian_for(timezone_id: str, at: datetime) -> float:
    """Central meridian of a zone's standard (non-DST) time at a given wall-clock time."""
    _, standard, _ = standard_offset(at, resolve_zone(timezone_id))
    return standard.total_seconds() / 3600 * 15


# ============================================================
# TRUE SOLAR TIME
# ============================================================

def true_solar_time(local_timestamp: str, timezone_id: Optional[str],
                    longitude: Optional[float]) -> SolarTimeResult:
    """
    Convert a local clock time to true solar time.

    Args:
        local_timestamp: wall-clock time at the birth place, no UTC offset
        timezone_id: IANA timezone of the birth place (e.g. "Asia/Shanghai")
        longitude: birth longitude in degrees (east positive)

    Raises:
        InvalidDateFormat: the timestamp cannot be parsed
        MissingTimezone: no timezone, or one zoneinfo does not know
        MissingCoordinates: no longitude
    """
    local = parse_local_timestamp(local_timestamp)
    zone = resolve_zone(timezone_id)
    if longitude is None:
        raise MissingCoordinates()

    clock, standard, dst = standard_offset(local, zone)
    dst_active = dst > timedelta(0)
    if dst_active:
        logger.debug("DST active for %s at %s; normalising %s to standard offset %s",
                     timezone_id, local_timestamp, clock, standard)

    standard_local = local - dst
    meridian = standard.total_seconds() / 3600 * 15
    lon_minutes = longitude_correction(longitude, meridian)
    eot_minutes = equation_of_time(standard_local.timetuple().tm_yday)
    shift = timedelta(seconds=round((lon_minutes + eot_minutes) * 60))

    corrected = standard_local + shift

    # Same instant on the zone's civil clock, DST re-applied by zoneinfo
    solar_utc = (local - clock + shift).replace(tzinfo=timezone.utc)
    display = solar_utc.astimezone(zone).replace(tzinfo=None)

    logger.debug("Solar time %s -> %s (longitude %.2f min, EoT %.2f min)",
                 local_timestamp, format_timestamp(corrected), lon_minutes, eot_minutes)

    return SolarTimeResult(
        corrected_local_timestamp=format_timestamp(corrected),
        longitude_correction_minutes=lon_minutes,
        equation_of_time_minutes=eot_minutes,
        timezone_id=timezone_id,
        applied=True,
        display_timestamp=format_timestamp(display),
        dst_active=dst_active,
        standard_offset_hours=standard.total_seconds() / 3600,
        central_meridian=meridian,
    )


def fallback_solar_time(local_timestamp: str, timezone_id: Optional[str] = None) -> SolarTimeResult:
    """
    No-correction path for when the birth location is unknown.

    Returns the parsed timestamp unchanged with zero corrections and a
    warning. Fails only on an unparseable timestamp.
    """
    local = parse_local_timestamp(local_timestamp)
    logger.info("True solar time skipped for %s: location unknown", local_timestamp)
    return SolarTimeResult(
        corrected_local_timestamp=format_timestamp(local),
        longitude_correction_minutes=0.0,
        equation_of_time_minutes=0.0,
        timezone_id=timezone_id,
        applied=False,
        warning=FALLBACK_WARNING,
        display_timestamp=format_timestamp(local),
    )
