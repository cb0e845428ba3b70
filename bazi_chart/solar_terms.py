"""
Solar term (节 Jie) boundaries.

The 12 Jie solar terms mark BaZi month boundaries. Each Jie is defined by
the Sun reaching a specific ecliptic longitude:

    Xiao Han (285°)   → Chou (Ox)        Li Qiu (135°)  → Shen (Monkey)
    Li Chun (315°)    → Yin (Tiger)      Bai Lu (165°)  → You (Rooster)
    Jing Zhe (345°)   → Mao (Rabbit)     Han Lu (195°)  → Xu (Dog)
    Qing Ming (15°)   → Chen (Dragon)    Li Dong (225°) → Hai (Pig)
    Li Xia (45°)      → Si (Snake)       Da Xue (255°)  → Zi (Rat)
    Mang Zhong (75°)  → Wu (Horse)
    Xiao Shu (105°)   → Wei (Goat)

Two sources are available:

- FixedSolarTerms: a civil-date table. Real crossings drift by about one
  day from year to year, so a birth within a day of a boundary can land in
  the neighbouring month and shift the luck start age by up to a year.
- EphemerisSolarTerms: exact crossings from Swiss Ephemeris, placed on a
  wall clock with a fixed UTC offset (China standard time by default).
"""

import logging
from dataclasses import dataclass
from datetime import MAXYEAR, MINYEAR, datetime, timedelta
from functools import lru_cache
from typing import Optional

import swisseph as swe

from bazi_chart.errors import UnknownStemOrBranch

logger = logging.getLogger(__name__)

LI_CHUN_BRANCH = 2  # Yin, first month of the BaZi year

# (longitude, term_name, branch_pinyin, branch_index)
JIE_DEFINITIONS = (
    (285, "Xiao Han", "Chou", 1),
    (315, "Li Chun", "Yin", 2),
    (345, "Jing Zhe", "Mao", 3),
    (15, "Qing Ming", "Chen", 4),
    (45, "Li Xia", "Si", 5),
    (75, "Mang Zhong", "Wu", 6),
    (105, "Xiao Shu", "Wei", 7),
    (135, "Li Qiu", "Shen", 8),
    (165, "Bai Lu", "You", 9),
    (195, "Han Lu", "Xu", 10),
    (225, "Li Dong", "Hai", 11),
    (255, "Da Xue", "Zi", 0),
)

# Chinese names of the Jie, in the same order as JIE_DEFINITIONS.
JIE_CHINESE_NAMES = (
    "小寒", "立春", "惊蛰", "清明", "立夏", "芒种",
    "小暑", "立秋", "白露", "寒露", "立冬", "大雪",
)

# Typical civil dates of each Jie, in the same order as JIE_DEFINITIONS.
FIXED_JIE_DATES = (
    (1, 6), (2, 4), (3, 6), (4, 5), (5, 6), (6, 6),
    (7, 7), (8, 8), (9, 8), (10, 8), (11, 7), (12, 7),
)


@dataclass(frozen=True)
class JieBoundary:
    moment: datetime
    name: str
    branch_index: int


class SolarTermSource:
    """Base class: subclasses supply boundaries(year)."""

    name = "abstract"

    def boundaries(self, year: int) -> tuple:
        """All 12 Jie boundaries within a Gregorian year, chronological."""
        raise NotImplementedError

    def _around(self, year: int) -> list:
        terms = []
        for y in (year - 1, year, year + 1):
            if not MINYEAR <= y <= MAXYEAR:
                continue
            terms.extend(self.boundaries(y))
        return terms

    def li_chun(self, year: int) -> datetime:
        for jie in self.boundaries(year):
            if jie.branch_index == LI_CHUN_BRANCH:
                return jie.moment
        raise UnknownStemOrBranch(f"No Li Chun boundary in {year}")

    def month_branch_index(self, moment: datetime) -> int:
        """Branch index of the BaZi month containing `moment`."""
        return self.previous(moment).branch_index

    def previous(self, moment: datetime) -> JieBoundary:
        """Latest boundary at or before `moment`."""
        for jie in reversed(self._around(moment.year)):
            if jie.moment <= moment:
                return jie
        raise ValueError(f"Could not find previous Jie from {moment}")

    def following(self, moment: datetime) -> JieBoundary:
        """Earliest boundary strictly after `moment`."""
        for jie in self._around(moment.year):
            if jie.moment > moment:
                return jie
        raise ValueError(f"Could not find next Jie from {moment}")

    def nearest(self, moment: datetime, forward: bool) -> JieBoundary:
        return self.following(moment) if forward else self.previous(moment)


class FixedSolarTerms(SolarTermSource):
    """Jie boundaries from a fixed civil-date table, starting at local midnight."""

    name = "table"

    def boundaries(self, year: int) -> tuple:
        return _fixed_boundaries(year)


class EphemerisSolarTerms(SolarTermSource):
    """
    Jie boundaries from Swiss Ephemeris solar longitude crossings.

    Args:
        utc_offset_hours: offset used to turn crossing instants (UT) into
            wall-clock datetimes comparable with the birth time
        ephe_path: Swiss Ephemeris data directory; without data files the
            built-in Moshier ephemeris is used
    """

    name = "ephemeris"

    def __init__(self, utc_offset_hours: float = 8.0, ephe_path: Optional[str] = None):
        self.utc_offset_hours = utc_offset_hours
        if ephe_path:
            swe.set_ephe_path(ephe_path)

    def boundaries(self, year: int) -> tuple:
        return _ephemeris_boundaries(year, self.utc_offset_hours)


def solar_term_source(name: str, utc_offset_hours: float = 8.0,
                      ephe_path: Optional[str] = None) -> SolarTermSource:
    if name == "table":
        return FixedSolarTerms()
    if name == "ephemeris":
        return EphemerisSolarTerms(utc_offset_hours, ephe_path)
    raise ValueError(f"Unknown solar term source: {name!r}")


# ============================================================
# TABLE CONSTRUCTION
# ============================================================

@lru_cache(maxsize=512)
def _fixed_boundaries(year: int) -> tuple:
    return tuple(
        JieBoundary(datetime(year, month, day), name, branch_idx)
        for (_, name, _, branch_idx), (month, day) in zip(JIE_DEFINITIONS, FIXED_JIE_DATES)
    )


@lru_cache(maxsize=512)
def _ephemeris_boundaries(year: int, utc_offset_hours: float) -> tuple:
    """
    Compute all 12 Jie crossings for a Gregorian year.

    Finds the moment the Sun crosses each Jie longitude, searching from
    the start of the year, and keeps the crossings that fall in the year.
    """
    results = []
    jd_year_start = swe.julday(year, 1, 1, 0)

    for lon, name, _, branch_idx in JIE_DEFINITIONS:
        jd_cross = swe.solcross_ut(float(lon), jd_year_start, swe.FLG_SWIEPH)
        y, m, d, h = swe.revjul(jd_cross)
        moment = datetime(y, m, d) + timedelta(hours=h + utc_offset_hours)
        # Only include crossings that fall within this Gregorian year
        if moment.year == year:
            results.append(JieBoundary(moment.replace(microsecond=0), name, branch_idx))

    results.sort(key=lambda jie: jie.moment)
    logger.debug("Computed %d Jie crossings for %d", len(results), year)
    return tuple(results)
