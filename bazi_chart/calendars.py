"""
Calendar strategies: where the four (stem, branch) pairs come from.

- LunarCalendar asks lunar_python, which places month boundaries on the
  true solar terms and is the reference for day pillars.
- ArithmeticCalendar uses the engine's own sexagenary rules (pillars.py)
  with a configurable solar-term source.
- PreferPrecise tries the first and falls back to the second when the
  library cannot answer.

Every reading records which path produced it and the solar-term source
its month pillar was read against.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from lunar_python import Solar

from bazi_chart.config import DEFAULT_SETTINGS, Settings
from bazi_chart.errors import CalendarLibraryUnavailable, UnknownStemOrBranch
from bazi_chart.pillars import (
    FourPillars,
    build_four_pillars,
    day_indices,
    effective_year,
    hour_branch_index,
    hour_stem_index,
    month_stem_index,
    year_indices,
)
from bazi_chart.solar_terms import (
    JIE_CHINESE_NAMES,
    JIE_DEFINITIONS,
    JieBoundary,
    SolarTermSource,
    solar_term_source,
)
from bazi_chart.symbols import branch_by_name, stem_by_name

logger = logging.getLogger(__name__)


class CalculationPath(Enum):
    PRECISE = "precise"
    APPROXIMATE = "approximate"


@dataclass(frozen=True)
class SexagenaryReading:
    """
    (stem_index, branch_index) per pillar, tagged with the path that produced it.

    `terms` is the solar-term source the month pillar was read against;
    the luck start age must be measured on the same boundaries.
    """
    year: tuple
    month: tuple
    day: tuple
    hour: tuple
    path: CalculationPath
    terms: Optional[SolarTermSource] = field(default=None, compare=False, repr=False)

    def four_pillars(self) -> FourPillars:
        return build_four_pillars(self.year, self.month, self.day, self.hour)


class CalendarStrategy:
    name = "abstract"

    def read(self, moment: datetime) -> SexagenaryReading:
        raise NotImplementedError


class ArithmeticCalendar(CalendarStrategy):
    """
    Four pillars from sexagenary arithmetic.

    Args:
        terms: solar-term source for the Li Chun year boundary and the
            month branch
        zi_hour_rollover: treat 23:00-23:59 as the start of the next day
    """

    name = "arithmetic"

    def __init__(self, terms: SolarTermSource, zi_hour_rollover: bool = False):
        self.terms = terms
        self.zi_hour_rollover = zi_hour_rollover

    def read(self, moment: datetime) -> SexagenaryReading:
        day = moment.date()
        if self.zi_hour_rollover and moment.hour == 23:
            day += timedelta(days=1)

        year_stem, year_branch = year_indices(effective_year(moment, self.terms))
        month_branch = self.terms.month_branch_index(moment)
        day_stem, day_branch = day_indices(day)
        hour_branch = hour_branch_index(moment.hour)

        return SexagenaryReading(
            year=(year_stem, year_branch),
            month=(month_stem_index(year_stem, month_branch), month_branch),
            day=(day_stem, day_branch),
            hour=(hour_stem_index(day_stem, hour_branch), hour_branch),
            path=CalculationPath.APPROXIMATE,
            terms=self.terms,
        )


# lunar_python names the Jie in Chinese, and in upper-case pinyin for the
# terms it borrows from neighbouring years (e.g. "DA_XUE").
_LUNAR_JIE_NAMES = {
    **{chinese: (name, branch) for chinese, (_, name, _, branch) in zip(JIE_CHINESE_NAMES, JIE_DEFINITIONS)},
    **{name.upper().replace(" ", "_"): (name, branch) for _, name, _, branch in JIE_DEFINITIONS},
}


class LunarSolarTerms(SolarTermSource):
    """
    Jie boundaries as lunar_python places them (exact times, China
    standard time), so the luck start age uses the same boundaries as the
    month pillar of a LunarCalendar reading.

    Raises:
        CalendarLibraryUnavailable: lunar_python could not answer
    """

    name = "lunar"

    def boundaries(self, year: int) -> tuple:
        found = []
        jie = self.following(datetime(year, 1, 1) - timedelta(seconds=1))
        while jie.moment.year == year:
            found.append(jie)
            jie = self.following(jie.moment)
        return tuple(found)

    def previous(self, moment: datetime) -> JieBoundary:
        return self._jie(moment, forward=False)

    def following(self, moment: datetime) -> JieBoundary:
        # getNextJie includes a term falling exactly on the given second
        return self._jie(moment + timedelta(seconds=1), forward=True)

    def _jie(self, moment: datetime, forward: bool) -> JieBoundary:
        try:
            lunar = Solar.fromYmdHms(moment.year, moment.month, moment.day,
                                     moment.hour, moment.minute, moment.second).getLunar()
            jie = lunar.getNextJie() if forward else lunar.getPrevJie()
            at = jie.getSolar()
            name, branch_index = _LUNAR_JIE_NAMES[jie.getName()]
            return JieBoundary(
                datetime(at.getYear(), at.getMonth(), at.getDay(), at.getHour(), at.getMinute(), at.getSecond()),
                name,
                branch_index,
            )
        except Exception as exc:
            raise CalendarLibraryUnavailable(f"lunar_python has no Jie near {moment.isoformat()}: {exc}") from exc


class LunarCalendar(CalendarStrategy):
    """Four pillars from lunar_python's EightChar."""

    name = "lunar"

    def __init__(self, zi_hour_rollover: bool = False):
        # lunar_python sect 1: the day changes at 23:00; sect 2: at midnight
        self.sect = 1 if zi_hour_rollover else 2
        self.terms = LunarSolarTerms()

    def read(self, moment: datetime) -> SexagenaryReading:
        try:
            solar = Solar.fromYmdHms(moment.year, moment.month, moment.day,
                                     moment.hour, moment.minute, moment.second)
            eight_char = solar.getLunar().getEightChar()
            eight_char.setSect(self.sect)
            columns = (eight_char.getYear(), eight_char.getMonth(),
                       eight_char.getDay(), eight_char.getTime())
        except Exception as exc:
            raise CalendarLibraryUnavailable(f"lunar_python failed for {moment.isoformat()}: {exc}") from exc

        # Both neighbouring boundaries must resolve before the reading is trusted
        self.terms.previous(moment)
        self.terms.following(moment)

        year, month, day, hour = (parse_ganzhi(column) for column in columns)
        return SexagenaryReading(year=year, month=month, day=day, hour=hour,
                                 path=CalculationPath.PRECISE, terms=self.terms)


class PreferPrecise(CalendarStrategy):
    """Use `primary`; on CalendarLibraryUnavailable, log and use `fallback`."""

    name = "auto"

    def __init__(self, primary: CalendarStrategy, fallback: CalendarStrategy):
        self.primary = primary
        self.fallback = fallback

    def read(self, moment: datetime) -> SexagenaryReading:
        try:
            return self.primary.read(moment)
        except CalendarLibraryUnavailable as exc:
            logger.warning("Precise calendar unavailable, using %s: %s", self.fallback.name, exc)
            return self.fallback.read(moment)


def parse_ganzhi(text: str) -> tuple:
    """
    Parse a two-character ganzhi such as "庚午" into (stem_index, branch_index).

    Raises:
        UnknownStemOrBranch: the text is not exactly one stem + one branch
    """
    if not isinstance(text, str) or len(text) != 2:
        raise UnknownStemOrBranch(f"Expected a two-character ganzhi, got {text!r}")
    return stem_by_name(text[0]).index, branch_by_name(text[1]).index


def select_calendar(settings: Settings = DEFAULT_SETTINGS) -> CalendarStrategy:
    terms = solar_term_source(settings.solar_terms, settings.solar_term_utc_offset, settings.ephe_path)
    arithmetic = ArithmeticCalendar(terms, settings.zi_hour_rollover)
    if settings.calendar == "arithmetic":
        return arithmetic
    lunar = LunarCalendar(settings.zi_hour_rollover)
    if settings.calendar == "lunar":
        return lunar
    return PreferPrecise(lunar, arithmetic)
