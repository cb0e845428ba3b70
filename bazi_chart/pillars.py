"""
Four Pillars derivation.

Arithmetic sexagenary rules for the year, month, day and hour pillars,
plus the value types every other module works with. Each pillar carries
its branch's hidden stems, classified as Ten Gods against a reference
stem (the Day Master for natal pillars).
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import swisseph as swe

from bazi_chart.solar_terms import SolarTermSource
from bazi_chart.symbols import (
    EarthlyBranch,
    HeavenlyStem,
    Weight,
    branch_at,
    hidden_stems_of,
    stem_at,
)
from bazi_chart.ten_gods import TenGod, classify

POSITIONS = ("year", "month", "day", "hour")

# Year 4 CE was Jia Zi, the start of the cycle.
YEAR_CYCLE_REFERENCE = 4

# Day-cycle epoch: 1924-02-05 was a Jia Yin day (cycle index 50).
# Cross-checked against 1949-10-01 Jia Zi, 1989-03-16 Yi Hai and
# 2000-01-01 Wu Wu; see tests/test_pillars.py before changing either value.
DAY_CYCLE_EPOCH = date(1924, 2, 5)
DAY_CYCLE_EPOCH_INDEX = 50


def julian_day_number(day: date) -> int:
    """Julian Day Number (the JD at noon) of a Gregorian date."""
    return int(swe.julday(day.year, day.month, day.day, 12.0))


_EPOCH_JDN = julian_day_number(DAY_CYCLE_EPOCH)


# ============================================================
# VALUE TYPES
# ============================================================

@dataclass(frozen=True)
class HiddenStem:
    stem: HeavenlyStem
    ten_god: TenGod
    weight: Weight

    def to_dict(self):
        return {
            "stem": self.stem.pinyin,
            "chinese": self.stem.chinese,
            "element": self.stem.element.value,
            "polarity": self.stem.polarity.value,
            "ten_god": self.ten_god.value,
            "weight": self.weight.value,
        }


@dataclass(frozen=True)
class Pillar:
    position: str  # "year", "month", "day", "hour" or "luck"
    stem: HeavenlyStem
    branch: EarthlyBranch
    hidden_stems: tuple
    ten_god: Optional[TenGod] = None  # None when the stem is the reference itself

    def __str__(self):
        return f"{self.stem.pinyin} {self.branch.pinyin} ({self.stem.polarity.value} {self.stem.element.value} {self.branch.animal})"

    @property
    def cycle_index(self) -> int:
        """Position in the 60-pair cycle (Jia Zi = 0)."""
        return (6 * self.stem.index - 5 * self.branch.index) % 60

    def to_dict(self):
        return {
            "position": self.position,
            "stem": {
                "chinese": self.stem.chinese,
                "pinyin": self.stem.pinyin,
                "element": self.stem.element.value,
                "polarity": self.stem.polarity.value,
            },
            "branch": {
                "chinese": self.branch.chinese,
                "pinyin": self.branch.pinyin,
                "animal": self.branch.animal,
                "element": self.branch.element.value,
                "polarity": self.branch.polarity.value,
            },
            "ten_god": self.ten_god.value if self.ten_god else None,
            "hidden_stems": [h.to_dict() for h in self.hidden_stems],
            "combined": f"{self.stem.pinyin} {self.branch.pinyin}",
            "description": str(self),
        }


@dataclass(frozen=True)
class FourPillars:
    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar

    @property
    def day_master(self) -> HeavenlyStem:
        return self.day.stem

    def __iter__(self):
        return iter((self.year, self.month, self.day, self.hour))

    def by_position(self, position: str) -> Pillar:
        if position not in POSITIONS:
            raise KeyError(position)
        return getattr(self, position)

    def to_dict(self):
        return {position: self.by_position(position).to_dict() for position in POSITIONS}


def build_pillar(position: str, stem: HeavenlyStem, branch: EarthlyBranch,
                 reference: HeavenlyStem) -> Pillar:
    """Assemble a pillar, classifying its stems against `reference`."""
    hidden = tuple(
        HiddenStem(stem=h_stem, ten_god=classify(reference, h_stem), weight=weight)
        for h_stem, weight in hidden_stems_of(branch)
    )
    ten_god = None if (position == "day" and stem == reference) else classify(reference, stem)
    return Pillar(position=position, stem=stem, branch=branch, hidden_stems=hidden, ten_god=ten_god)


def build_four_pillars(year: tuple, month: tuple, day: tuple, hour: tuple) -> FourPillars:
    """
    Build FourPillars from (stem_index, branch_index) pairs.

    The day stem becomes the Day Master that every hidden stem is
    classified against.
    """
    day_master = stem_at(day[0])
    pairs = dict(zip(POSITIONS, (year, month, day, hour)))
    built = {
        position: build_pillar(position, stem_at(s), branch_at(b), day_master)
        for position, (s, b) in pairs.items()
    }
    return FourPillars(**built)


# ============================================================
# PILLAR RULES
# ============================================================

def effective_year(moment: datetime, terms: SolarTermSource) -> int:
    """
    The BaZi year starts at Li Chun (Start of Spring), usually Feb 3-5.
    If born before Li Chun, use the previous year's pillar.
    """
    if moment < terms.li_chun(moment.year):
        return moment.year - 1
    return moment.year


def year_indices(year: int) -> tuple:
    """(stem_index, branch_index) of a BaZi year; negative offsets wrap."""
    return (year - YEAR_CYCLE_REFERENCE) % 10, (year - YEAR_CYCLE_REFERENCE) % 12


# Five Tigers Escape (五虎遁): stem of the Tiger month by year-stem group
TIGER_START_STEMS = {
    0: 2,  # Jia/Ji year → Bing Tiger
    1: 4,  # Yi/Geng year → Wu Tiger
    2: 6,  # Bing/Xin year → Geng Tiger
    3: 8,  # Ding/Ren year → Ren Tiger
    4: 0,  # Wu/Gui year → Jia Tiger
}


def month_stem_index(year_stem_index: int, month_branch_index: int) -> int:
    """
    Month stem by the Five Tigers Escape (Wu Hu Dun) rule.

    Months are counted from Tiger (Yin, branch 2), the first solar-term
    month, not from the civil January.
    """
    start_stem = TIGER_START_STEMS[year_stem_index % 5]
    months_from_tiger = (month_branch_index - 2) % 12
    return (start_stem + months_from_tiger) % 10


def day_cycle_index(day: date) -> int:
    """Sexagenary day index (Jia Zi = 0) from the day-cycle epoch."""
    return (julian_day_number(day) - _EPOCH_JDN + DAY_CYCLE_EPOCH_INDEX) % 60


def day_indices(day: date) -> tuple:
    index = day_cycle_index(day)
    return index % 10, index % 12


def hour_branch_index(hour: int) -> int:
    """
    Chinese hours (shi chen) are 2-hour blocks:
    23:00-00:59 = Zi (0), 01:00-02:59 = Chou (1), ... 21:00-22:59 = Hai (11)
    """
    if hour == 23 or hour == 0:
        return 0
    return ((hour + 1) // 2) % 12


# Five Rats Escape (五鼠遁): stem of the Zi hour by day-stem group
ZI_START_STEMS = {
    0: 0,  # Jia/Ji day → Jia Zi hour
    1: 2,  # Yi/Geng day → Bing Zi hour
    2: 4,  # Bing/Xin day → Wu Zi hour
    3: 6,  # Ding/Ren day → Geng Zi hour
    4: 8,  # Wu/Gui day → Ren Zi hour
}


def hour_stem_index(day_stem_index: int, hour_branch: int) -> int:
    return (ZI_START_STEMS[day_stem_index % 5] + hour_branch) % 10
