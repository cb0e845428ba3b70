"""
Luck Pillars (大运 Da Yun).

Luck pillars step forward or backward from the month pillar, one step per
decade of life. The first step starts at an age derived from the distance
between birth and the nearest Jie solar term (3 days ≈ 1 year).
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Union

from bazi_chart.pillars import Pillar, build_pillar
from bazi_chart.solar_terms import SolarTermSource
from bazi_chart.symbols import EarthlyBranch, HeavenlyStem, Polarity, branch_at, stem_at

logger = logging.getLogger(__name__)

DAYS_PER_LUCK_YEAR = 3.0
YEARS_PER_PILLAR = 10


class Gender(Enum):
    MALE = "male"
    FEMALE = "female"


class LuckDirection(Enum):
    FORWARD = "forward"
    REVERSE = "reverse"

    @property
    def step(self) -> int:
        return 1 if self is LuckDirection.FORWARD else -1


@dataclass(frozen=True)
class LuckPillar:
    index: int  # 1-based step number
    start_age: int
    end_age: int
    pillar: Pillar

    def __str__(self):
        return f"LP{self.index}: {self.pillar.stem.pinyin} {self.pillar.branch.pinyin} ({self.pillar.branch.animal}) ages {self.start_age}-{self.end_age}"

    def to_dict(self):
        return {
            "index": self.index,
            "start_age": self.start_age,
            "end_age": self.end_age,
            "pillar": self.pillar.to_dict(),
            "description": str(self),
        }


def as_gender(value: Union[Gender, str]) -> Gender:
    if isinstance(value, Gender):
        return value
    try:
        return Gender(str(value).lower())
    except ValueError:
        raise ValueError(f"gender must be 'male' or 'female', got {value!r}") from None


def luck_direction(year_stem: HeavenlyStem, gender: Union[Gender, str]) -> LuckDirection:
    """
    Yang year + Male OR Yin year + Female → count FORWARD
    Yang year + Female OR Yin year + Male → count BACKWARD
    """
    year_yang = year_stem.polarity is Polarity.YANG
    male = as_gender(gender) is Gender.MALE
    return LuckDirection.FORWARD if year_yang == male else LuckDirection.REVERSE


def start_age(birth: datetime, direction: LuckDirection, terms: SolarTermSource) -> int:
    """
    Age at which the first luck pillar begins.

    Distance to the next Jie (forward) or the previous Jie (reverse),
    divided by 3 days per year and rounded.
    """
    jie = terms.nearest(birth, forward=direction is LuckDirection.FORWARD)
    days = abs((jie.moment - birth).total_seconds()) / 86400
    age = round(days / DAYS_PER_LUCK_YEAR)
    logger.debug("Luck start: %.2f days to %s (%s) -> age %d", days, jie.name, direction.value, age)
    return age


def luck_pillars(year_stem: HeavenlyStem, month_stem: HeavenlyStem, month_branch: EarthlyBranch,
                 gender: Union[Gender, str], birth: datetime, terms: SolarTermSource,
                 count: int = 8) -> tuple:
    """
    Compute luck pillars.

    Hidden stems are classified against the month stem, not the Day
    Master: luck pillars are read as continuations of the month pillar.

    Args:
        year_stem: natal year stem (decides direction with gender)
        month_stem, month_branch: natal month pillar
        gender: "male" or "female"
        birth: birth wall-clock time (true solar time when available)
        terms: solar-term source for the start age
        count: number of pillars

    Returns:
        Tuple of LuckPillar, ordered by index, ages contiguous
    """
    direction = luck_direction(year_stem, gender)
    first_age = start_age(birth, direction, terms)

    pillars = []
    for n in range(1, count + 1):
        offset = direction.step * n
        stem = stem_at(month_stem.index + offset)
        branch = branch_at(month_branch.index + offset)
        age_start = first_age + (n - 1) * YEARS_PER_PILLAR
        pillars.append(LuckPillar(
            index=n,
            start_age=age_start,
            end_age=age_start + YEARS_PER_PILLAR - 1,
            pillar=build_pillar("luck", stem, branch, month_stem),
        ))
    return tuple(pillars)
