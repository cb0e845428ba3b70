"""
Engine settings.

Settings are read once from the environment and passed down explicitly;
nothing in the engine reads os.environ on its own.

    BAZI_CALENDAR                 lunar | arithmetic | auto   (default: auto)
    BAZI_SOLAR_TERMS              table | ephemeris           (default: table)
    BAZI_SOLAR_TERM_UTC_OFFSET    hours used to place ephemeris terms on a
                                  wall clock when the birth location is
                                  unknown; a located birth uses its own
                                  local mean time             (default: 8.0)
    BAZI_ZI_HOUR_ROLLOVER         1 to start the next day at 23:00
    BAZI_LUCK_PILLARS             number of luck pillars      (default: 8)
    BAZI_EPHE_PATH                Swiss Ephemeris data directory (optional)
"""

import os
from dataclasses import dataclass
from typing import Optional

CALENDAR_CHOICES = ("lunar", "arithmetic", "auto")
SOLAR_TERM_CHOICES = ("table", "ephemeris")

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """Engine configuration"""
    calendar: str = "auto"
    solar_terms: str = "table"
    solar_term_utc_offset: float = 8.0
    zi_hour_rollover: bool = False
    luck_pillar_count: int = 8
    ephe_path: Optional[str] = None

    def __post_init__(self):
        if self.calendar not in CALENDAR_CHOICES:
            raise ValueError(f"calendar must be one of {CALENDAR_CHOICES}, got {self.calendar!r}")
        if self.solar_terms not in SOLAR_TERM_CHOICES:
            raise ValueError(f"solar_terms must be one of {SOLAR_TERM_CHOICES}, got {self.solar_terms!r}")
        if self.luck_pillar_count < 1:
            raise ValueError("luck_pillar_count must be at least 1")

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            calendar=os.getenv("BAZI_CALENDAR", "auto").lower(),
            solar_terms=os.getenv("BAZI_SOLAR_TERMS", "table").lower(),
            solar_term_utc_offset=float(os.getenv("BAZI_SOLAR_TERM_UTC_OFFSET", "8.0")),
            zi_hour_rollover=os.getenv("BAZI_ZI_HOUR_ROLLOVER", "0").lower() in _TRUE_VALUES,
            luck_pillar_count=int(os.getenv("BAZI_LUCK_PILLARS", "8")),
            ephe_path=os.getenv("BAZI_EPHE_PATH") or None,
        )


DEFAULT_SETTINGS = Settings()
