"""
Stems, branches and their fixed attributes.

The 10 Heavenly Stems and 12 Earthly Branches are closed, ordered sets.
Every table in this module is exhaustive over its domain and built once
at import; nothing here is mutated afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Union

from bazi_chart.errors import UnknownStemOrBranch


# ============================================================
# FUNDAMENTAL DATA STRUCTURES
# ============================================================

class Polarity(Enum):
    YANG = "yang"
    YIN = "yin"


class Element(Enum):
    WOOD = "wood"
    FIRE = "fire"
    EARTH = "earth"
    METAL = "metal"
    WATER = "water"


class Weight(Enum):
    """Strength of a hidden stem inside its branch."""
    WEAK = "weak"
    MEDIUM = "medium"
    STRONG = "strong"


@dataclass(frozen=True)
class HeavenlyStem:
    chinese: str
    pinyin: str
    element: Element
    polarity: Polarity
    index: int  # 0-9 in the cycle

    def __str__(self):
        return f"{self.pinyin} ({self.polarity.value} {self.element.value})"


@dataclass(frozen=True)
class EarthlyBranch:
    chinese: str
    pinyin: str
    animal: str
    element: Element  # principal/season element
    polarity: Polarity
    index: int  # 0-11 in the cycle

    def __str__(self):
        return f"{self.pinyin} ({self.animal})"


# ============================================================
# STEM AND BRANCH DEFINITIONS
# ============================================================

HEAVENLY_STEMS = (
    HeavenlyStem("甲", "Jia", Element.WOOD, Polarity.YANG, 0),
    HeavenlyStem("乙", "Yi", Element.WOOD, Polarity.YIN, 1),
    HeavenlyStem("丙", "Bing", Element.FIRE, Polarity.YANG, 2),
    HeavenlyStem("丁", "Ding", Element.FIRE, Polarity.YIN, 3),
    HeavenlyStem("戊", "Wu", Element.EARTH, Polarity.YANG, 4),
    HeavenlyStem("己", "Ji", Element.EARTH, Polarity.YIN, 5),
    HeavenlyStem("庚", "Geng", Element.METAL, Polarity.YANG, 6),
    HeavenlyStem("辛", "Xin", Element.METAL, Polarity.YIN, 7),
    HeavenlyStem("壬", "Ren", Element.WATER, Polarity.YANG, 8),
    HeavenlyStem("癸", "Gui", Element.WATER, Polarity.YIN, 9),
)

EARTHLY_BRANCHES = (
    EarthlyBranch("子", "Zi", "Rat", Element.WATER, Polarity.YANG, 0),
    EarthlyBranch("丑", "Chou", "Ox", Element.EARTH, Polarity.YIN, 1),
    EarthlyBranch("寅", "Yin", "Tiger", Element.WOOD, Polarity.YANG, 2),
    EarthlyBranch("卯", "Mao", "Rabbit", Element.WOOD, Polarity.YIN, 3),
    EarthlyBranch("辰", "Chen", "Dragon", Element.EARTH, Polarity.YANG, 4),
    EarthlyBranch("巳", "Si", "Snake", Element.FIRE, Polarity.YIN, 5),
    EarthlyBranch("午", "Wu", "Horse", Element.FIRE, Polarity.YANG, 6),
    EarthlyBranch("未", "Wei", "Goat", Element.EARTH, Polarity.YIN, 7),
    EarthlyBranch("申", "Shen", "Monkey", Element.METAL, Polarity.YANG, 8),
    EarthlyBranch("酉", "You", "Rooster", Element.METAL, Polarity.YIN, 9),
    EarthlyBranch("戌", "Xu", "Dog", Element.EARTH, Polarity.YANG, 10),
    EarthlyBranch("亥", "Hai", "Pig", Element.WATER, Polarity.YIN, 11),
)

# Hidden stems per branch: [main qi, middle qi, residual qi]
_HIDDEN_STEMS = {
    "Zi": (("Gui", Weight.STRONG),),
    "Chou": (("Ji", Weight.MEDIUM), ("Gui", Weight.WEAK), ("Xin", Weight.WEAK)),
    "Yin": (("Jia", Weight.STRONG), ("Bing", Weight.MEDIUM), ("Wu", Weight.WEAK)),
    "Mao": (("Yi", Weight.STRONG),),
    "Chen": (("Wu", Weight.MEDIUM), ("Yi", Weight.WEAK), ("Gui", Weight.WEAK)),
    "Si": (("Bing", Weight.STRONG), ("Wu", Weight.MEDIUM), ("Geng", Weight.WEAK)),
    "Wu": (("Ding", Weight.STRONG), ("Ji", Weight.MEDIUM)),
    "Wei": (("Ji", Weight.MEDIUM), ("Ding", Weight.WEAK), ("Yi", Weight.WEAK)),
    "Shen": (("Geng", Weight.STRONG), ("Ren", Weight.MEDIUM), ("Wu", Weight.WEAK)),
    "You": (("Xin", Weight.STRONG),),
    "Xu": (("Wu", Weight.MEDIUM), ("Xin", Weight.WEAK), ("Ding", Weight.WEAK)),
    "Hai": (("Ren", Weight.STRONG), ("Jia", Weight.MEDIUM)),
}

# Lookup helpers. Chinese characters and pinyin both resolve; "Wu" is a
# stem (戊) and a branch (午), so stems and branches keep separate maps.
STEM_BY_NAME = MappingProxyType(
    {**{s.pinyin: s for s in HEAVENLY_STEMS}, **{s.chinese: s for s in HEAVENLY_STEMS}}
)
BRANCH_BY_NAME = MappingProxyType(
    {**{b.pinyin: b for b in EARTHLY_BRANCHES}, **{b.chinese: b for b in EARTHLY_BRANCHES}}
)

HIDDEN_STEMS = MappingProxyType({
    BRANCH_BY_NAME[branch]: tuple((STEM_BY_NAME[stem], weight) for stem, weight in entries)
    for branch, entries in _HIDDEN_STEMS.items()
})

if len(HIDDEN_STEMS) != len(EARTHLY_BRANCHES):
    raise UnknownStemOrBranch("hidden stem table does not cover every branch")


# ============================================================
# LOOKUPS
# ============================================================

def stem_at(index: int) -> HeavenlyStem:
    """Stem at a cycle position; any integer wraps into 0-9."""
    return HEAVENLY_STEMS[index % 10]


def branch_at(index: int) -> EarthlyBranch:
    """Branch at a cycle position; any integer wraps into 0-11."""
    return EARTHLY_BRANCHES[index % 12]


def stem_by_name(name: str) -> HeavenlyStem:
    try:
        return STEM_BY_NAME[name]
    except KeyError:
        raise UnknownStemOrBranch(f"Unknown stem: {name!r}") from None


def branch_by_name(name: str) -> EarthlyBranch:
    try:
        return BRANCH_BY_NAME[name]
    except KeyError:
        raise UnknownStemOrBranch(f"Unknown branch: {name!r}") from None


def element_of(stem: HeavenlyStem) -> Element:
    return _stem(stem).element


def polarity_of(stem: HeavenlyStem) -> Polarity:
    return _stem(stem).polarity


def principal_element_of(branch: EarthlyBranch) -> Element:
    return _branch(branch).element


def hidden_stems_of(branch: EarthlyBranch) -> tuple:
    """
    Hidden stems of a branch, main qi first.

    Returns:
        Tuple of (HeavenlyStem, Weight) pairs, 1 to 3 entries.
    """
    try:
        return HIDDEN_STEMS[_branch(branch)]
    except KeyError:
        raise UnknownStemOrBranch(f"No hidden stems for branch {branch!r}") from None


def _stem(stem: Union[HeavenlyStem, str]) -> HeavenlyStem:
    if isinstance(stem, str):
        return stem_by_name(stem)
    if stem not in HEAVENLY_STEMS:
        raise UnknownStemOrBranch(f"Unknown stem: {stem!r}")
    return stem


def _branch(branch: Union[EarthlyBranch, str]) -> EarthlyBranch:
    if isinstance(branch, str):
        return branch_by_name(branch)
    if branch not in EARTHLY_BRANCHES:
        raise UnknownStemOrBranch(f"Unknown branch: {branch!r}")
    return branch
