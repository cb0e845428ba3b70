"""
Ten Gods (十神) relationship mapping.

The Ten Gods describe how any stem relates to a reference stem (normally
the Day Master). They are determined by the five-element relationship
plus whether the two stems share polarity.
"""

from enum import Enum
from types import MappingProxyType

from bazi_chart.symbols import Element, HeavenlyStem, element_of, polarity_of


class TenGod(Enum):
    BI_JIAN = "BiJian"          # 比肩 Companion
    JIE_CAI = "JieCai"          # 劫财 Rob Wealth
    SHI_SHEN = "ShiShen"        # 食神 Eating God
    SHANG_GUAN = "ShangGuan"    # 伤官 Hurting Officer
    PIAN_CAI = "PianCai"        # 偏财 Indirect Wealth
    ZHENG_CAI = "ZhengCai"      # 正财 Direct Wealth
    QI_SHA = "QiSha"            # 七杀 Seven Killings
    ZHENG_GUAN = "ZhengGuan"    # 正官 Direct Officer
    PIAN_YIN = "PianYin"        # 偏印 Indirect Resource
    ZHENG_YIN = "ZhengYin"      # 正印 Direct Resource

    @property
    def label(self) -> str:
        return TEN_GOD_LABELS[self]


TEN_GOD_LABELS = MappingProxyType({
    TenGod.BI_JIAN: "Companion (比肩 Bi Jian)",
    TenGod.JIE_CAI: "Rob Wealth (劫财 Jie Cai)",
    TenGod.SHI_SHEN: "Eating God (食神 Shi Shen)",
    TenGod.SHANG_GUAN: "Hurting Officer (伤官 Shang Guan)",
    TenGod.PIAN_CAI: "Indirect Wealth (偏财 Pian Cai)",
    TenGod.ZHENG_CAI: "Direct Wealth (正财 Zheng Cai)",
    TenGod.QI_SHA: "7 Killings (七杀 Qi Sha)",
    TenGod.ZHENG_GUAN: "Direct Officer (正官 Zheng Guan)",
    TenGod.PIAN_YIN: "Indirect Resource (偏印 Pian Yin)",
    TenGod.ZHENG_YIN: "Direct Resource (正印 Zheng Yin)",
})

TEN_GODS = MappingProxyType({
    # (relationship, same_polarity): god
    ("same", True): TenGod.BI_JIAN,
    ("same", False): TenGod.JIE_CAI,
    ("i_produce", True): TenGod.SHI_SHEN,
    ("i_produce", False): TenGod.SHANG_GUAN,
    ("i_control", True): TenGod.PIAN_CAI,
    ("i_control", False): TenGod.ZHENG_CAI,
    ("controls_me", True): TenGod.QI_SHA,
    ("controls_me", False): TenGod.ZHENG_GUAN,
    ("produces_me", True): TenGod.PIAN_YIN,
    ("produces_me", False): TenGod.ZHENG_YIN,
})

# Production cycle: Wood → Fire → Earth → Metal → Water → Wood
PRODUCTION_CYCLE = MappingProxyType({
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
})

# Control cycle: Wood → Earth → Water → Fire → Metal → Wood
CONTROL_CYCLE = MappingProxyType({
    Element.WOOD: Element.EARTH,
    Element.EARTH: Element.WATER,
    Element.WATER: Element.FIRE,
    Element.FIRE: Element.METAL,
    Element.METAL: Element.WOOD,
})


def element_relationship(reference: Element, other: Element) -> str:
    """Determine the elemental relationship from the reference's perspective."""
    if reference == other:
        return "same"
    elif PRODUCTION_CYCLE[reference] == other:
        return "i_produce"
    elif CONTROL_CYCLE[reference] == other:
        return "i_control"
    elif CONTROL_CYCLE[other] == reference:
        return "controls_me"
    elif PRODUCTION_CYCLE[other] == reference:
        return "produces_me"
    # Five elements, four distinct relations plus identity: unreachable.
    raise ValueError(f"No valid relationship between {reference} and {other}")


def classify(reference: HeavenlyStem, other: HeavenlyStem) -> TenGod:
    """
    Determine the Ten God of `other` relative to `reference`.

    Args:
        reference: the Day Master (or the month stem for luck pillars)
        other: the stem being evaluated

    Returns:
        TenGod member
    """
    relationship = element_relationship(element_of(reference), element_of(other))
    same_polarity = polarity_of(reference) == polarity_of(other)
    return TEN_GODS[(relationship, same_polarity)]
