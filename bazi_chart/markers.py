"""
Symbolic markers (神煞 Shen Sha).

Each rule looks up target branches from a reference stem or branch and
flags every pillar whose branch matches. Rules are independent; a rule
may fire on several pillars but only once per pillar.
"""

from dataclasses import dataclass
from types import MappingProxyType

from bazi_chart.pillars import FourPillars


@dataclass(frozen=True)
class Marker:
    key: str
    pillar: str
    description: str
    auspicious: bool

    def to_dict(self):
        return {
            "key": self.key,
            "pillar": self.pillar,
            "description": self.description,
            "auspicious": self.auspicious,
        }


def _by_triad(targets: dict) -> MappingProxyType:
    """Expand {triad: target} into {branch: target} for the four three-harmony frames."""
    return MappingProxyType({branch: target for triad, target in targets.items() for branch in triad})


# Three-harmony frames: Shen-Zi-Chen, Yin-Wu-Xu, Si-You-Chou, Hai-Mao-Wei
# 桃花 Peach Blossom: 申子辰在酉，寅午戌在卯，巳酉丑在午，亥卯未在子
TAO_HUA = _by_triad({
    ("Shen", "Zi", "Chen"): "You",
    ("Yin", "Wu", "Xu"): "Mao",
    ("Si", "You", "Chou"): "Wu",
    ("Hai", "Mao", "Wei"): "Zi",
})

# 驿马 Travelling Horse: 申子辰马在寅 ...
YI_MA = _by_triad({
    ("Shen", "Zi", "Chen"): "Yin",
    ("Yin", "Wu", "Xu"): "Shen",
    ("Si", "You", "Chou"): "Hai",
    ("Hai", "Mao", "Wei"): "Si",
})

# 华盖 Canopy
HUA_GAI = _by_triad({
    ("Shen", "Zi", "Chen"): "Chen",
    ("Yin", "Wu", "Xu"): "Xu",
    ("Si", "You", "Chou"): "Chou",
    ("Hai", "Mao", "Wei"): "Wei",
})

# 天乙贵人 Heavenly Noble: 甲戊见牛羊，乙己鼠猴乡，丙丁猪鸡位，壬癸兔蛇藏，庚辛逢虎马
TIAN_YI_GUI_REN = MappingProxyType({
    "Jia": ("Chou", "Wei"), "Wu": ("Chou", "Wei"),
    "Yi": ("Zi", "Shen"), "Ji": ("Zi", "Shen"),
    "Bing": ("Hai", "You"), "Ding": ("Hai", "You"),
    "Ren": ("Mao", "Si"), "Gui": ("Mao", "Si"),
    "Geng": ("Yin", "Wu"), "Xin": ("Yin", "Wu"),
})

# 文昌 Academic Star
WEN_CHANG = MappingProxyType({
    "Jia": ("Si",), "Yi": ("Wu",), "Bing": ("Shen",), "Ding": ("You",), "Wu": ("Shen",),
    "Ji": ("You",), "Geng": ("Hai",), "Xin": ("Zi",), "Ren": ("Yin",), "Gui": ("Mao",),
})

# 羊刃 Goat Blade
YANG_REN = MappingProxyType({
    "Jia": ("Mao",), "Yi": ("Yin",), "Bing": ("Wu",), "Ding": ("Si",), "Wu": ("Wu",),
    "Ji": ("Si",), "Geng": ("You",), "Xin": ("Shen",), "Ren": ("Zi",), "Gui": ("Hai",),
})


def _branch_rule(key, description, auspicious, table):
    """Rule keyed on the year and day branches; the reference pillar itself is skipped."""
    def rule(pillars: FourPillars):
        hits = []
        for reference in (pillars.year, pillars.day):
            target = table[reference.branch.pinyin]
            for pillar in pillars:
                if pillar.position != reference.position and pillar.branch.pinyin == target:
                    hits.append(Marker(key, pillar.position,
                                       f"{description} from {reference.position} branch {reference.branch.pinyin}",
                                       auspicious))
        return hits
    return rule


def _day_stem_rule(key, description, auspicious, table):
    """Rule keyed on the Day Master; every pillar's branch is checked."""
    def rule(pillars: FourPillars):
        targets = table[pillars.day_master.pinyin]
        return [
            Marker(key, pillar.position, f"{description} for Day Master {pillars.day_master.pinyin}", auspicious)
            for pillar in pillars
            if pillar.branch.pinyin in targets
        ]
    return rule


MARKER_RULES = (
    _day_stem_rule("TianYiGuiRen", "Heavenly Noble (天乙贵人)", True, TIAN_YI_GUI_REN),
    _day_stem_rule("WenChang", "Academic Star (文昌)", True, WEN_CHANG),
    _day_stem_rule("YangRen", "Goat Blade (羊刃)", False, YANG_REN),
    _branch_rule("TaoHua", "Peach Blossom (桃花)", True, TAO_HUA),
    _branch_rule("YiMa", "Travelling Horse (驿马)", True, YI_MA),
    _branch_rule("HuaGai", "Canopy (华盖)", False, HUA_GAI),
)


def annotate(pillars: FourPillars) -> tuple:
    """
    Apply every marker rule to a chart.

    Returns:
        Tuple of Marker, at most one per (key, pillar), in rule order
    """
    seen = set()
    markers = []
    for rule in MARKER_RULES:
        for marker in rule(pillars):
            if (marker.key, marker.pillar) not in seen:
                seen.add((marker.key, marker.pillar))
                markers.append(marker)
    return tuple(markers)
