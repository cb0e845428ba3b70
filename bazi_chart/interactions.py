"""
Branch interactions (冲合刑害) between pillars.

Every unordered pair of pillars is tested against four fixed tables. A
pair can satisfy several relationship types at once, but never the same
type twice.
"""

from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from types import MappingProxyType
from typing import Iterable

from bazi_chart.symbols import EarthlyBranch, Element


class InteractionType(Enum):
    CLASH = "clash"      # 冲
    COMBINE = "combine"  # 合
    PUNISH = "punish"    # 刑
    HARM = "harm"        # 害


@dataclass(frozen=True)
class InteractionEntry:
    type: InteractionType
    from_pillar: str
    to_pillar: str
    description: str

    def to_dict(self):
        return {
            "type": self.type.value,
            "from": self.from_pillar,
            "to": self.to_pillar,
            "description": self.description,
        }


def _pairs(*pairs) -> frozenset:
    return frozenset(frozenset(p) for p in pairs)


# Six Clashes (六冲): each branch and the one opposite it
SIX_CLASHES = _pairs(
    (0, 6),   # Zi-Wu (Rat-Horse)
    (1, 7),   # Chou-Wei (Ox-Goat)
    (2, 8),   # Yin-Shen (Tiger-Monkey)
    (3, 9),   # Mao-You (Rabbit-Rooster)
    (4, 10),  # Chen-Xu (Dragon-Dog)
    (5, 11),  # Si-Hai (Snake-Pig)
)

# Six Combinations (六合) and the element each pair can transform into
SIX_COMBINATIONS = MappingProxyType({
    frozenset((0, 1)): Element.EARTH,   # Zi-Chou
    frozenset((2, 11)): Element.WOOD,   # Yin-Hai
    frozenset((3, 10)): Element.FIRE,   # Mao-Xu
    frozenset((4, 9)): Element.METAL,   # Chen-You
    frozenset((5, 8)): Element.WATER,   # Si-Shen
    frozenset((6, 7)): Element.FIRE,    # Wu-Wei (or Earth, debated)
})

# Six Harms (六害)
SIX_HARMS = _pairs(
    (0, 7),   # Zi-Wei (Rat-Goat)
    (1, 6),   # Chou-Wu (Ox-Horse)
    (2, 5),   # Yin-Si (Tiger-Snake)
    (3, 4),   # Mao-Chen (Rabbit-Dragon)
    (8, 11),  # Shen-Hai (Monkey-Pig)
    (9, 10),  # You-Xu (Rooster-Dog)
)

# Punishments (刑)
PUNISHMENTS = MappingProxyType({
    "ungrateful": frozenset((2, 5, 8)),    # Yin-Si-Shen
    "uncivilized": frozenset((1, 7, 10)),  # Chou-Wei-Xu
    "rude": frozenset((0, 3)),             # Zi-Mao
})
SELF_PUNISHMENT = frozenset((4, 6, 9, 11))  # Chen, Wu, You, Hai meeting themselves


def punishment_kind(a: EarthlyBranch, b: EarthlyBranch):
    """Name of the punishment between two branches, or None."""
    if a.index == b.index:
        return "self" if a.index in SELF_PUNISHMENT else None
    for kind, group in PUNISHMENTS.items():
        if a.index in group and b.index in group:
            return kind
    return None


def branch_relations(a: EarthlyBranch, b: EarthlyBranch) -> list:
    """
    All relationships between two branches.

    Returns:
        List of (InteractionType, note) tuples, at most one per type
    """
    pair = frozenset((a.index, b.index))
    found = []
    if pair in SIX_CLASHES:
        found.append((InteractionType.CLASH, "Direct opposition. Disruption, conflict, forced movement."))
    if pair in SIX_COMBINATIONS:
        element = SIX_COMBINATIONS[pair]
        found.append((InteractionType.COMBINE, f"Can transform into {element.value} if supported by stems/season."))
    kind = punishment_kind(a, b)
    if kind:
        found.append((InteractionType.PUNISH, f"{kind.capitalize()} punishment."))
    if pair in SIX_HARMS:
        found.append((InteractionType.HARM, "Hidden damage, betrayal, subtle undermining."))
    return found


_VERBS = {
    InteractionType.CLASH: "clashes with",
    InteractionType.COMBINE: "combines with",
    InteractionType.PUNISH: "punishes",
    InteractionType.HARM: "harms",
}


def find_interactions(labelled: Iterable) -> tuple:
    """
    Find every relationship between labelled branches.

    Args:
        labelled: iterable of (label, EarthlyBranch), e.g. ("year", Zi)

    Returns:
        Tuple of InteractionEntry, ordered by pair then type
    """
    entries = []
    for (label_a, a), (label_b, b) in combinations(list(labelled), 2):
        for kind, note in branch_relations(a, b):
            entries.append(InteractionEntry(
                type=kind,
                from_pillar=label_a,
                to_pillar=label_b,
                description=f"{label_a} {a.pinyin} {_VERBS[kind]} {label_b} {b.pinyin}. {note}",
            ))
    return tuple(entries)


def interaction_matrix(four_pillars) -> tuple:
    """Interactions among the year, month, day and hour branches."""
    return find_interactions((p.position, p.branch) for p in four_pillars)

