"""
Derived chart views: element distribution and annual (流年) pillars.

These are computed from an assembled chart; they add no new calendar
arithmetic beyond the year pillar rule.
"""

from types import MappingProxyType

from bazi_chart.interactions import find_interactions
from bazi_chart.pillars import Pillar, build_pillar, year_indices
from bazi_chart.symbols import Element, HeavenlyStem, Weight, branch_at, stem_at

# Approximate and debated among practitioners
HIDDEN_WEIGHTS = MappingProxyType({
    Weight.STRONG: 0.7,
    Weight.MEDIUM: 0.5,
    Weight.WEAK: 0.3,
})


def element_distribution(pillars, include_hidden: bool = True) -> dict:
    """
    Count element presence across pillars.

    Visible stems count 1.0; hidden stems count by weight
    (strong 0.7, medium 0.5, weak 0.3).
    """
    distribution = {e.value: 0.0 for e in Element}
    for pillar in pillars:
        distribution[pillar.stem.element.value] += 1.0
        if include_hidden:
            for hidden in pillar.hidden_stems:
                distribution[hidden.stem.element.value] += HIDDEN_WEIGHTS[hidden.weight]
    return {element: round(value, 2) for element, value in distribution.items()}


def annual_pillar(year: int, day_master: HeavenlyStem) -> Pillar:
    """The pillar of a Gregorian year (from Li Chun), classified against the Day Master."""
    stem_index, branch_index = year_indices(year)
    return build_pillar("annual", stem_at(stem_index), branch_at(branch_index), day_master)


def annual_interactions(chart, year: int) -> dict:
    """
    Interactions between a year's pillar and the natal chart.

    Returns:
        dict with the annual pillar, its Ten God relative to the Day
        Master, and the interactions that involve the annual branch.
    """
    pillars = chart.four_pillars
    annual = annual_pillar(year, pillars.day_master)
    labelled = [(p.position, p.branch) for p in pillars] + [("annual", annual.branch)]
    involving_annual = [
        entry for entry in find_interactions(labelled)
        if "annual" in (entry.from_pillar, entry.to_pillar)
    ]
    return {
        "year": year,
        "annual_pillar": annual.to_dict(),
        "annual_ten_god": annual.ten_god.value,
        "interactions_with_natal": [entry.to_dict() for entry in involving_annual],
    }
