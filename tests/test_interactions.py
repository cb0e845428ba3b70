from itertools import product

import pytest

from bazi_chart.interactions import (
    SIX_CLASHES,
    SIX_COMBINATIONS,
    SIX_HARMS,
    InteractionType,
    branch_relations,
    find_interactions,
    interaction_matrix,
    punishment_kind,
)
from bazi_chart.pillars import build_four_pillars
from bazi_chart.symbols import EARTHLY_BRANCHES, branch_by_name


def labelled(*names):
    positions = ("year", "month", "day", "hour")
    return [(pos, branch_by_name(name)) for pos, name in zip(positions, names)]


class TestTables:

    def test_six_of_each(self):
        assert len(SIX_CLASHES) == 6
        assert len(SIX_COMBINATIONS) == 6
        assert len(SIX_HARMS) == 6

    def test_every_branch_has_one_clash_combination_and_harm(self):
        for table in (SIX_CLASHES, SIX_COMBINATIONS, SIX_HARMS):
            members = sorted(i for pair in table for i in pair)
            assert members == list(range(12))

    def test_clash_is_six_apart(self):
        for pair in SIX_CLASHES:
            a, b = sorted(pair)
            assert b - a == 6

    @pytest.mark.parametrize("a,b", list(product(EARTHLY_BRANCHES, repeat=2)),
                             ids=lambda b: b.pinyin)
    def test_relations_are_symmetric_and_unique_per_type(self, a, b):
        forward = branch_relations(a, b)
        backward = branch_relations(b, a)
        assert sorted(t.value for t, _ in forward) == sorted(t.value for t, _ in backward)
        types = [t for t, _ in forward]
        assert len(types) == len(set(types))


class TestPunishment:

    @pytest.mark.parametrize("a,b,kind", [
        ("Yin", "Si", "ungrateful"),
        ("Si", "Shen", "ungrateful"),
        ("Chou", "Xu", "uncivilized"),
        ("Zi", "Mao", "rude"),
        ("Wu", "Wu", "self"),
        ("Hai", "Hai", "self"),
        ("Zi", "Zi", None),
        ("Zi", "Wu", None),
    ])
    def test_kinds(self, a, b, kind):
        assert punishment_kind(branch_by_name(a), branch_by_name(b)) == kind


class TestFindInteractions:

    def test_mixed_chart(self):
        entries = find_interactions(labelled("Zi", "Wu", "Chou", "Mao"))
        found = {(e.type, e.from_pillar, e.to_pillar) for e in entries}
        assert found == {
            (InteractionType.CLASH, "year", "month"),
            (InteractionType.COMBINE, "year", "day"),
            (InteractionType.PUNISH, "year", "hour"),
            (InteractionType.HARM, "month", "day"),
        }

    def test_pair_can_hold_several_types(self):
        entries = find_interactions(labelled("Chou", "Wei"))
        assert {e.type for e in entries} == {InteractionType.CLASH, InteractionType.PUNISH}

    def test_no_self_pairs_or_duplicates(self):
        entries = find_interactions(labelled("Wu", "Wu", "Wu", "Wu"))
        assert len(entries) == 6
        assert all(e.from_pillar != e.to_pillar for e in entries)
        keys = [(e.type, frozenset((e.from_pillar, e.to_pillar))) for e in entries]
        assert len(keys) == len(set(keys))

    def test_quiet_chart(self):
        assert find_interactions(labelled("Yin", "Yin", "Yin", "Yin")) == ()

    def test_description_and_dict(self):
        entry = find_interactions(labelled("Zi", "Wu"))[0]
        assert entry.description.startswith("year Zi clashes with month Wu")
        assert entry.to_dict() == {
            "type": "clash", "from": "year", "to": "month", "description": entry.description,
        }

    def test_matrix_over_four_pillars(self):
        pillars = build_four_pillars((5, 5), (3, 1), (6, 4), (9, 7))
        entries = interaction_matrix(pillars)
        assert {(e.type, e.from_pillar, e.to_pillar) for e in entries} == {
            (InteractionType.CLASH, "month", "hour"),
            (InteractionType.PUNISH, "month", "hour"),
        }
