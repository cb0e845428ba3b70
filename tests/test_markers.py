import pytest

from bazi_chart.markers import HUA_GAI, TAO_HUA, TIAN_YI_GUI_REN, YI_MA, annotate
from bazi_chart.pillars import build_four_pillars
from bazi_chart.symbols import EARTHLY_BRANCHES, HEAVENLY_STEMS


def keyed(markers):
    return {(m.key, m.pillar) for m in markers}


class TestTables:

    @pytest.mark.parametrize("table", [TAO_HUA, YI_MA, HUA_GAI], ids=["TaoHua", "YiMa", "HuaGai"])
    def test_branch_tables_cover_every_branch(self, table):
        assert set(table) == {b.pinyin for b in EARTHLY_BRANCHES}

    def test_noble_table_covers_every_stem(self):
        assert set(TIAN_YI_GUI_REN) == {s.pinyin for s in HEAVENLY_STEMS}


class TestAnnotate:

    def test_canopy_from_year_branch(self):
        # Ji Si / Ding Chou / Geng Chen / Gui Wei
        markers = annotate(build_four_pillars((5, 5), (3, 1), (6, 4), (9, 7)))
        assert keyed(markers) == {("HuaGai", "month")}
        assert markers[0].auspicious is False

    def test_day_master_and_branch_rules(self):
        # Jia Chou / Bing Yin / Jia Zi / Jia Wei
        markers = annotate(build_four_pillars((0, 1), (2, 2), (0, 0), (0, 7)))
        assert keyed(markers) == {
            ("TianYiGuiRen", "year"),
            ("TianYiGuiRen", "hour"),
            ("YiMa", "month"),
        }

    def test_one_marker_per_key_and_pillar(self):
        # Year Zi and day Chen share a frame; both point Peach Blossom at You
        markers = annotate(build_four_pillars((0, 0), (2, 2), (4, 4), (1, 9)))
        tao_hua = [m for m in markers if m.key == "TaoHua"]
        assert [m.pillar for m in tao_hua] == ["hour"]

    def test_reference_pillar_is_not_its_own_target(self):
        # Day Chen's Canopy is Chen itself
        markers = annotate(build_four_pillars((2, 2), (2, 2), (4, 4), (2, 2)))
        assert ("HuaGai", "day") not in keyed(markers)

    def test_to_dict(self):
        marker = annotate(build_four_pillars((5, 5), (3, 1), (6, 4), (9, 7)))[0]
        assert marker.to_dict()["key"] == "HuaGai"
        assert "Canopy" in marker.to_dict()["description"]
