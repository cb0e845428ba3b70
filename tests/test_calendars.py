from datetime import datetime

import pytest

from bazi_chart.calendars import (
    ArithmeticCalendar,
    CalculationPath,
    CalendarStrategy,
    LunarCalendar,
    LunarSolarTerms,
    PreferPrecise,
    parse_ganzhi,
    select_calendar,
)
from bazi_chart.config import Settings
from bazi_chart.errors import CalendarLibraryUnavailable, UnknownStemOrBranch
from bazi_chart.solar_terms import EphemerisSolarTerms


class BrokenCalendar(CalendarStrategy):
    name = "broken"

    def read(self, moment):
        raise CalendarLibraryUnavailable("library missing")


class TestParseGanzhi:

    @pytest.mark.parametrize("text,expected", [("甲子", (0, 0)), ("庚午", (6, 6)), ("癸亥", (9, 11))])
    def test_parse(self, text, expected):
        assert parse_ganzhi(text) == expected

    @pytest.mark.parametrize("text", ["", "甲", "甲子丑", "子甲", None])
    def test_rejects(self, text):
        with pytest.raises(UnknownStemOrBranch):
            parse_ganzhi(text)


class TestPreferPrecise:

    def test_falls_back_and_flags_approximate(self, arithmetic, caplog):
        strategy = PreferPrecise(BrokenCalendar(), arithmetic)
        with caplog.at_level("WARNING"):
            reading = strategy.read(datetime(2000, 1, 1, 12))
        assert reading.path is CalculationPath.APPROXIMATE
        assert reading.day == (4, 6)
        assert "library missing" in caplog.text

    def test_other_errors_propagate(self, arithmetic):
        class Exploding(CalendarStrategy):
            def read(self, moment):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            PreferPrecise(Exploding(), arithmetic).read(datetime(2000, 1, 1))


class TestLunarCalendar:

    def test_precise_reading(self):
        reading = LunarCalendar().read(datetime(2000, 1, 1, 12))
        assert reading.path is CalculationPath.PRECISE
        assert reading.day == (4, 6)       # Wu Wu
        assert reading.year == (5, 3)      # Ji Mao, before Li Chun 2000

    @pytest.mark.parametrize("moment", [
        datetime(1990, 1, 15, 14, 6),
        datetime(1949, 10, 1, 15),
        datetime(2024, 3, 10, 9, 30),
    ])
    def test_agrees_with_arithmetic_away_from_boundaries(self, arithmetic, moment):
        precise = LunarCalendar().read(moment)
        approximate = arithmetic.read(moment)
        assert (precise.year, precise.month, precise.day, precise.hour) == (
            approximate.year, approximate.month, approximate.day, approximate.hour)


class TestSelectCalendar:

    def test_auto(self):
        strategy = select_calendar(Settings(calendar="auto"))
        assert isinstance(strategy, PreferPrecise)
        assert isinstance(strategy.primary, LunarCalendar)
        assert isinstance(strategy.fallback, ArithmeticCalendar)

    def test_arithmetic_with_ephemeris_terms(self):
        strategy = select_calendar(Settings(calendar="arithmetic", solar_terms="ephemeris"))
        assert isinstance(strategy, ArithmeticCalendar)
        assert isinstance(strategy.terms, EphemerisSolarTerms)

    def test_lunar(self):
        assert isinstance(select_calendar(Settings(calendar="lunar")), LunarCalendar)


class TestLunarSolarTerms:

    BIRTH = datetime(2022, 2, 4, 2, 0)  # between the table's Li Chun (Feb 4 00:00) and the true one (04:51)

    def test_previous_jie(self):
        jie = LunarSolarTerms().previous(self.BIRTH)
        assert jie.name == "Xiao Han"
        assert jie.branch_index == 1
        assert (jie.moment.year, jie.moment.month, jie.moment.day) == (2022, 1, 5)

    def test_following_jie(self):
        jie = LunarSolarTerms().following(self.BIRTH)
        assert jie.name == "Li Chun"
        assert jie.branch_index == 2
        assert jie.moment > self.BIRTH
        assert (jie.moment.month, jie.moment.day) == (2, 4)

    def test_following_is_strictly_after(self):
        terms = LunarSolarTerms()
        li_chun = terms.following(self.BIRTH)
        assert terms.following(li_chun.moment).name == "Jing Zhe"

    def test_month_branch_agrees_with_reading(self):
        reading = LunarCalendar().read(self.BIRTH)
        assert reading.month[1] == LunarSolarTerms().month_branch_index(self.BIRTH) == 1

    def test_year_of_boundaries(self):
        boundaries = LunarSolarTerms().boundaries(2022)
        assert [jie.branch_index for jie in boundaries] == [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 0]


class TestReadingTerms:

    def test_lunar_reading_carries_lunar_terms(self):
        assert isinstance(LunarCalendar().read(datetime(2000, 1, 1, 12)).terms, LunarSolarTerms)

    def test_arithmetic_reading_carries_its_terms(self, arithmetic, table_terms):
        assert arithmetic.read(datetime(2000, 1, 1, 12)).terms is table_terms

    def test_fallback_reading_carries_fallback_terms(self, arithmetic):
        reading = PreferPrecise(BrokenCalendar(), arithmetic).read(datetime(2000, 1, 1, 12))
        assert reading.terms is arithmetic.terms
