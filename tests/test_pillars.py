"""Sexagenary pillar rules and the arithmetic calendar."""

from datetime import date, datetime

import pytest

from bazi_chart.calendars import ArithmeticCalendar, CalculationPath
from bazi_chart.pillars import (
    TIGER_START_STEMS,
    build_four_pillars,
    day_cycle_index,
    day_indices,
    effective_year,
    hour_branch_index,
    hour_stem_index,
    julian_day_number,
    month_stem_index,
    year_indices,
)
from bazi_chart.symbols import branch_at, stem_at


def ganzhi(pair):
    stem_index, branch_index = pair
    return stem_at(stem_index).pinyin + " " + branch_at(branch_index).pinyin


class TestYearPillar:

    @pytest.mark.parametrize("year,expected", [
        (1984, "Jia Zi"),
        (1989, "Ji Si"),
        (2000, "Geng Chen"),
        (2024, "Jia Chen"),
    ])
    def test_known_years(self, year, expected):
        assert ganzhi(year_indices(year)) == expected

    @pytest.mark.parametrize("year", [-120, 3, 1900, 2023])
    def test_sixty_year_period(self, year):
        assert year_indices(year) == year_indices(year + 60)

    def test_years_before_reference_wrap(self):
        stem, branch = year_indices(-3)
        assert 0 <= stem < 10 and 0 <= branch < 12
        assert (stem, branch) == year_indices(57)

    def test_born_before_li_chun_uses_previous_year(self, table_terms):
        assert effective_year(datetime(2024, 2, 3, 23, 59), table_terms) == 2023
        assert effective_year(datetime(2024, 2, 4, 0, 0), table_terms) == 2024
        assert effective_year(datetime(2024, 1, 20, 12, 0), table_terms) == 2023


class TestMonthPillar:

    @pytest.mark.parametrize("year_stem,tiger_stem", [(0, 2), (1, 4), (2, 6), (3, 8), (4, 0), (5, 2), (9, 0)])
    def test_five_tigers(self, year_stem, tiger_stem):
        assert month_stem_index(year_stem, 2) == tiger_stem
        assert TIGER_START_STEMS[year_stem % 5] == tiger_stem

    def test_months_count_from_tiger(self):
        # Jia year: Bing Yin, Ding Mao, ... Ding Chou
        assert month_stem_index(0, 3) == 3
        assert month_stem_index(0, 0) == 2
        assert month_stem_index(0, 1) == 3

    @pytest.mark.parametrize("moment,branch", [
        (datetime(2024, 1, 5, 12), 0),   # before Xiao Han: Zi
        (datetime(2024, 1, 6, 0), 1),    # Xiao Han: Chou
        (datetime(2024, 2, 4, 8), 2),    # Li Chun: Yin
        (datetime(2024, 3, 10), 3),
        (datetime(2024, 12, 7, 1), 0),   # Da Xue: Zi
    ])
    def test_month_branch_from_solar_terms(self, table_terms, moment, branch):
        assert table_terms.month_branch_index(moment) == branch


class TestDayPillar:

    @pytest.mark.parametrize("day,expected", [
        (date(1924, 2, 5), "Jia Yin"),
        (date(1949, 10, 1), "Jia Zi"),
        (date(1989, 3, 16), "Yi Hai"),
        (date(2000, 1, 1), "Wu Wu"),
    ])
    def test_reference_dates(self, day, expected):
        assert ganzhi(day_indices(day)) == expected

    def test_consecutive_days_advance_by_one(self):
        assert (day_cycle_index(date(2000, 3, 1)) - day_cycle_index(date(2000, 2, 29))) % 60 == 1

    def test_sixty_day_period(self):
        assert day_cycle_index(date(1949, 11, 30)) == day_cycle_index(date(1949, 10, 1))

    def test_julian_day_number(self):
        assert julian_day_number(date(2000, 1, 1)) == 2451545


class TestHourPillar:

    @pytest.mark.parametrize("hour,branch", [
        (23, 0), (0, 0), (1, 1), (2, 1), (3, 2), (11, 6), (12, 6), (13, 7), (14, 7), (21, 11), (22, 11),
    ])
    def test_two_hour_windows(self, hour, branch):
        assert hour_branch_index(hour) == branch

    @pytest.mark.parametrize("day_stem,zi_stem", [(0, 0), (1, 2), (2, 4), (3, 6), (4, 8), (5, 0), (9, 8)])
    def test_five_rats(self, day_stem, zi_stem):
        assert hour_stem_index(day_stem, 0) == zi_stem


class TestFourPillars:

    def test_day_pillar_has_no_ten_god(self):
        pillars = build_four_pillars((5, 5), (3, 1), (6, 4), (9, 7))
        assert pillars.day.ten_god is None
        assert pillars.day_master.pinyin == "Geng"
        assert all(p.ten_god is not None for p in (pillars.year, pillars.month, pillars.hour))

    def test_hidden_stems_classified_against_day_master(self):
        pillars = build_four_pillars((5, 5), (3, 1), (6, 4), (9, 7))
        for pillar in pillars:
            assert pillar.hidden_stems
        # Chen's main qi Wu (yang earth) produces Geng (yang metal)
        assert pillars.day.hidden_stems[0].ten_god.value == "PianYin"

    def test_cycle_index(self):
        pillars = build_four_pillars((0, 0), (2, 2), (0, 2), (9, 11))
        assert pillars.year.cycle_index == 0
        assert pillars.day.cycle_index == 50
        assert pillars.hour.cycle_index == 59


class TestArithmeticCalendar:

    def test_reading(self, arithmetic):
        reading = arithmetic.read(datetime(1990, 1, 15, 14, 6))
        assert reading.path is CalculationPath.APPROXIMATE
        assert [ganzhi(p) for p in (reading.year, reading.month, reading.day, reading.hour)] == [
            "Ji Si", "Ding Chou", "Geng Chen", "Gui Wei",
        ]

    def test_late_zi_hour_stays_on_same_day_by_default(self, arithmetic):
        reading = arithmetic.read(datetime(2000, 1, 1, 23, 30))
        assert ganzhi(reading.day) == "Wu Wu"
        assert ganzhi(reading.hour) == "Ren Zi"

    def test_late_zi_hour_rollover(self, table_terms):
        reading = ArithmeticCalendar(table_terms, zi_hour_rollover=True).read(datetime(2000, 1, 1, 23, 30))
        assert ganzhi(reading.day) == "Ji Wei"
        assert ganzhi(reading.hour) == "Jia Zi"
