import pytest

from bazi_chart.calendars import ArithmeticCalendar
from bazi_chart.solar_terms import FixedSolarTerms


@pytest.fixture
def table_terms():
    return FixedSolarTerms()


@pytest.fixture
def arithmetic(table_terms):
    return ArithmeticCalendar(table_terms)
