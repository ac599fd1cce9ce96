import pytest

from covex.classify import classify
from covex.metrics import fatality_rate, infection_rate, ratio_pct, vaccination_rate
from covex.models import Aggregate


def agg(cases=0, deaths=0, population=0, vaccinated=None):
    return Aggregate((), cases, deaths, population, vaccinated)


def test_fatality_rate_is_none_without_cases():
    assert fatality_rate(agg(cases=0, deaths=3)) is None


def test_fatality_rate_rounds_to_four_places():
    assert fatality_rate(agg(cases=350, deaths=13)) == 3.7143
    assert fatality_rate(agg(cases=3, deaths=1)) == 33.3333
    assert fatality_rate(agg(cases=3, deaths=2)) == 66.6667


@pytest.mark.parametrize("cases, deaths", [(1, 0), (7, 3), (350, 13), (10**12, 7), (999_999, 1)])
def test_fatality_rate_matches_formula(cases, deaths):
    assert fatality_rate(agg(cases=cases, deaths=deaths)) == pytest.approx(round(deaths / cases * 100, 4))


def test_rounding_is_half_away_from_zero():
    # 1 / 2_000_000 * 100 == 0.00005 exactly
    assert ratio_pct(1, 2_000_000) == 0.0001
    assert ratio_pct(-1, 2_000_000) == -0.0001
    # 0.00025 would round to even (0.0002) under banker's rounding
    assert ratio_pct(5, 2_000_000) == 0.0003


def test_population_rates():
    assert infection_rate(agg(cases=200, population=2000)) == 10.0
    assert vaccination_rate(agg(population=2000, vaccinated=500)) == 25.0


def test_population_rates_undefined_for_zero_population():
    assert infection_rate(agg(cases=5, population=0)) is None
    assert vaccination_rate(agg(population=0, vaccinated=5)) is None


def test_vaccination_rate_without_vaccination_figure_is_none():
    assert vaccination_rate(agg(population=100, vaccinated=None)) is None


@pytest.mark.parametrize("rate, level", [
    (0.0, "Low"),
    (1.9999, "Low"),
    (2.0, "Medium"),
    (3.7143, "Medium"),
    (5.0, "Medium"),
    (5.0001, "High"),
    (42.0, "High"),
    (None, "None"),
])
def test_classify_boundaries(rate, level):
    assert classify(rate) == level
