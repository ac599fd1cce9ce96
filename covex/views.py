"""
Report views
============

Each view is a named pipeline: aggregation engine -> metric calculators ->
optional classifier -> ordered list of rows (dicts). Views are plain
functions taking the tables as their first argument, so every call
recomputes from the rows it is given; nothing is cached.

Ordering rules shared by all views:
- descending sorts are stable (ties keep table order), and
- rows whose rate is undefined (None) sort after all others.

`VIEWS` maps a view name to its function; `run_view` looks one up by name.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List
import logging

from . import config
from .classify import classify
from .dsa import merge_sort, nulls_last, top_n
from .engine import aggregate, aggregate_one, filter_by_location
from .metrics import fatality_rate, infection_rate, vaccination_rate
from .models import Aggregate, CovidTables

logger = logging.getLogger(__name__)

Row = Dict[str, Any]


# ---------------- Worldwide ----------------
def worldwide_fatality(tables: CovidTables) -> List[Row]:
    """Total deaths, total cases and fatality rate over all countries."""
    agg = aggregate_one(tables.deaths)
    return [{
        "total_deaths": agg.total_deaths,
        "total_cases": agg.total_cases,
        "fatality_rate": fatality_rate(agg),
    }]


def worldwide_infection_rate(tables: CovidTables) -> List[Row]:
    """Share of the world population infected (population taken once per country)."""
    agg = aggregate_one(tables.deaths)
    return [{
        "total_cases": agg.total_cases,
        "population": agg.population,
        "infection_rate": infection_rate(agg),
    }]


def worldwide_vaccination_rate(tables: CovidTables) -> List[Row]:
    """Share of the world population fully vaccinated.

    Each country contributes its highest fully-vaccinated count.
    """
    agg = aggregate_one(tables.deaths, vaccinations=tables.vaccinations)
    return [{
        "people_fully_vaccinated": agg.people_fully_vaccinated,
        "population": agg.population,
        "vaccination_rate": vaccination_rate(agg),
    }]


# ---------------- Country level ----------------
def vaccination_by_location_date(tables: CovidTables) -> List[Row]:
    """Fully vaccinated count and percentage per country and date.

    Dates with no vaccination row keep None. Ordered by continent, location, date.
    """
    aggs = aggregate(tables.deaths, "location_date", vaccinations=tables.vaccinations)
    aggs = merge_sort(aggs, key=lambda a: a.group_key)
    return [_vaccination_row(a, coalesce=False) for a in aggs]


def fully_vaccinated_by_location_date(tables: CovidTables) -> List[Row]:
    """Reporting view of `vaccination_by_location_date` with missing figures as 0."""
    aggs = aggregate(tables.deaths, "location_date", vaccinations=tables.vaccinations)
    return [_vaccination_row(a, coalesce=True) for a in aggs]


def fatality_by_location(tables: CovidTables) -> List[Row]:
    """Deaths, cases, fatality rate and its level per country, highest rate first."""
    rows = []
    for a in aggregate(tables.deaths, "location"):
        rate = fatality_rate(a)
        rows.append({
            "continent": a.group_key[0],
            "location": a.group_key[1],
            "total_deaths": a.total_deaths,
            "total_cases": a.total_cases,
            "fatality_rate": rate,
            "fatality_rate_level": classify(rate),
        })
    return _desc(rows, "fatality_rate")


def infection_fatality_by_location(tables: CovidTables) -> List[Row]:
    """Reporting view: infection and fatality figures per country.

    Missing sums and an undefined fatality rate are reported as 0; the level
    of a country without cases is "None".
    """
    rows = []
    for a in aggregate(tables.deaths, "location"):
        rate = fatality_rate(a)
        rows.append({
            "continent": a.group_key[0],
            "location": a.group_key[1],
            "population": a.population,
            "total_cases": a.total_cases,
            "infection_rate": infection_rate(a),
            "total_deaths": a.total_deaths,
            "fatality_rate": rate if rate is not None else 0.0,
            "fatality_rate_level": classify(rate),
        })
    return rows


def top_n_by_infection_rate(tables: CovidTables, n: int = config.TOP_N) -> List[Row]:
    """The n countries with the highest infection rate."""
    rows = [
        {"location": a.group_key[1], "infection_rate": infection_rate(a)}
        for a in aggregate(tables.deaths, "location")
    ]
    return top_n(rows, n, key=nulls_last(lambda r: r["infection_rate"]))


def top_n_by_fatality_rate(tables: CovidTables, n: int = config.TOP_N) -> List[Row]:
    """The n countries with the highest fatality rate."""
    rows = [
        {
            "location": a.group_key[1],
            "total_deaths": a.total_deaths,
            "total_cases": a.total_cases,
            "fatality_rate": fatality_rate(a),
        }
        for a in aggregate(tables.deaths, "location")
    ]
    return top_n(rows, n, key=nulls_last(lambda r: r["fatality_rate"]))


def infection_rate_by_location(
    tables: CovidTables,
    locations: Iterable[str] = config.DEFAULT_LOCATIONS,
) -> List[Row]:
    """Infection rate of the named countries only, highest first.

    Names that do not occur in the data are ignored.
    """
    subset = filter_by_location(tables.deaths, locations)
    rows = [
        {"location": a.group_key[1], "infection_rate": infection_rate(a)}
        for a in aggregate(subset, "location")
    ]
    return _desc(rows, "infection_rate")


def having_infection_rate_at_least(
    tables: CovidTables,
    threshold: float = config.INFECTION_THRESHOLD,
) -> List[Row]:
    """Countries whose infection rate is >= threshold, highest first.

    The filter runs on the aggregated, rounded rate.
    """
    rows = []
    for a in aggregate(tables.deaths, "location"):
        rate = infection_rate(a)
        if rate is None or rate < threshold:
            continue
        rows.append({
            "location": a.group_key[1],
            "population": a.population,
            "total_cases": a.total_cases,
            "infection_rate": rate,
        })
    return _desc(rows, "infection_rate")


# ---------------- Continent level ----------------
def fatality_by_continent(tables: CovidTables) -> List[Row]:
    """Deaths, cases and fatality rate per continent, highest rate first."""
    rows = [
        {
            "continent": a.group_key[0],
            "total_deaths": a.total_deaths,
            "total_cases": a.total_cases,
            "fatality_rate": fatality_rate(a),
        }
        for a in aggregate(tables.deaths, "continent")
    ]
    return _desc(rows, "fatality_rate")


# ---------------- Registry ----------------
@dataclass(frozen=True)
class View:
    """A named report view."""
    name: str
    func: Callable[..., List[Row]]
    description: str


VIEWS: Dict[str, View] = {
    v.name: v
    for v in (
        View("worldwide_fatality", worldwide_fatality, "Worldwide deaths, cases and fatality rate"),
        View("worldwide_infection_rate", worldwide_infection_rate, "Worldwide share of population infected"),
        View("worldwide_vaccination_rate", worldwide_vaccination_rate, "Worldwide share of population fully vaccinated"),
        View("vaccination_by_location_date", vaccination_by_location_date, "Fully vaccinated per country and date"),
        View("fully_vaccinated", fully_vaccinated_by_location_date, "Fully vaccinated per country and date (nulls as 0)"),
        View("fatality_by_location", fatality_by_location, "Fatality rate and level per country"),
        View("infection_fatality_rate", infection_fatality_by_location, "Infection and fatality figures per country"),
        View("top_infection_rate", top_n_by_infection_rate, "Countries with the highest infection rate"),
        View("top_fatality_rate", top_n_by_fatality_rate, "Countries with the highest fatality rate"),
        View("infection_rate_by_location", infection_rate_by_location, "Infection rate of selected countries"),
        View("infection_rate_at_least", having_infection_rate_at_least, "Countries at or above an infection rate"),
        View("fatality_by_continent", fatality_by_continent, "Fatality rate per continent"),
    )
}


def run_view(name: str, tables: CovidTables, **params: Any) -> List[Row]:
    """Evaluate a registered view by name."""
    view = VIEWS.get(name)
    if view is None:
        raise KeyError(f"Unknown view {name!r}. Available={sorted(VIEWS)}")
    rows = view.func(tables, **params)
    logger.debug("view %s %s -> %d rows", name, params or "", len(rows))
    return rows


# ---------------- Helpers ----------------
def _vaccination_row(a: Aggregate, coalesce: bool) -> Row:
    vaccinated = a.people_fully_vaccinated
    rate = vaccination_rate(a)
    if coalesce:
        vaccinated = vaccinated if vaccinated is not None else 0
        rate = rate if rate is not None else 0.0
    continent, location, day = a.group_key
    return {
        "continent": continent,
        "location": location,
        "date": day,
        "population": a.population,
        "people_fully_vaccinated": vaccinated,
        "perc_fully_vaccinated": rate,
    }


def _desc(rows: List[Row], field: str) -> List[Row]:
    return merge_sort(rows, key=nulls_last(lambda r: r[field]), reverse=True)
