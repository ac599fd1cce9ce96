"""
Aggregation engine
==================

This is the heart of the project. It works like a tiny offline GROUP BY:

1) Take the immutable death rows (and optionally the vaccination rows)
2) Drop region pseudo-entities (continent missing) unless asked not to
3) Group rows by a dimension: worldwide, continent, location or location+date
4) Sum cases/deaths per group and take population/vaccination once per location
5) Return one `Aggregate` per group, in first-appearance order

Summing rules:
- new_cases / new_deaths are daily flows: they are summed (nulls skipped).
- population and people_fully_vaccinated are per-location stocks: the max
  per location is taken, then those figures are summed across locations.
  Population is therefore never multiplied by the number of dates.

The engine holds no state. Tables are passed in on every call, so every
result reflects the rows it was given.
"""

from __future__ import annotations
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple
import math

from .models import Aggregate, DeathRecord, Number, VaccinationRecord
from .indices import build_indices, vaccination_index

GROUP_BY = ("worldwide", "continent", "location", "location_date")


def is_country(row: DeathRecord) -> bool:
    """True for real countries; region rows ("World", "Asia", ...) have no continent."""
    return bool(row.continent)


def filter_by_location(rows: Sequence[DeathRecord], names: Iterable[str]) -> List[DeathRecord]:
    """Keep rows whose location is in `names`, in table order.

    Names absent from the data simply match nothing.
    """
    idx = build_indices(rows)
    positions: List[int] = []
    for name in set(names):
        positions.extend(idx.by_location.get(name, []))
    positions.sort()
    return [rows[i] for i in positions]


def aggregate(
    rows: Iterable[DeathRecord],
    by: str = "location",
    *,
    vaccinations: Optional[Sequence[VaccinationRecord]] = None,
    countries_only: bool = True,
) -> List[Aggregate]:
    """Group death rows and sum them.

    Args:
        rows: death records (any iterable).
        by: one of "worldwide", "continent", "location", "location_date".
        vaccinations: when given, each death row is joined to the vaccination
            row with the same (location, date). Unmatched death rows add
            nothing, so a group with no match keeps a None figure.
        countries_only: drop rows whose continent is missing.

    Returns:
        One Aggregate per distinct key, in order of first appearance.
        The worldwide grouping yields a single zero Aggregate for no rows.
    """
    key_fn = _group_key(by)
    vacc = vaccination_index(vaccinations) if vaccinations is not None else None

    groups: Dict[Tuple, _Accumulator] = {}
    for row in rows:
        if countries_only and not is_country(row):
            continue
        k = key_fn(row)
        acc = groups.get(k)
        if acc is None:
            acc = groups[k] = _Accumulator()
        acc.add(row, vacc.get(row.join_key()) if vacc is not None else None)

    if not groups and key_fn is _worldwide_key:
        groups[()] = _Accumulator()
    return [acc.result(k) for k, acc in groups.items()]


def aggregate_one(
    rows: Iterable[DeathRecord],
    *,
    vaccinations: Optional[Sequence[VaccinationRecord]] = None,
    countries_only: bool = True,
) -> Aggregate:
    """Worldwide totals as a single Aggregate."""
    return aggregate(rows, "worldwide", vaccinations=vaccinations, countries_only=countries_only)[0]


# ---------------- Helpers ----------------
class _Accumulator:
    """Running totals for one group."""

    __slots__ = ("cases", "deaths", "population", "vaccinated")

    def __init__(self) -> None:
        self.cases = 0
        self.deaths = 0
        # location -> max value seen
        self.population: Dict[str, Number] = {}
        self.vaccinated: Dict[str, Number] = {}

    def add(self, row: DeathRecord, vaccinated: Optional[Number]) -> None:
        if row.new_cases is not None:
            self.cases += int(row.new_cases)
        if row.new_deaths is not None:
            self.deaths += int(row.new_deaths)
        _keep_max(self.population, row.location, row.population)
        _keep_max(self.vaccinated, row.location, vaccinated)

    def result(self, key: Tuple) -> Aggregate:
        return Aggregate(
            group_key=key,
            total_cases=self.cases,
            total_deaths=self.deaths,
            population=_exact_sum(self.population.values()),
            people_fully_vaccinated=_exact_sum(self.vaccinated.values()) if self.vaccinated else None,
        )


def _keep_max(acc: Dict[str, Number], location: str, value: Optional[Number]) -> None:
    if value is None:
        return
    prev = acc.get(location)
    if prev is None or value > prev:
        acc[location] = value


def _exact_sum(values: Iterable[Number]) -> Number:
    vals = list(values)
    if any(isinstance(v, float) for v in vals):
        return math.fsum(vals)
    return sum(vals)


def _worldwide_key(row: DeathRecord) -> Tuple:
    return ()


def _group_key(by: str) -> Callable[[DeathRecord], Tuple]:
    b = by.lower().strip()
    if b in ("worldwide", "world"):
        return _worldwide_key
    if b == "continent":
        return lambda r: (r.continent,)
    if b in ("location", "country"):
        return lambda r: (r.continent, r.location)
    if b in ("location_date", "date"):
        return lambda r: (r.continent, r.location, r.date)
    raise ValueError(f"by must be one of: {', '.join(GROUP_BY)}")
