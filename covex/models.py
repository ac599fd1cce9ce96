"""
Data model (records and aggregates)
===================================

Each row of the `deaths` and `vaccinations` tables is converted into an
immutable record (`frozen=True`) so that:
- rows cannot be accidentally modified after loading, and
- every query reads the same table state and recomputes its result.

`Aggregate` is the grouped, summed form of raw rows for one key. It is derived
per query and never stored.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Tuple, Union

Number = Union[int, float]


@dataclass(frozen=True)
class DeathRecord:
    """One row of the deaths table (one location on one date).

    `continent` is None for region pseudo-entities such as "World" or
    "European Union"; those rows are excluded from country analyses.
    """
    location: str
    continent: Optional[str]
    date: date
    population: Number
    new_cases: Optional[int]
    new_deaths: Optional[int]

    def join_key(self) -> Tuple[str, date]:
        return (self.location, self.date)


@dataclass(frozen=True)
class VaccinationRecord:
    """One row of the vaccinations table."""
    location: str
    date: date
    people_fully_vaccinated: Optional[Number]

    def join_key(self) -> Tuple[str, date]:
        return (self.location, self.date)


@dataclass(frozen=True)
class Aggregate:
    """Grouped totals for one key.

    group_key is `()` worldwide, `(continent,)`, `(continent, location)` or
    `(continent, location, date)`.
    people_fully_vaccinated stays None when no row in the group matched a
    vaccination record.
    """
    group_key: Tuple
    total_cases: int
    total_deaths: int
    population: Number
    people_fully_vaccinated: Optional[Number] = None


@dataclass(frozen=True)
class CovidTables:
    """The two read-only source tables, passed explicitly to every query."""
    deaths: Tuple[DeathRecord, ...] = field(default_factory=tuple)
    vaccinations: Tuple[VaccinationRecord, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # Accept any sequence but store tuples
        object.__setattr__(self, "deaths", tuple(self.deaths))
        object.__setattr__(self, "vaccinations", tuple(self.vaccinations))
