"""
Indices (precomputed lookup tables)
===================================

Maps from a value to the rows that carry it, built once per query from the
immutable tables.

Example:
- `vaccination_index(...)[("Brazil", date(2021, 6, 1))]` gives the people
  fully vaccinated in Brazil on that date.
- `build_indices(deaths).by_location["Brazil"]` gives the positions of
  Brazil's death rows.

The join index is a dict keyed on the exact (location, date) pair, so the
death/vaccination join is one lookup per death row.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from .models import DeathRecord, Number, VaccinationRecord

JoinKey = Tuple[str, date]


@dataclass
class Indices:
    """Container of lookups over the deaths table."""
    by_location: Dict[str, List[int]]


def build_indices(deaths: Sequence[DeathRecord]) -> Indices:
    """Build the location index.

    Returns:
        Indices whose lists hold row positions in table order.
    """
    by_location: Dict[str, List[int]] = {}
    for i, row in enumerate(deaths):
        by_location.setdefault(row.location, []).append(i)
    return Indices(by_location=by_location)


def vaccination_index(vaccinations: Sequence[VaccinationRecord]) -> Dict[JoinKey, Optional[Number]]:
    """Map (location, date) -> people_fully_vaccinated.

    Should the table carry the same key twice, the non-null values are summed,
    matching a SQL join followed by SUM.
    """
    out: Dict[JoinKey, Optional[Number]] = {}
    for v in vaccinations:
        key = v.join_key()
        prev = out.get(key)
        if v.people_fully_vaccinated is None:
            out.setdefault(key, None)
        elif prev is None:
            out[key] = v.people_fully_vaccinated
        else:
            out[key] = prev + v.people_fully_vaccinated
    return out
