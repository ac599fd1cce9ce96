"""
Metric calculators
==================

Pure functions over an `Aggregate`:

- fatality rate    = total_deaths / total_cases * 100
- infection rate   = total_cases / population * 100
- vaccination rate = people_fully_vaccinated / population * 100

A zero (or missing) denominator gives None instead of raising. Results are
rounded half away from zero to 4 decimal places. The division runs in
`Decimal` so that values like 0.00005 do not drift below the rounding
boundary through binary float error.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from .models import Aggregate, Number

PLACES = 4
_QUANT = Decimal(1).scaleb(-PLACES)


def round_half_away(value: Decimal, places: int = PLACES) -> float:
    """Round half away from zero (decimal's ROUND_HALF_UP) and return a float."""
    quant = _QUANT if places == PLACES else Decimal(1).scaleb(-places)
    return float(value.quantize(quant, rounding=ROUND_HALF_UP))


def ratio_pct(numerator: Optional[Number], denominator: Optional[Number]) -> Optional[float]:
    """numerator / denominator * 100, rounded.

    None when the numerator is missing or the denominator is 0 or missing.
    """
    if numerator is None or denominator is None or denominator == 0:
        return None
    return round_half_away(Decimal(numerator) / Decimal(denominator) * 100)


def fatality_rate(agg: Aggregate) -> Optional[float]:
    return ratio_pct(agg.total_deaths, agg.total_cases)


def infection_rate(agg: Aggregate) -> Optional[float]:
    return ratio_pct(agg.total_cases, agg.population)


def vaccination_rate(agg: Aggregate) -> Optional[float]:
    return ratio_pct(agg.people_fully_vaccinated, agg.population)
