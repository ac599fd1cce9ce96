"""Fatality-rate levels used by the country reports."""

from __future__ import annotations
from typing import Optional

LOW_BELOW = 2.0
HIGH_ABOVE = 5.0


def classify(rate: Optional[float]) -> str:
    """Map a fatality rate (percent) to "Low", "Medium", "High" or "None".

    Both boundaries belong to Medium: 2.0 and 5.0 are "Medium".
    An undefined rate (no cases) is "None".
    """
    if rate is None:
        return "None"
    if rate < LOW_BELOW:
        return "Low"
    if rate <= HIGH_ABOVE:
        return "Medium"
    return "High"
