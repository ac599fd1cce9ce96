"""
Table loader (CSV / Excel -> records)
=====================================

This module reads the `deaths` and `vaccinations` tables exported from
Our World in Data and converts each row into an immutable record.

Key ideas:
- We try several possible column names because exports differ in casing
  and punctuation ("people_fully_vaccinated" vs "People Fully Vaccinated").
- Conversion helpers (_to_int/_to_number/_to_str/_to_date) turn blanks and
  junk cells into None instead of failing the whole load.
- Rows without a location or a date cannot be joined or grouped; they are
  skipped and reported in one warning.
- The loader returns records only; the engine never touches the files.
"""

from __future__ import annotations
from datetime import date
from pathlib import Path
from typing import List, Optional, Union
import logging
import re

import pandas as pd

from . import config
from .models import CovidTables, DeathRecord, Number, VaccinationRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DEATH_COLUMNS = {
    "location": ("location", "Country", "Country/Area"),
    "continent": ("continent", "Continent"),
    "date": ("date", "Date"),
    "population": ("population", "Population"),
    "new_cases": ("new_cases", "New Cases"),
    "new_deaths": ("new_deaths", "New Deaths"),
}

VACCINATION_COLUMNS = {
    "location": ("location", "Country", "Country/Area"),
    "date": ("date", "Date"),
    "people_fully_vaccinated": ("people_fully_vaccinated", "People Fully Vaccinated", "fully_vaccinated"),
}


def _to_int(x) -> Optional[int]:
    """Convert a cell to int, returning None if missing/invalid."""
    if pd.isna(x): return None
    try: return int(float(x))
    except Exception: return None

def _to_number(x) -> Optional[Number]:
    """Convert a cell to a number; integral values stay ints so sums are exact."""
    if pd.isna(x): return None
    try: f = float(x)
    except Exception: return None
    return int(f) if f.is_integer() else f

def _to_str(x) -> Optional[str]:
    if pd.isna(x): return None
    s = str(x).strip()
    return s or None

def _to_date(x) -> Optional[date]:
    if pd.isna(x): return None
    ts = pd.to_datetime(x, errors="coerce")
    if pd.isna(ts): return None
    return ts.date()

def _norm(s: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", str(s).lower())

def _col(df: pd.DataFrame, *names: str) -> str:
    cols = list(df.columns)
    for n in names:
        if n in cols:
            return n
    norm_map = {_norm(c): c for c in cols}
    for n in names:
        nn = _norm(n)
        if nn in norm_map:
            return norm_map[nn]
    raise KeyError(f"Missing required column. Tried={names}. Available={cols}")


def read_frame(path: PathLike) -> pd.DataFrame:
    """Read a CSV or Excel file into a DataFrame with stripped column names."""
    p = Path(path)
    suffix = p.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(p)
    elif suffix in (".xlsx", ".xlsm"):
        df = pd.read_excel(p, engine="openpyxl")
    else:
        raise ValueError(f"Unsupported file type {suffix!r}: expected .csv or .xlsx")
    df.rename(columns={c: str(c).strip() for c in df.columns}, inplace=True)
    return df


def deaths_from_frame(df: pd.DataFrame) -> List[DeathRecord]:
    """Convert a DataFrame into DeathRecord objects.

    A missing population is stored as 0, which makes the population based
    rates undefined for that location.
    """
    cols = {k: _col(df, *names) for k, names in DEATH_COLUMNS.items()}

    rows: List[DeathRecord] = []
    skipped = 0
    for _, r in df.iterrows():
        location = _to_str(r[cols["location"]])
        day = _to_date(r[cols["date"]])
        if location is None or day is None:
            skipped += 1
            continue
        population = _to_number(r[cols["population"]])
        rows.append(DeathRecord(
            location=location,
            continent=_to_str(r[cols["continent"]]),
            date=day,
            population=population if population is not None else 0,
            new_cases=_to_int(r[cols["new_cases"]]),
            new_deaths=_to_int(r[cols["new_deaths"]]),
        ))
    if skipped:
        logger.warning("Skipped %d death rows without location or date", skipped)
    return rows


def vaccinations_from_frame(df: pd.DataFrame) -> List[VaccinationRecord]:
    """Convert a DataFrame into VaccinationRecord objects."""
    cols = {k: _col(df, *names) for k, names in VACCINATION_COLUMNS.items()}

    rows: List[VaccinationRecord] = []
    skipped = 0
    for _, r in df.iterrows():
        location = _to_str(r[cols["location"]])
        day = _to_date(r[cols["date"]])
        if location is None or day is None:
            skipped += 1
            continue
        rows.append(VaccinationRecord(
            location=location,
            date=day,
            people_fully_vaccinated=_to_number(r[cols["people_fully_vaccinated"]]),
        ))
    if skipped:
        logger.warning("Skipped %d vaccination rows without location or date", skipped)
    return rows


def load_deaths(path: PathLike) -> List[DeathRecord]:
    rows = deaths_from_frame(read_frame(path))
    logger.info("Loaded %d death rows from %s", len(rows), path)
    return rows


def load_vaccinations(path: PathLike) -> List[VaccinationRecord]:
    rows = vaccinations_from_frame(read_frame(path))
    logger.info("Loaded %d vaccination rows from %s", len(rows), path)
    return rows


def load_tables(
    deaths_path: Optional[PathLike] = None,
    vaccinations_path: Optional[PathLike] = None,
) -> CovidTables:
    """Load both tables; paths default to the configured locations."""
    deaths = load_deaths(deaths_path or config.DEATHS_PATH)
    vaccinations = load_vaccinations(vaccinations_path or config.VACCINATIONS_PATH)
    return CovidTables(deaths=deaths, vaccinations=vaccinations)


def load_owid_csv(path: PathLike) -> CovidTables:
    """Split the single Our World in Data file (owid-covid-data.csv) into both tables."""
    df = read_frame(path)
    tables = CovidTables(deaths=deaths_from_frame(df), vaccinations=vaccinations_from_frame(df))
    logger.info(
        "Loaded %d death rows and %d vaccination rows from %s",
        len(tables.deaths), len(tables.vaccinations), path,
    )
    return tables
