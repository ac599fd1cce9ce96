from datetime import date
import logging

import pandas as pd
import pytest

from covex.loader import (
    load_deaths,
    load_owid_csv,
    load_tables,
    load_vaccinations,
    read_frame,
)
from covex.views import worldwide_fatality

DEATHS_CSV = """location,continent,date,population,new_cases,new_deaths
United States,North America,2021-01-01,1000,60,1
United States,North America,2021-01-02,1000,40,
World,,2021-01-01,3500,240,5
,Europe,2021-01-01,10,1,1
Brazil,South America,,2000,1,1
"""

VACC_CSV = """location,date,people_fully_vaccinated
United States,2021-01-01,100
United States,2021-01-02,
"""


@pytest.fixture
def deaths_csv(tmp_path):
    p = tmp_path / "CovidDeaths.csv"
    p.write_text(DEATHS_CSV, encoding="utf-8")
    return p


@pytest.fixture
def vacc_csv(tmp_path):
    p = tmp_path / "CovidVaccinations.csv"
    p.write_text(VACC_CSV, encoding="utf-8")
    return p


def test_load_deaths(deaths_csv, caplog):
    with caplog.at_level(logging.WARNING, logger="covex.loader"):
        rows = load_deaths(deaths_csv)
    assert len(rows) == 3
    us = rows[0]
    assert us.location == "United States"
    assert us.continent == "North America"
    assert us.date == date(2021, 1, 1)
    assert us.population == 1000 and isinstance(us.population, int)
    assert (us.new_cases, us.new_deaths) == (60, 1)
    assert rows[1].new_deaths is None
    assert rows[2].continent is None
    assert "Skipped 2 death rows" in caplog.text


def test_load_vaccinations(vacc_csv):
    rows = load_vaccinations(vacc_csv)
    assert [r.people_fully_vaccinated for r in rows] == [100, None]
    assert rows[0].date == date(2021, 1, 1)


def test_load_tables_feeds_views(deaths_csv, vacc_csv):
    tables = load_tables(deaths_csv, vacc_csv)
    assert worldwide_fatality(tables) == [{"total_deaths": 1, "total_cases": 100, "fatality_rate": 1.0}]


def test_column_names_are_matched_loosely(tmp_path):
    p = tmp_path / "deaths.csv"
    p.write_text(
        "Location,Continent,Date,Population,New Cases,New Deaths\n"
        "Chile,South America,2021-03-01,19000000,1200,30\n",
        encoding="utf-8",
    )
    (row,) = load_deaths(p)
    assert row.location == "Chile"
    assert row.new_cases == 1200


def test_missing_column_raises(tmp_path):
    p = tmp_path / "deaths.csv"
    p.write_text("location,date\nChile,2021-03-01\n", encoding="utf-8")
    with pytest.raises(KeyError, match="continent"):
        load_deaths(p)


def test_unsupported_suffix(tmp_path):
    with pytest.raises(ValueError):
        read_frame(tmp_path / "deaths.parquet")


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_deaths(tmp_path / "absent.csv")


def test_owid_single_file(tmp_path):
    p = tmp_path / "owid-covid-data.csv"
    p.write_text(
        "iso_code,continent,location,date,new_cases,new_deaths,people_fully_vaccinated,population\n"
        "BRA,South America,Brazil,2021-06-01,100,5,50,2000\n"
        "OWID_WRL,,World,2021-06-01,900,20,400,8000\n",
        encoding="utf-8",
    )
    tables = load_owid_csv(p)
    assert len(tables.deaths) == 2
    assert len(tables.vaccinations) == 2
    assert tables.vaccinations[0].people_fully_vaccinated == 50


def test_load_excel(tmp_path):
    pytest.importorskip("openpyxl")
    p = tmp_path / "CovidDeaths.xlsx"
    pd.DataFrame({
        "location": ["Peru"],
        "continent": ["South America"],
        "date": [pd.Timestamp("2021-02-01")],
        "population": [33000000],
        "new_cases": [500],
        "new_deaths": [20],
    }).to_excel(p, index=False)
    (row,) = load_deaths(p)
    assert row.date == date(2021, 2, 1)
    assert row.new_deaths == 20
