from datetime import date

import pytest

from covex.models import CovidTables, DeathRecord, VaccinationRecord

D1 = date(2021, 1, 1)
D2 = date(2021, 1, 2)


def death(location, continent, day, population, new_cases, new_deaths):
    return DeathRecord(
        location=location,
        continent=continent,
        date=day,
        population=population,
        new_cases=new_cases,
        new_deaths=new_deaths,
    )


@pytest.fixture
def tables():
    """US / AU / BR over two days plus a 'World' region row.

    Totals: US cases=100 deaths=2 pop=1000, AU 50/1/500, BR 200/10/2000.
    """
    deaths = [
        death("United States", "North America", D1, 1000, 60, 1),
        death("United States", "North America", D2, 1000, 40, 1),
        death("Australia", "Oceania", D1, 500, 30, None),
        death("Australia", "Oceania", D2, 500, 20, 1),
        death("Brazil", "South America", D1, 2000, 150, 4),
        death("Brazil", "South America", D2, 2000, 50, 6),
        death("World", None, D1, 3500, 240, 5),
        death("World", None, D2, 3500, 110, 8),
    ]
    vaccinations = [
        VaccinationRecord("United States", D1, 100),
        VaccinationRecord("United States", D2, 200),
        VaccinationRecord("Brazil", D1, None),
        VaccinationRecord("Brazil", D2, 500),
        VaccinationRecord("World", D2, 700),
        VaccinationRecord("Narnia", D1, 5),
    ]
    return CovidTables(deaths=deaths, vaccinations=vaccinations)


@pytest.fixture
def rate_tables():
    """Four countries with infection rates 10, 30, 25 and 5 percent."""
    deaths = [
        death("A", "Europe", D1, 100, 10, 0),
        death("B", "Europe", D1, 100, 30, 0),
        death("C", "Asia", D1, 100, 25, 0),
        death("D", "Asia", D1, 100, 5, 0),
    ]
    return CovidTables(deaths=deaths)
