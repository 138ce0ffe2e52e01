"""Shared fixtures: a small three-generation register.

    Eto Jean (1930) + Abena Marie (1935)
              |
         Eto Paul (1960) + Ngo Marie (1965)
              |
     +--------+---------+
     |                  |
 Eto Alain (1990)   Eto Brigitte (1992)
     | (married Mballa Rose, 2012)
 Eto Claude (2015)
"""

from datetime import date, datetime

import pytest

from genealink.config import Config
from genealink.models.person import MarriageRecord, PersonRecord
from genealink.repositories.memory import InMemoryPersonRepository

LAST_UPDATED = datetime(2024, 3, 1, 12, 0, 0)


@pytest.fixture
def config(tmp_path) -> Config:
    """Settings isolated from the environment and the working directory."""
    return Config(
        database_path=str(tmp_path / "registry.db"),
        log_file=str(tmp_path / "logs" / "genealink.log"),
    )


@pytest.fixture
def persons() -> list[PersonRecord]:
    return [
        PersonRecord(
            id="1",
            surname="Eto",
            given_names="Jean",
            sex="M",
            birth_date=date(1930, 3, 1),
            birth_place="Ebolowa",
        ),
        PersonRecord(
            id="2",
            surname="Abena",
            given_names="Marie",
            sex="F",
            birth_date=date(1935, 6, 10),
        ),
        PersonRecord(
            id="10",
            surname="Eto",
            given_names="Paul",
            sex="M",
            birth_date=date(1960, 1, 15),
            birth_place="Ebolowa",
            father_name="Eto Jean",
            mother_name="Abena Marie",
        ),
        PersonRecord(
            id="11",
            surname="Ngo",
            given_names="Marie",
            sex="F",
            birth_date=date(1965, 4, 20),
            birth_place="Douala",
        ),
        PersonRecord(
            id="100",
            surname="Eto",
            given_names="Alain",
            sex="M",
            birth_date=date(1990, 5, 2),
            birth_place="Yaoundé",
            father_name="Eto Paul",
            mother_name="Ngo Marie",
            act_number="1234",
            registration_center="Yaoundé I",
            last_updated=LAST_UPDATED,
        ),
        PersonRecord(
            id="101",
            surname="Eto",
            given_names="Brigitte",
            sex="F",
            birth_date=date(1992, 8, 19),
            birth_place="Yaoundé",
            father_name="Eto Paul",
            mother_name="Ngo Marie",
            act_number="1388",
        ),
        PersonRecord(
            id="200",
            surname="Eto",
            given_names="Claude",
            sex="M",
            birth_date=date(2015, 2, 11),
            birth_place="Douala",
            father_name="Eto Alain",
            mother_name="Mballa Rose",
        ),
    ]


@pytest.fixture
def marriages() -> list[MarriageRecord]:
    return [
        MarriageRecord(
            spouse_a_name="Eto Alain",
            spouse_b_name="Mballa Rose",
            marriage_date=date(2012, 7, 14),
            marriage_place="Douala",
            property_regime="communauté de biens",
        )
    ]


@pytest.fixture
def repository(persons, marriages) -> InMemoryPersonRepository:
    return InMemoryPersonRepository(persons, marriages)
