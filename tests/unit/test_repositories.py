"""Unit tests for the in-memory and SQLite repositories.

Both implementations answer every query with the same rules, so most tests
run against each of them.
"""

import json
from datetime import date, datetime

import pytest

from genealink.models.person import PersonRecord, SearchFilters, Sex
from genealink.repositories import (
    InMemoryPersonRepository,
    PersonRepository,
    SqlitePersonRepository,
    StorageError,
)


@pytest.fixture(params=["memory", "sqlite"])
def any_repository(request, persons, marriages, tmp_path) -> PersonRepository:
    if request.param == "memory":
        return InMemoryPersonRepository(persons, marriages)

    repository = SqlitePersonRepository(tmp_path / "registry.db", create=True)
    repository.store_persons(persons)
    repository.store_marriages(marriages)
    return repository


def ids(records):
    return [record.id for record in records]


class TestPersonQueries:
    """Test PersonRepository queries on both implementations."""

    def test_satisfies_protocol(self, any_repository):
        assert isinstance(any_repository, PersonRepository)

    @pytest.mark.asyncio
    async def test_get_by_id(self, any_repository):
        person = await any_repository.get_by_id("100")

        assert person.full_name == "Eto Alain"
        assert person.sex is Sex.MALE
        assert person.birth_date == date(1990, 5, 2)
        assert person.last_updated == datetime(2024, 3, 1, 12, 0, 0)
        assert await any_repository.get_by_id("999") is None

    @pytest.mark.asyncio
    async def test_find_by_name_normalized(self, any_repository):
        records = await any_repository.find_by_name("  eto   PAUL ", before=date(1990, 5, 2))
        assert ids(records) == ["10"]

    @pytest.mark.asyncio
    async def test_find_by_name_bound_is_strict(self, any_repository):
        assert await any_repository.find_by_name("Eto Paul", before=date(1960, 1, 15)) == []
        assert await any_repository.find_by_name("Eto Paul", after=date(1960, 1, 15)) == []

    @pytest.mark.asyncio
    async def test_find_by_name_substring_oldest_first(self, any_repository):
        records = await any_repository.find_by_name_substring(
            "Eto Paul", after=date(1960, 1, 15)
        )
        assert ids(records) == ["100", "101"]

    @pytest.mark.asyncio
    async def test_find_by_name_substring_limit(self, any_repository):
        records = await any_repository.find_by_name_substring("eto", limit=2)
        assert ids(records) == ["10", "100"]

    @pytest.mark.asyncio
    async def test_find_exact_parents_excludes_person(self, any_repository):
        records = await any_repository.find_exact_parents("Eto Paul", "Ngo Marie", "100")
        assert ids(records) == ["101"]

    @pytest.mark.asyncio
    async def test_find_exact_parents_requires_both_names(self, any_repository):
        assert await any_repository.find_exact_parents("Eto Paul", "", "100") == []

    @pytest.mark.asyncio
    async def test_find_spouse_either_side(self, any_repository):
        marriage = await any_repository.find_spouse("Eto Alain")
        assert marriage.other_spouse("Eto Alain") == "Mballa Rose"

        marriage = await any_repository.find_spouse("mballa rose")
        assert marriage.other_spouse("mballa rose") == "Eto Alain"

        assert await any_repository.find_spouse("Fouda Luc") is None

    @pytest.mark.asyncio
    async def test_find_by_act_number(self, any_repository):
        person = await any_repository.find_by_act_number("1234")

        assert person.id == "100"
        assert await any_repository.find_by_act_number("0000") is None
        assert await any_repository.find_by_act_number("") is None

    @pytest.mark.asyncio
    async def test_search_candidates_newest_first(self, any_repository):
        records = await any_repository.search_candidates(["eto"])
        assert ids(records) == ["200", "101", "100", "10", "1"]

    @pytest.mark.asyncio
    async def test_search_candidates_any_term(self, any_repository):
        records = await any_repository.search_candidates(["abena", "mballa"])
        assert ids(records) == ["200", "10", "2"]

    @pytest.mark.asyncio
    async def test_search_candidates_every_term(self, any_repository):
        records = await any_repository.search_candidates(["eto", "alain"], match_all=True)

        # own full name first, then the son whose father is Eto Alain
        assert ids(records) == ["100", "200"]

    @pytest.mark.asyncio
    async def test_search_candidates_every_term_beats_limit(self, tmp_path):
        namesakes = [
            PersonRecord(
                id=f"j{n}",
                surname="Mbarga",
                given_names="Jean",
                sex="M",
                birth_date=date(2000, 1, 1),
            )
            for n in range(120)
        ]
        target = PersonRecord(
            id="kj", surname="Kamdem", given_names="Jean", sex="M", birth_date=date(1950, 6, 1)
        )
        sqlite = SqlitePersonRepository(tmp_path / "registry.db", create=True)
        sqlite.store_persons([*namesakes, target])

        for repository in (InMemoryPersonRepository([*namesakes, target]), sqlite):
            any_term = await repository.search_candidates(["kamdem", "jean"])
            every_term = await repository.search_candidates(
                ["kamdem", "jean"], match_all=True
            )

            assert ids(any_term)[0] == "kj"
            assert len(any_term) == 100
            assert ids(every_term) == ["kj"]

    @pytest.mark.asyncio
    async def test_search_candidates_filters(self, any_repository):
        filters = SearchFilters(birth_place="YAOUNDÉ", birth_date_to=date(1991, 1, 1))
        records = await any_repository.search_candidates(["eto"], filters)

        assert ids(records) == ["100"]

    @pytest.mark.asyncio
    async def test_search_candidates_without_terms(self, any_repository):
        assert await any_repository.search_candidates(["", "  "]) == []


class TestInMemoryRepository:
    @pytest.mark.asyncio
    async def test_from_json(self, tmp_path):
        path = tmp_path / "register.json"
        path.write_text(
            json.dumps(
                {
                    "persons": [
                        {"id": 7, "surname": "Fouda", "given_names": "Luc", "sex": "masculin"}
                    ],
                    "marriages": [{"spouse_a_name": "Fouda Luc", "spouse_b_name": "Ateba Anne"}],
                }
            ),
            encoding="utf-8",
        )

        repository = InMemoryPersonRepository.from_json(path)

        assert len(repository) == 1
        person = await repository.get_by_id("7")
        assert person.sex is Sex.MALE
        assert (await repository.find_spouse("fouda luc")).spouse_b_name == "Ateba Anne"


class TestSqliteRepository:
    def test_missing_file_without_create(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SqlitePersonRepository(tmp_path / "missing.db")

    def test_corrupt_file_raises_storage_error(self, tmp_path):
        path = tmp_path / "corrupt.db"
        path.write_bytes(b"this is not a sqlite database" * 100)

        with pytest.raises(StorageError):
            SqlitePersonRepository(path)

    @pytest.mark.asyncio
    async def test_store_replaces_by_id(self, tmp_path, persons):
        repository = SqlitePersonRepository(tmp_path / "registry.db", create=True)
        repository.store_persons(persons)
        repository.store_persons([persons[0].model_copy(update={"birth_place": "Kribi"})])

        person = await repository.get_by_id(persons[0].id)
        assert person.birth_place == "Kribi"
