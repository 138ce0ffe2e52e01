"""In-memory repository.

Holds records in plain lists and answers the PersonRepository queries with
the same matching rules as the SQLite repository. Used for tests, demos and
callers that already hold the register in memory.
"""

import json
from datetime import date
from pathlib import Path

from loguru import logger

from genealink.models.person import (
    MarriageRecord,
    PersonRecord,
    SearchFilters,
    normalize_name,
)


def _oldest_first(persons: list[PersonRecord]) -> list[PersonRecord]:
    """Sort by birth date; undated records go last, storage order kept on ties."""
    return sorted(persons, key=lambda p: (p.birth_date is None, p.birth_date or date.max))


def _within(person: PersonRecord, before: date | None, after: date | None) -> bool:
    if before is not None and (person.birth_date is None or person.birth_date >= before):
        return False
    if after is not None and (person.birth_date is None or person.birth_date <= after):
        return False
    return True


def _full_name_hit(person: PersonRecord, needles: list[str]) -> bool:
    full_name = normalize_name(person.full_name)
    return all(needle in full_name for needle in needles)


class InMemoryPersonRepository:
    """PersonRepository backed by Python lists."""

    def __init__(
        self,
        persons: list[PersonRecord] | None = None,
        marriages: list[MarriageRecord] | None = None,
    ):
        self._persons: dict[str, PersonRecord] = {}
        self._marriages: list[MarriageRecord] = list(marriages or [])
        for person in persons or []:
            self.add_person(person)

    @classmethod
    def from_json(cls, path: str | Path) -> "InMemoryPersonRepository":
        """Load a register exported as ``{"persons": [...], "marriages": [...]}``."""
        data = json.loads(Path(path).read_text(encoding="utf-8"))
        repository = cls(
            persons=[PersonRecord.model_validate(p) for p in data.get("persons", [])],
            marriages=[MarriageRecord.model_validate(m) for m in data.get("marriages", [])],
        )
        logger.info(
            f"Loaded {len(repository._persons)} persons and "
            f"{len(repository._marriages)} marriages from {path}"
        )
        return repository

    def add_person(self, person: PersonRecord) -> None:
        self._persons[person.id] = person

    def add_marriage(self, marriage: MarriageRecord) -> None:
        self._marriages.append(marriage)

    def __len__(self) -> int:
        return len(self._persons)

    async def get_by_id(self, person_id: str) -> PersonRecord | None:
        return self._persons.get(str(person_id))

    async def find_by_name(
        self,
        name: str,
        *,
        before: date | None = None,
        after: date | None = None,
        limit: int = 2,
    ) -> list[PersonRecord]:
        wanted = normalize_name(name)
        if not wanted:
            return []
        matches = [
            p
            for p in self._persons.values()
            if normalize_name(p.full_name) == wanted and _within(p, before, after)
        ]
        return _oldest_first(matches)[:limit]

    async def find_by_name_substring(
        self,
        fragment: str,
        *,
        after: date | None = None,
        limit: int = 20,
    ) -> list[PersonRecord]:
        needle = normalize_name(fragment)
        if not needle:
            return []
        matches = [
            p
            for p in self._persons.values()
            if (
                needle in normalize_name(p.father_name)
                or needle in normalize_name(p.mother_name)
            )
            and _within(p, None, after)
        ]
        return _oldest_first(matches)[:limit]

    async def find_exact_parents(
        self, father_name: str, mother_name: str, exclude_id: str
    ) -> list[PersonRecord]:
        father = normalize_name(father_name)
        mother = normalize_name(mother_name)
        if not father or not mother:
            return []
        matches = [
            p
            for p in self._persons.values()
            if p.id != str(exclude_id)
            and normalize_name(p.father_name) == father
            and normalize_name(p.mother_name) == mother
        ]
        return _oldest_first(matches)

    async def find_spouse(self, name: str) -> MarriageRecord | None:
        for marriage in self._marriages:
            if marriage.other_spouse(name) is not None:
                return marriage
        return None

    async def find_by_act_number(self, act_number: str) -> PersonRecord | None:
        wanted = (act_number or "").strip().lower()
        if not wanted:
            return None
        for person in self._persons.values():
            if person.act_number and person.act_number.lower() == wanted:
                return person
        return None

    async def search_candidates(
        self,
        terms: list[str],
        filters: SearchFilters | None = None,
        *,
        match_all: bool = False,
    ) -> list[PersonRecord]:
        filters = filters or SearchFilters()
        needles = [normalize_name(t) for t in terms if normalize_name(t)]
        if not needles:
            return []
        combine = all if match_all else any

        matches = []
        for person in self._persons.values():
            fields = " | ".join(
                normalize_name(value)
                for value in (
                    person.surname,
                    person.given_names,
                    person.father_name,
                    person.mother_name,
                )
            )
            if combine(needle in fields for needle in needles) and filters.accepts(person):
                matches.append(person)

        # Newest first, then records whose own name holds every term move up
        matches.sort(key=lambda p: p.birth_date or date.min, reverse=True)
        matches.sort(key=lambda p: not _full_name_hit(p, needles))
        return matches[: filters.limit]
