"""Parent and child matching strategies.

The register has no links between records, only free-text parent names, so
every parent/child relation is a guess. The guessing rule is isolated here so
the traversal in RelationshipResolver never depends on how candidates are
chosen.

Default rules
=============
**Parents**: records whose full name equals the recorded father or mother
name and who were born strictly before the person. At most two are kept,
oldest first. When more than two namesakes qualify the oldest two win; there
is no further tie-break, and namesakes born on the same day keep the order
storage returned them in.

**Children**: records whose father or mother name contains the person's full
name and who were born strictly after the person, oldest first, capped at 20.
"""

import asyncio
from datetime import date
from typing import Protocol

from genealink.models.person import PersonRecord
from genealink.repositories.base import PersonRepository


class ParentMatchStrategy(Protocol):
    """Chooses the records that stand for a person's parents."""

    name: str

    async def find_parents(
        self, repository: PersonRepository, person: PersonRecord, limit: int
    ) -> list[PersonRecord]: ...


class ChildMatchStrategy(Protocol):
    """Chooses the records that stand for a person's children."""

    name: str

    async def find_children(
        self, repository: PersonRepository, person: PersonRecord, limit: int
    ) -> list[PersonRecord]: ...


class EarlierBornNamesakeStrategy:
    """Parents are the oldest earlier-born namesakes of the recorded parent names."""

    name = "earlier_born_namesakes"

    async def find_parents(
        self, repository: PersonRepository, person: PersonRecord, limit: int
    ) -> list[PersonRecord]:
        parent_names = [n for n in (person.father_name, person.mother_name) if n]
        if not parent_names or person.birth_date is None:
            return []

        lookups = await asyncio.gather(
            *(
                repository.find_by_name(name, before=person.birth_date, limit=limit)
                for name in parent_names
            )
        )

        candidates: dict[str, PersonRecord] = {}
        for records in lookups:
            for record in records:
                if record.id != person.id:
                    candidates.setdefault(record.id, record)

        ordered = sorted(candidates.values(), key=lambda p: p.birth_date or date.max)
        return ordered[:limit]


class LaterBornChildStrategy:
    """Children are later-born records naming the person as father or mother."""

    name = "later_born_children"

    async def find_children(
        self, repository: PersonRepository, person: PersonRecord, limit: int
    ) -> list[PersonRecord]:
        if not person.full_name or person.birth_date is None:
            return []

        records = await repository.find_by_name_substring(
            person.full_name, after=person.birth_date, limit=limit
        )
        return [record for record in records if record.id != person.id][:limit]
