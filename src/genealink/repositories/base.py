"""Storage collaborator interface.

Tree resolution and search only talk to storage through PersonRepository.
Implementations are asynchronous because every lookup is I/O bound; the
resolver suspends on each call and may issue several concurrently.
"""

from datetime import date
from typing import Protocol, runtime_checkable

from genealink.models.person import MarriageRecord, PersonRecord, SearchFilters


class StorageError(Exception):
    """A storage lookup failed (connection lost, query error, ...)."""


@runtime_checkable
class PersonRepository(Protocol):
    """Read-only access to birth and marriage records."""

    async def get_by_id(self, person_id: str) -> PersonRecord | None:
        """Return the record with this identifier, or None."""
        ...

    async def find_by_name(
        self,
        name: str,
        *,
        before: date | None = None,
        after: date | None = None,
        limit: int = 2,
    ) -> list[PersonRecord]:
        """Records whose full name equals ``name``, oldest first.

        ``before``/``after`` are strict bounds on the birth date; records
        without a birth date never satisfy a bound.
        """
        ...

    async def find_by_name_substring(
        self,
        fragment: str,
        *,
        after: date | None = None,
        limit: int = 20,
    ) -> list[PersonRecord]:
        """Records whose father or mother name contains ``fragment``, oldest first."""
        ...

    async def find_exact_parents(
        self, father_name: str, mother_name: str, exclude_id: str
    ) -> list[PersonRecord]:
        """Records with exactly these parent names, excluding ``exclude_id``."""
        ...

    async def find_spouse(self, name: str) -> MarriageRecord | None:
        """First marriage record where either spouse name contains ``name``."""
        ...

    async def find_by_act_number(self, act_number: str) -> PersonRecord | None:
        """Record registered under this act number, or None."""
        ...

    async def search_candidates(
        self,
        terms: list[str],
        filters: SearchFilters | None = None,
        *,
        match_all: bool = False,
    ) -> list[PersonRecord]:
        """Records with a term in one of their name fields.

        With ``match_all`` every term must be found, otherwise any one
        suffices. Records whose own full name holds every term come first,
        then newest birth first; at most ``filters.limit`` are returned.
        """
        ...
