"""SQLite repository for birth and marriage records.

Stores the register in two tables, ``person`` and ``marriage``. Name
comparisons go through a ``normalize_name`` SQL function registered on each
connection, since SQLite's LOWER() only folds ASCII and registers are full of
accented names (Ngaoundéré, Ebénézer).

Queries run in a worker thread so the resolver's event loop never blocks on
disk I/O. Every ``sqlite3.Error`` is re-raised as StorageError.
"""

import asyncio
import sqlite3
from contextlib import contextmanager
from datetime import date
from pathlib import Path
from typing import Any, Iterator

from loguru import logger

from genealink.models.person import (
    MarriageRecord,
    PersonRecord,
    SearchFilters,
    normalize_name,
)
from genealink.repositories.base import StorageError

PERSON_COLUMNS = (
    "id",
    "surname",
    "given_names",
    "sex",
    "birth_date",
    "birth_place",
    "father_name",
    "mother_name",
    "act_number",
    "registration_center",
    "last_updated",
)

_SELECT_PERSON = f"SELECT {', '.join(PERSON_COLUMNS)} FROM person"
_FULL_NAME = "normalize_name(surname || ' ' || given_names)"
_OLDEST_FIRST = "ORDER BY birth_date IS NULL, birth_date, rowid"


class SqlitePersonRepository:
    """PersonRepository backed by a SQLite file."""

    def __init__(self, db_path: str | Path, create: bool = False):
        """Open a register database.

        Args:
            db_path: Path to the SQLite file
            create: Create the file and schema when missing

        Raises:
            FileNotFoundError: If the file is missing and ``create`` is False
        """
        self.db_path = Path(db_path).expanduser()
        if not self.db_path.exists() and not create:
            raise FileNotFoundError(f"Register database not found: {self.db_path}")

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()
        logger.info(f"Opened register database: {self.db_path}")

    @contextmanager
    def _get_connection(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection with row access by name and name normalization."""
        try:
            conn = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        conn.create_function("normalize_name", 1, normalize_name, deterministic=True)
        try:
            yield conn
        except sqlite3.Error as e:
            raise StorageError(f"Query failed on {self.db_path}: {e}") from e
        finally:
            conn.close()

    def _init_database(self) -> None:
        """Create tables and indexes if they do not exist."""
        with self._get_connection() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS person (
                    id TEXT PRIMARY KEY,
                    surname TEXT NOT NULL DEFAULT '',
                    given_names TEXT NOT NULL DEFAULT '',
                    sex TEXT NOT NULL DEFAULT 'U',
                    birth_date TEXT,
                    birth_place TEXT,
                    father_name TEXT,
                    mother_name TEXT,
                    act_number TEXT,
                    registration_center TEXT,
                    last_updated TEXT
                );

                CREATE TABLE IF NOT EXISTS marriage (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    spouse_a_name TEXT NOT NULL,
                    spouse_b_name TEXT NOT NULL,
                    marriage_date TEXT,
                    marriage_place TEXT,
                    property_regime TEXT
                );

                CREATE INDEX IF NOT EXISTS idx_person_act_number ON person(act_number);
                CREATE INDEX IF NOT EXISTS idx_person_parents ON person(father_name, mother_name);
                CREATE INDEX IF NOT EXISTS idx_person_birth_date ON person(birth_date);
                """
            )
            conn.commit()

    # =========================================================================
    # Loading
    # =========================================================================

    def store_persons(self, persons: list[PersonRecord]) -> None:
        """Insert or replace person records."""
        with self._get_connection() as conn:
            conn.executemany(
                f"""
                INSERT OR REPLACE INTO person ({', '.join(PERSON_COLUMNS)})
                VALUES ({', '.join('?' for _ in PERSON_COLUMNS)})
                """,
                [
                    (
                        p.id,
                        p.surname,
                        p.given_names,
                        p.sex.value,
                        p.birth_date.isoformat() if p.birth_date else None,
                        p.birth_place,
                        p.father_name,
                        p.mother_name,
                        p.act_number,
                        p.registration_center,
                        p.last_updated.isoformat() if p.last_updated else None,
                    )
                    for p in persons
                ],
            )
            conn.commit()
        logger.debug(f"Stored {len(persons)} persons")

    def store_marriages(self, marriages: list[MarriageRecord]) -> None:
        """Append marriage records."""
        with self._get_connection() as conn:
            conn.executemany(
                """
                INSERT INTO marriage (
                    spouse_a_name, spouse_b_name, marriage_date, marriage_place, property_regime
                ) VALUES (?, ?, ?, ?, ?)
                """,
                [
                    (
                        m.spouse_a_name,
                        m.spouse_b_name,
                        m.marriage_date.isoformat() if m.marriage_date else None,
                        m.marriage_place,
                        m.property_regime,
                    )
                    for m in marriages
                ],
            )
            conn.commit()
        logger.debug(f"Stored {len(marriages)} marriages")

    # =========================================================================
    # Queries
    # =========================================================================

    def _fetch_persons(self, sql: str, params: tuple[Any, ...]) -> list[PersonRecord]:
        with self._get_connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [PersonRecord.model_validate(dict(row)) for row in rows]

    async def _run(self, sql: str, params: tuple[Any, ...]) -> list[PersonRecord]:
        return await asyncio.to_thread(self._fetch_persons, sql, params)

    async def get_by_id(self, person_id: str) -> PersonRecord | None:
        rows = await self._run(f"{_SELECT_PERSON} WHERE id = ?", (str(person_id),))
        return rows[0] if rows else None

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

        sql = f"{_SELECT_PERSON} WHERE {_FULL_NAME} = ?"
        params: list[Any] = [wanted]
        if before is not None:
            sql += " AND birth_date < ?"
            params.append(before.isoformat())
        if after is not None:
            sql += " AND birth_date > ?"
            params.append(after.isoformat())
        sql += f" {_OLDEST_FIRST} LIMIT ?"
        params.append(limit)
        return await self._run(sql, tuple(params))

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

        sql = (
            f"{_SELECT_PERSON} WHERE (instr(normalize_name(father_name), ?) > 0 "
            "OR instr(normalize_name(mother_name), ?) > 0)"
        )
        params: list[Any] = [needle, needle]
        if after is not None:
            sql += " AND birth_date > ?"
            params.append(after.isoformat())
        sql += f" {_OLDEST_FIRST} LIMIT ?"
        params.append(limit)
        return await self._run(sql, tuple(params))

    async def find_exact_parents(
        self, father_name: str, mother_name: str, exclude_id: str
    ) -> list[PersonRecord]:
        father = normalize_name(father_name)
        mother = normalize_name(mother_name)
        if not father or not mother:
            return []
        return await self._run(
            f"{_SELECT_PERSON} WHERE normalize_name(father_name) = ? "
            f"AND normalize_name(mother_name) = ? AND id != ? {_OLDEST_FIRST}",
            (father, mother, str(exclude_id)),
        )

    async def find_spouse(self, name: str) -> MarriageRecord | None:
        needle = normalize_name(name)
        if not needle:
            return None

        def _query() -> MarriageRecord | None:
            with self._get_connection() as conn:
                row = conn.execute(
                    """
                    SELECT spouse_a_name, spouse_b_name, marriage_date,
                           marriage_place, property_regime
                    FROM marriage
                    WHERE instr(normalize_name(spouse_a_name), ?) > 0
                       OR instr(normalize_name(spouse_b_name), ?) > 0
                    ORDER BY id
                    LIMIT 1
                    """,
                    (needle, needle),
                ).fetchone()
            return MarriageRecord.model_validate(dict(row)) if row else None

        return await asyncio.to_thread(_query)

    async def find_by_act_number(self, act_number: str) -> PersonRecord | None:
        wanted = (act_number or "").strip()
        if not wanted:
            return None
        rows = await self._run(
            f"{_SELECT_PERSON} WHERE lower(act_number) = lower(?) LIMIT 1", (wanted,)
        )
        return rows[0] if rows else None

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

        clauses = []
        params: list[Any] = []
        for needle in needles:
            clauses.append(
                "(instr(normalize_name(surname), ?) > 0 "
                "OR instr(normalize_name(given_names), ?) > 0 "
                "OR instr(normalize_name(father_name), ?) > 0 "
                "OR instr(normalize_name(mother_name), ?) > 0)"
            )
            params.extend([needle] * 4)

        joiner = " AND " if match_all else " OR "
        sql = f"{_SELECT_PERSON} WHERE ({joiner.join(clauses)})"

        if filters.birth_date_from:
            sql += " AND birth_date >= ?"
            params.append(filters.birth_date_from.isoformat())
        if filters.birth_date_to:
            sql += " AND birth_date <= ?"
            params.append(filters.birth_date_to.isoformat())
        if filters.birth_place:
            sql += " AND instr(normalize_name(birth_place), ?) > 0"
            params.append(normalize_name(filters.birth_place))
        if filters.sex:
            sql += " AND sex = ?"
            params.append(filters.sex.value)

        full_name_hit = " AND ".join(f"instr({_FULL_NAME}, ?) > 0" for _ in needles)
        sql += f" ORDER BY coalesce({full_name_hit}, 0) DESC, birth_date DESC, rowid LIMIT ?"
        params.extend(needles)
        params.append(filters.limit)
        return await self._run(sql, tuple(params))
