"""Storage collaborators for GeneaLink."""

from genealink.repositories.base import PersonRepository, StorageError
from genealink.repositories.memory import InMemoryPersonRepository
from genealink.repositories.sqlite import SqlitePersonRepository

__all__ = [
    "InMemoryPersonRepository",
    "PersonRepository",
    "SqlitePersonRepository",
    "StorageError",
]
