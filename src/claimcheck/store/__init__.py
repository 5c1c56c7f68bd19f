"""Research cache and history storage."""

from claimcheck.store.base import ResearchStore
from claimcheck.store.memory import InMemoryResearchStore
from claimcheck.store.sqlite import SQLiteResearchStore

__all__ = [
    "InMemoryResearchStore",
    "ResearchStore",
    "SQLiteResearchStore",
]
