from datetime import datetime
from typing import Protocol

from claimcheck.data import CacheEntry, CacheStats, ResearchQuery, ResearchResult, ResultItem


class ResearchStore(Protocol):
    """Interface for the research cache and the append-only query history."""

    async def initialize(self) -> None:
        """Prepare the backing storage (create tables, etc.)."""
        ...

    async def get_cached(self, cache_key: str, *, now: datetime) -> CacheEntry | None:
        """Return the live cache entry for a key, counting the read.

        The entry's ``hit_count`` is incremented atomically and the returned
        entry carries the incremented value. Expired entries are treated as
        absent.
        """
        ...

    async def record_query(self, record: ResearchQuery) -> ResearchQuery:
        """Append a query record and return it with its assigned id."""
        ...

    async def save_search(
        self,
        record: ResearchQuery,
        results: list[ResultItem],
        entry: CacheEntry | None,
    ) -> ResearchQuery:
        """Commit a cache-miss round: query row, result rows and cache upsert.

        All writes happen together; ``entry=None`` skips the cache upsert.
        An upsert replaces any existing entry for the key.
        """
        ...

    async def list_results(self, query_id: int) -> list[ResearchResult]: ...

    async def recent_queries(self, limit: int = 20) -> list[ResearchQuery]: ...

    async def cache_stats(self, *, now: datetime) -> CacheStats: ...

    async def most_popular(self, limit: int = 10) -> list[CacheEntry]:
        """Cache entries ordered by hit count, most read first."""
        ...

    async def language_distribution(self) -> dict[str, int]:
        """Number of cache entries per language code."""
        ...

    async def cache_hit_rate(self, *, since: datetime) -> float:
        """Percentage of queries since ``since`` served from cache."""
        ...

    async def clean_expired(self, *, now: datetime) -> int:
        """Delete expired cache entries, returning how many were removed."""
        ...

    async def clear_cache(self) -> int:
        """Delete every cache entry, returning how many were removed."""
        ...
