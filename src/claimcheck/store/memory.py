"""In-process research store backed by dicts and lists."""

import dataclasses
from collections import Counter
from datetime import datetime

from claimcheck.data import CacheEntry, CacheStats, ResearchQuery, ResearchResult, ResultItem


def hit_rate(records: list[ResearchQuery]) -> float:
    if not records:
        return 0.0
    hits = sum(1 for r in records if r.cache_hit)
    return round(hits / len(records) * 100, 2)


class InMemoryResearchStore:
    """Research store that keeps everything in memory.

    Useful for tests and for short-lived processes where history does not
    need to survive a restart. Every method completes without yielding, so
    each call is atomic with respect to other coroutines.
    """

    def __init__(self) -> None:
        self._cache: dict[str, CacheEntry] = {}
        self._queries: list[ResearchQuery] = []
        self._results: list[ResearchResult] = []

    async def initialize(self) -> None:
        pass

    @property
    def queries(self) -> list[ResearchQuery]:
        """All recorded queries, oldest first."""
        return list(self._queries)

    async def get_cached(self, cache_key: str, *, now: datetime) -> CacheEntry | None:
        entry = self._cache.get(cache_key)
        if entry is None or entry.is_expired(now):
            return None
        entry = dataclasses.replace(entry, hit_count=entry.hit_count + 1)
        self._cache[cache_key] = entry
        return entry

    async def record_query(self, record: ResearchQuery) -> ResearchQuery:
        stored = dataclasses.replace(record, id=len(self._queries) + 1)
        self._queries.append(stored)
        return stored

    async def save_search(
        self,
        record: ResearchQuery,
        results: list[ResultItem],
        entry: CacheEntry | None,
    ) -> ResearchQuery:
        query_id = len(self._queries) + 1
        stored = await self.record_query(record)
        for item in results:
            row = ResearchResult.from_item(query_id, item)
            self._results.append(dataclasses.replace(row, id=len(self._results) + 1))
        if entry is not None:
            self._cache[entry.cache_key] = dataclasses.replace(entry, hit_count=0)
        return stored

    async def list_results(self, query_id: int) -> list[ResearchResult]:
        return [r for r in self._results if r.query_id == query_id]

    async def recent_queries(self, limit: int = 20) -> list[ResearchQuery]:
        return list(reversed(self._queries))[:limit]

    async def cache_stats(self, *, now: datetime) -> CacheStats:
        entries = list(self._cache.values())
        live = sum(1 for e in entries if not e.is_expired(now))
        return CacheStats(
            total_entries=len(entries),
            live_entries=live,
            expired_entries=len(entries) - live,
            total_hits=sum(e.hit_count for e in entries),
        )

    async def most_popular(self, limit: int = 10) -> list[CacheEntry]:
        return sorted(self._cache.values(), key=lambda e: e.hit_count, reverse=True)[:limit]

    async def language_distribution(self) -> dict[str, int]:
        return dict(Counter(e.language_code for e in self._cache.values()))

    async def cache_hit_rate(self, *, since: datetime) -> float:
        return hit_rate([q for q in self._queries if q.created_at >= since])

    async def clean_expired(self, *, now: datetime) -> int:
        expired = [key for key, e in self._cache.items() if e.is_expired(now)]
        for key in expired:
            del self._cache[key]
        return len(expired)

    async def clear_cache(self) -> int:
        count = len(self._cache)
        self._cache.clear()
        return count
