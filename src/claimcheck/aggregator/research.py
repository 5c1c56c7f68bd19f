"""Multi-source research aggregation with caching and history."""

import asyncio
import dataclasses
import hashlib
import logging
import re
from collections.abc import Callable, Iterable
from datetime import UTC, datetime, timedelta

from claimcheck.data import (
    CacheEntry,
    ProviderError,
    ProviderErrorKind,
    ProviderResult,
    ResearchQuery,
    ResultItem,
    SearchReport,
    SourceType,
)
from claimcheck.search.base import ResearchSource
from claimcheck.store.base import ResearchStore
from claimcheck.url import normalize_url

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_RESULTS = 15
CORROBORATION_BOOST = 10
MAX_RELEVANCE = 100

# Merge order of provider results before dedup and ranking.
SOURCE_ORDER: tuple[SourceType, ...] = (SourceType.ANSWER_ENGINE, SourceType.NEWS_INDEX)

_LANGUAGE_RE = re.compile(r"^[a-z]{2}$")


def normalize_query(query: str) -> str:
    """Trim, lowercase and collapse internal whitespace."""
    return " ".join(query.lower().split())


def make_cache_key(query: str, language: str) -> str:
    """Deterministic cache key for a (query, language) pair."""
    raw = f"{normalize_query(query)}_{language.lower()}"
    return hashlib.md5(raw.encode("utf-8")).hexdigest()


def clamp_relevance(score: int) -> int:
    return max(0, min(MAX_RELEVANCE, score))


def merge_results(
    items: Iterable[ResultItem],
    *,
    boost: int = CORROBORATION_BOOST,
) -> list[ResultItem]:
    """Deduplicate by normalized URL and rank by relevance.

    The first occurrence of a URL is kept. Every repeat, whether from another
    provider or the same one, adds ``boost`` to the kept item's score. Scores
    are clamped to [0, 100] whatever the source reported. The result is
    stably sorted by score, highest first, so ties keep their merge order.
    """
    unique: dict[str, ResultItem] = {}
    for item in items:
        key = normalize_url(item.url)
        kept = unique.get(key)
        if kept is None:
            score = clamp_relevance(item.relevance_score)
            if score != item.relevance_score:
                item = dataclasses.replace(item, relevance_score=score)
            unique[key] = item
            continue
        boosted = clamp_relevance(kept.relevance_score + boost)
        unique[key] = dataclasses.replace(kept, relevance_score=boosted)

    return sorted(unique.values(), key=lambda item: item.relevance_score, reverse=True)


class ResearchAggregator:
    """Turn a query into a deduplicated, ranked list of evidence items.

    Flow:
    1. Look up the cache by (query, language); a live entry is returned as-is
    2. Otherwise query every available source in parallel
    3. Merge successful results, deduplicate by URL, rank and truncate
    4. Commit the query record, result rows and cache entry together

    A failing source contributes zero results and never aborts the search.

    Args:
        sources: Source adapters, at most one per source type.
        store: Cache and history store.
        cache_ttl_seconds: Lifetime of cache entries (default 24h).
        max_results: Results returned after ranking (default 15).
        corroboration_boost: Score added per repeated URL (default 10).
        single_flight: Share one provider round between concurrent misses
            for the same cache key.
        clock: Returns the current time; defaults to ``datetime.now(UTC)``.
    """

    def __init__(
        self,
        sources: list[ResearchSource],
        store: ResearchStore,
        *,
        cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS,
        max_results: int = DEFAULT_MAX_RESULTS,
        corroboration_boost: int = CORROBORATION_BOOST,
        single_flight: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._sources: dict[SourceType, ResearchSource] = {}
        for source in sources:
            if source.source_type in self._sources:
                raise ValueError(f"Duplicate source for {source.source_type}")
            self._sources[source.source_type] = source
        self._store = store
        self._cache_ttl = timedelta(seconds=cache_ttl_seconds)
        self._max_results = max_results
        self._boost = corroboration_boost
        self._single_flight = single_flight
        self._clock = clock or (lambda: datetime.now(tz=UTC))
        self._in_flight: dict[str, asyncio.Task[SearchReport]] = {}

    @property
    def store(self) -> ResearchStore:
        return self._store

    @property
    def cache_ttl_seconds(self) -> int:
        return int(self._cache_ttl.total_seconds())

    def set_cache_ttl(self, seconds: int) -> None:
        """Change the TTL applied to cache entries written from now on."""
        if seconds <= 0:
            raise ValueError("Cache TTL must be positive")
        self._cache_ttl = timedelta(seconds=seconds)

    def available_sources(self) -> list[SourceType]:
        return [t for t in SOURCE_ORDER if t in self._sources and self._sources[t].is_available()]

    async def search(
        self,
        query: str,
        language: str,
        sources: Iterable[SourceType | str] | None = None,
    ) -> list[ResultItem]:
        """Search all selected sources, returning ranked evidence.

        Args:
            query: Free-text query or claim.
            language: Two-letter language code.
            sources: Source types to use (default: all).

        Returns:
            At most ``max_results`` items, highest relevance first.
        """
        report = await self.search_with_report(query, language, sources)
        return report.results

    async def search_with_report(
        self,
        query: str,
        language: str,
        sources: Iterable[SourceType | str] | None = None,
    ) -> SearchReport:
        """Like ``search`` but also reports cache use and provider errors."""
        query = query.strip()
        if not query:
            raise ValueError("Query must not be empty")
        language = language.strip().lower()
        if not _LANGUAGE_RE.match(language):
            raise ValueError(f"Unsupported language code: {language!r}")
        selected = self._select_sources(sources)

        cache_key = make_cache_key(query, language)
        cached = await self._store.get_cached(cache_key, now=self._clock())
        if cached is not None:
            logger.info(f"Research cache HIT for {query!r} ({language})")
            record = await self._record_hit(query, language, cache_key, len(cached.results))
            return SearchReport(
                cache_key=cache_key,
                results=list(cached.results),
                cache_hit=True,
                query_id=record.id,
            )

        logger.info(f"Research cache MISS for {query!r} ({language}), fetching new data")

        if not self._single_flight:
            return await self._search_miss(query, language, cache_key, selected)

        task = self._in_flight.get(cache_key)
        if task is not None:
            report = await asyncio.shield(task)
            record = await self._record_hit(query, language, cache_key, len(report.results))
            return SearchReport(
                cache_key=cache_key,
                results=list(report.results),
                cache_hit=True,
                query_id=record.id,
            )

        task = asyncio.create_task(self._search_miss(query, language, cache_key, selected))
        self._in_flight[cache_key] = task
        task.add_done_callback(lambda _t: self._in_flight.pop(cache_key, None))
        return await asyncio.shield(task)

    def _select_sources(self, sources: Iterable[SourceType | str] | None) -> list[SourceType]:
        if sources is None:
            return list(SOURCE_ORDER)
        try:
            requested = {SourceType(s) for s in sources}
        except ValueError as e:
            raise ValueError(f"Unknown source: {e}") from e
        return [t for t in SOURCE_ORDER if t in requested]

    async def _record_hit(
        self, query: str, language: str, cache_key: str, results_count: int
    ) -> ResearchQuery:
        return await self._store.record_query(
            ResearchQuery(
                query_text=query,
                language_code=language,
                cache_key=cache_key,
                cache_hit=True,
                results_count=results_count,
                created_at=self._clock(),
            )
        )

    async def _search_miss(
        self,
        query: str,
        language: str,
        cache_key: str,
        selected: list[SourceType],
    ) -> SearchReport:
        active: list[ResearchSource] = []
        for source_type in selected:
            source = self._sources.get(source_type)
            if source is None or not source.is_available():
                logger.debug(f"Skipping unavailable source {source_type}")
                continue
            active.append(source)

        outcomes = await asyncio.gather(
            *(source.search(query, language) for source in active),
            return_exceptions=True,
        )

        merged: list[ResultItem] = []
        errors: list[ProviderError] = []
        for source, outcome in zip(active, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.warning(f"Unexpected error from {source.source_type}: {outcome!r}")
                outcome = ProviderResult.failure(
                    source.source_type, ProviderErrorKind.REQUEST_FAILED, repr(outcome)
                )
            if outcome.error is not None:
                logger.warning(
                    f"Source {outcome.source_type} returned no results "
                    f"({outcome.error.kind}): {outcome.error.message}"
                )
                errors.append(outcome.error)
                continue
            merged.extend(outcome.items)

        results = merge_results(merged, boost=self._boost)[: self._max_results]

        now = self._clock()
        entry: CacheEntry | None = CacheEntry(
            cache_key=cache_key,
            query_text=query,
            language_code=language,
            results=tuple(results),
            created_at=now,
            expires_at=now + self._cache_ttl,
        )
        if not results and errors:
            # Empty result sets caused by provider errors are not cached
            entry = None

        record = await self._store.save_search(
            ResearchQuery(
                query_text=query,
                language_code=language,
                cache_key=cache_key,
                cache_hit=False,
                results_count=len(results),
                created_at=now,
            ),
            results,
            entry,
        )

        return SearchReport(
            cache_key=cache_key,
            results=results,
            cache_hit=False,
            errors=errors,
            query_id=record.id,
        )

    # --- Cache statistics and maintenance ---

    async def cache_statistics(self, *, days: int = 30, popular_limit: int = 10) -> dict:
        """Summary of cache contents and recent hit rate."""
        now = self._clock()
        stats = await self._store.cache_stats(now=now)
        popular = await self._store.most_popular(popular_limit)
        return {
            "cache": dataclasses.asdict(stats),
            "most_popular_queries": [
                {
                    "query_text": e.query_text,
                    "language_code": e.language_code,
                    "hit_count": e.hit_count,
                }
                for e in popular
            ],
            "language_distribution": await self._store.language_distribution(),
            f"cache_hit_rate_{days}_days": await self._store.cache_hit_rate(
                since=now - timedelta(days=days)
            ),
        }

    async def clean_expired_cache(self) -> int:
        return await self._store.clean_expired(now=self._clock())

    async def clear_cache(self) -> int:
        return await self._store.clear_cache()
