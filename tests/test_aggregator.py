"""Tests for ResearchAggregator."""

import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from claimcheck.aggregator import (
    ResearchAggregator,
    make_cache_key,
    merge_results,
    normalize_query,
)
from claimcheck.data import (
    ProviderErrorKind,
    ProviderResult,
    ResultItem,
    SourceType,
)
from claimcheck.store import InMemoryResearchStore, SQLiteResearchStore


class FakeSource:
    """Research source returning canned items, an error result, or raising."""

    def __init__(
        self,
        source_type: SourceType,
        items: list[ResultItem] | None = None,
        *,
        available: bool = True,
        error: ProviderErrorKind | None = None,
        exception: Exception | None = None,
        delay: float = 0.0,
    ) -> None:
        self.source_type = source_type
        self._items = items or []
        self._available = available
        self._error = error
        self._exception = exception
        self._delay = delay
        self.calls: list[tuple[str, str]] = []

    def is_available(self) -> bool:
        return self._available

    async def search(self, query: str, language: str) -> ProviderResult:
        self.calls.append((query, language))
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._exception is not None:
            raise self._exception
        if self._error is not None:
            return ProviderResult.failure(self.source_type, self._error, "failed")
        return ProviderResult.success(self.source_type, self._items)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def _item(source_type: SourceType, url: str, score: int) -> ResultItem:
    return ResultItem(source_type=source_type, title=url, url=url, relevance_score=score)


def _answer_items() -> list[ResultItem]:
    return [
        _item(SourceType.ANSWER_ENGINE, "https://claude.ai", 85),
        _item(SourceType.ANSWER_ENGINE, "https://example.com/a", 80),
    ]


def _news_items() -> list[ResultItem]:
    return [
        _item(SourceType.NEWS_INDEX, "https://Example.com/a/", 30),
        _item(SourceType.NEWS_INDEX, "https://news.example.com/b", 60),
    ]


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2026, 3, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def store() -> InMemoryResearchStore:
    return InMemoryResearchStore()


@pytest.fixture
def answer_source() -> FakeSource:
    return FakeSource(SourceType.ANSWER_ENGINE, _answer_items())


@pytest.fixture
def news_source() -> FakeSource:
    return FakeSource(SourceType.NEWS_INDEX, _news_items())


@pytest.fixture
def aggregator(
    answer_source: FakeSource,
    news_source: FakeSource,
    store: InMemoryResearchStore,
    clock: Clock,
) -> ResearchAggregator:
    return ResearchAggregator([answer_source, news_source], store, clock=clock)


# -- module helpers --


class TestCacheKey:
    def test_normalize_query(self) -> None:
        assert normalize_query("  Expatriates   WORLDWIDE \n") == "expatriates worldwide"

    def test_key_ignores_case_and_spacing(self) -> None:
        assert make_cache_key(" Expatriates  worldwide", "EN") == make_cache_key(
            "expatriates worldwide", "en"
        )

    def test_key_depends_on_language(self) -> None:
        assert make_cache_key("expatriates", "en") != make_cache_key("expatriates", "fr")

    def test_key_is_md5_hex(self) -> None:
        key = make_cache_key("q", "en")
        assert len(key) == 32
        assert all(c in "0123456789abcdef" for c in key)


class TestMergeResults:
    def test_first_occurrence_wins_and_is_boosted(self) -> None:
        merged = merge_results(_answer_items() + _news_items())

        urls = [item.url for item in merged]
        assert urls == ["https://example.com/a", "https://claude.ai", "https://news.example.com/b"]
        boosted = merged[0]
        assert boosted.source_type == SourceType.ANSWER_ENGINE
        assert boosted.relevance_score == 90

    def test_boost_capped_at_100(self) -> None:
        items = [
            _item(SourceType.ANSWER_ENGINE, "https://a.com", 95),
            _item(SourceType.NEWS_INDEX, "https://a.com", 10),
            _item(SourceType.NEWS_INDEX, "https://a.com/", 10),
        ]
        merged = merge_results(items)
        assert len(merged) == 1
        assert merged[0].relevance_score == 100

    def test_ties_keep_merge_order(self) -> None:
        items = [
            _item(SourceType.ANSWER_ENGINE, "https://first.com", 50),
            _item(SourceType.NEWS_INDEX, "https://second.com", 50),
            _item(SourceType.NEWS_INDEX, "https://third.com", 50),
        ]
        assert [i.url for i in merge_results(items)] == [
            "https://first.com",
            "https://second.com",
            "https://third.com",
        ]

    def test_idempotent(self) -> None:
        once = merge_results(_answer_items() + _news_items())
        assert merge_results(once) == once

    def test_no_duplicate_urls(self) -> None:
        merged = merge_results(_answer_items() + _news_items() + _news_items())
        assert len({item.url.lower().rstrip("/") for item in merged}) == len(merged)

    def test_out_of_range_scores_are_clamped(self) -> None:
        items = [
            _item(SourceType.ANSWER_ENGINE, "https://high.com", 140),
            _item(SourceType.NEWS_INDEX, "https://low.com", -5),
            _item(SourceType.NEWS_INDEX, "https://low.com/", 30),
        ]

        merged = merge_results(items)

        assert [(i.url, i.relevance_score) for i in merged] == [
            ("https://high.com", 100),
            ("https://low.com", 10),
        ]


# -- search --


class TestSearch:
    async def test_merges_both_sources(self, aggregator: ResearchAggregator) -> None:
        results = await aggregator.search("expatriates", "en")

        assert [r.url for r in results] == [
            "https://example.com/a",
            "https://claude.ai",
            "https://news.example.com/b",
        ]
        assert results[0].relevance_score == 90
        assert all(0 <= r.relevance_score <= 100 for r in results)

    async def test_second_search_served_from_cache(
        self,
        aggregator: ResearchAggregator,
        answer_source: FakeSource,
        news_source: FakeSource,
        store: InMemoryResearchStore,
    ) -> None:
        first = await aggregator.search_with_report("expatriates", "en")
        second = await aggregator.search_with_report("  EXPATRIATES ", "en")

        assert not first.cache_hit
        assert second.cache_hit
        assert second.results == first.results
        assert len(answer_source.calls) == 1
        assert len(news_source.calls) == 1

        popular = await store.most_popular()
        assert popular[0].hit_count == 1

    async def test_every_search_is_recorded(
        self, aggregator: ResearchAggregator, store: InMemoryResearchStore
    ) -> None:
        await aggregator.search("expatriates", "en")
        await aggregator.search("expatriates", "en")

        records = store.queries
        assert [r.cache_hit for r in records] == [False, True]
        assert all(r.results_count == 3 for r in records)
        assert records[0].cache_key == records[1].cache_key

    async def test_result_rows_saved_on_miss(
        self, aggregator: ResearchAggregator, store: InMemoryResearchStore
    ) -> None:
        report = await aggregator.search_with_report("expatriates", "en")

        assert report.query_id is not None
        rows = await store.list_results(report.query_id)
        assert [r.url for r in rows] == [r.url for r in report.results]

    async def test_languages_cached_separately(
        self, aggregator: ResearchAggregator, news_source: FakeSource
    ) -> None:
        await aggregator.search("expatriates", "en")
        report = await aggregator.search_with_report("expatriates", "fr")

        assert not report.cache_hit
        assert news_source.calls == [("expatriates", "en"), ("expatriates", "fr")]

    async def test_truncated_to_max_results(self, store: InMemoryResearchStore) -> None:
        items = [
            _item(SourceType.NEWS_INDEX, f"https://example.com/{i}", i) for i in range(20)
        ]
        aggregator = ResearchAggregator([FakeSource(SourceType.NEWS_INDEX, items)], store)

        results = await aggregator.search("q", "en")

        assert len(results) == 15
        assert results[0].relevance_score == 19
        assert results[-1].relevance_score == 5

    async def test_cache_expires_after_ttl(
        self,
        aggregator: ResearchAggregator,
        answer_source: FakeSource,
        clock: Clock,
    ) -> None:
        await aggregator.search("expatriates", "en")
        clock.now += timedelta(hours=23, minutes=59)
        assert (await aggregator.search_with_report("expatriates", "en")).cache_hit

        clock.now += timedelta(minutes=1)
        report = await aggregator.search_with_report("expatriates", "en")

        assert not report.cache_hit
        assert len(answer_source.calls) == 2

    async def test_set_cache_ttl(
        self, aggregator: ResearchAggregator, clock: Clock
    ) -> None:
        aggregator.set_cache_ttl(60)
        assert aggregator.cache_ttl_seconds == 60

        await aggregator.search("expatriates", "en")
        clock.now += timedelta(seconds=61)

        assert not (await aggregator.search_with_report("expatriates", "en")).cache_hit
        with pytest.raises(ValueError):
            aggregator.set_cache_ttl(0)


class TestSQLiteBackedSearch:
    async def test_out_of_range_source_scores_are_stored_clamped(self, tmp_path: Path) -> None:
        store = SQLiteResearchStore(tmp_path / "research.db")
        await store.initialize()
        source = FakeSource(
            SourceType.NEWS_INDEX,
            [
                _item(SourceType.NEWS_INDEX, "https://high.com", 140),
                _item(SourceType.NEWS_INDEX, "https://low.com", -5),
            ],
        )
        aggregator = ResearchAggregator([source], store)

        report = await aggregator.search_with_report("expatriates", "en")

        assert [r.relevance_score for r in report.results] == [100, 0]
        assert report.query_id is not None
        rows = await store.list_results(report.query_id)
        assert [r.relevance_score for r in rows] == [100, 0]


class TestDegradation:
    async def test_failed_source_contributes_nothing(
        self, answer_source: FakeSource, store: InMemoryResearchStore
    ) -> None:
        failing = FakeSource(SourceType.NEWS_INDEX, error=ProviderErrorKind.REQUEST_FAILED)
        aggregator = ResearchAggregator([answer_source, failing], store)

        report = await aggregator.search_with_report("expatriates", "en")

        assert [r.source_type for r in report.results] == [SourceType.ANSWER_ENGINE] * 2
        assert len(report.errors) == 1
        assert report.errors[0].source_type == SourceType.NEWS_INDEX
        assert report.errors[0].kind == ProviderErrorKind.REQUEST_FAILED

    async def test_raising_source_becomes_request_failure(
        self, news_source: FakeSource, store: InMemoryResearchStore
    ) -> None:
        raising = FakeSource(SourceType.ANSWER_ENGINE, exception=RuntimeError("boom"))
        aggregator = ResearchAggregator([raising, news_source], store)

        report = await aggregator.search_with_report("expatriates", "en")

        assert len(report.results) == 2
        assert report.errors[0].source_type == SourceType.ANSWER_ENGINE
        assert report.errors[0].kind == ProviderErrorKind.REQUEST_FAILED

    async def test_unavailable_source_is_skipped(
        self, answer_source: FakeSource, store: InMemoryResearchStore
    ) -> None:
        disabled = FakeSource(SourceType.NEWS_INDEX, _news_items(), available=False)
        aggregator = ResearchAggregator([answer_source, disabled], store)

        report = await aggregator.search_with_report("expatriates", "en")

        assert disabled.calls == []
        assert report.errors == []
        assert aggregator.available_sources() == [SourceType.ANSWER_ENGINE]

    async def test_no_available_sources_returns_empty(
        self, store: InMemoryResearchStore
    ) -> None:
        aggregator = ResearchAggregator(
            [
                FakeSource(SourceType.ANSWER_ENGINE, _answer_items(), available=False),
                FakeSource(SourceType.NEWS_INDEX, _news_items(), available=False),
            ],
            store,
        )

        report = await aggregator.search_with_report("expatriates", "en")

        assert report.results == []
        assert report.errors == []

    async def test_empty_result_from_errors_is_not_cached(
        self, store: InMemoryResearchStore
    ) -> None:
        failing = FakeSource(SourceType.NEWS_INDEX, error=ProviderErrorKind.PARSE_FAILURE)
        aggregator = ResearchAggregator([failing], store)

        await aggregator.search("expatriates", "en")
        report = await aggregator.search_with_report("expatriates", "en")

        assert not report.cache_hit
        assert len(failing.calls) == 2
        assert len(store.queries) == 2


class TestSourceSelection:
    async def test_restrict_to_one_source(
        self,
        aggregator: ResearchAggregator,
        answer_source: FakeSource,
        news_source: FakeSource,
    ) -> None:
        results = await aggregator.search("expatriates", "en", sources=["news_index"])

        assert answer_source.calls == []
        assert len(news_source.calls) == 1
        assert all(r.source_type == SourceType.NEWS_INDEX for r in results)

    async def test_unknown_source_rejected(self, aggregator: ResearchAggregator) -> None:
        with pytest.raises(ValueError, match="Unknown source"):
            await aggregator.search("expatriates", "en", sources=["twitter"])

    def test_duplicate_source_type_rejected(self, store: InMemoryResearchStore) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            ResearchAggregator(
                [FakeSource(SourceType.NEWS_INDEX), FakeSource(SourceType.NEWS_INDEX)], store
            )


class TestValidation:
    @pytest.mark.parametrize("query", ["", "   "])
    async def test_empty_query_rejected(
        self, aggregator: ResearchAggregator, query: str
    ) -> None:
        with pytest.raises(ValueError, match="empty"):
            await aggregator.search(query, "en")

    @pytest.mark.parametrize("language", ["", "eng", "e1", "fr-FR"])
    async def test_bad_language_rejected(
        self, aggregator: ResearchAggregator, language: str
    ) -> None:
        with pytest.raises(ValueError, match="language"):
            await aggregator.search("expatriates", language)


class TestSingleFlight:
    async def test_concurrent_misses_share_one_round(self, store: InMemoryResearchStore) -> None:
        slow = FakeSource(SourceType.NEWS_INDEX, _news_items(), delay=0.01)
        aggregator = ResearchAggregator([slow], store, single_flight=True)

        first, second = await asyncio.gather(
            aggregator.search_with_report("expatriates", "en"),
            aggregator.search_with_report("expatriates", "en"),
        )

        assert len(slow.calls) == 1
        assert first.results == second.results
        assert sorted([first.cache_hit, second.cache_hit]) == [False, True]
        assert len(store.queries) == 2

    async def test_without_single_flight_each_miss_queries(
        self, store: InMemoryResearchStore
    ) -> None:
        slow = FakeSource(SourceType.NEWS_INDEX, _news_items(), delay=0.01)
        aggregator = ResearchAggregator([slow], store)

        await asyncio.gather(
            aggregator.search("expatriates", "en"),
            aggregator.search("expatriates", "en"),
        )

        assert len(slow.calls) == 2


class TestMaintenance:
    async def test_cache_statistics(
        self, aggregator: ResearchAggregator
    ) -> None:
        await aggregator.search("expatriates", "en")
        await aggregator.search("expatriates", "en")
        await aggregator.search("expatriés", "fr")

        stats = await aggregator.cache_statistics()

        assert stats["cache"]["total_entries"] == 2
        assert stats["cache"]["total_hits"] == 1
        assert stats["most_popular_queries"][0]["query_text"] == "expatriates"
        assert stats["language_distribution"] == {"en": 1, "fr": 1}
        assert stats["cache_hit_rate_30_days"] == pytest.approx(33.33)

    async def test_clean_expired_and_clear(
        self, aggregator: ResearchAggregator, clock: Clock
    ) -> None:
        await aggregator.search("expatriates", "en")
        clock.now += timedelta(hours=25)
        await aggregator.search("migrants", "en")

        assert await aggregator.clean_expired_cache() == 1
        assert await aggregator.clear_cache() == 1
