"""Research store backed by SQLite.

Cache rows hold the aggregated result list as JSON. Query and result rows are
append-only history. All access is non-blocking via aiosqlite.
"""

from __future__ import annotations

import dataclasses
import json
from datetime import UTC, datetime
from pathlib import Path

import aiosqlite

from claimcheck.data import (
    CacheEntry,
    CacheStats,
    ResearchQuery,
    ResearchResult,
    ResultItem,
    SourceType,
)
from claimcheck.store.memory import hit_rate


def _ts(value: datetime) -> str:
    """Serialize a timestamp so that string order matches time order."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="microseconds")


def _results_to_json(results: tuple[ResultItem, ...] | list[ResultItem]) -> str:
    return json.dumps([dataclasses.asdict(item) for item in results])


def _results_from_json(raw: str) -> tuple[ResultItem, ...]:
    items = []
    for data in json.loads(raw):
        data["source_type"] = SourceType(data["source_type"])
        items.append(ResultItem(**data))
    return tuple(items)


def _row_to_entry(row: dict) -> CacheEntry:
    return CacheEntry(
        cache_key=row["cache_key"],
        query_text=row["query_text"],
        language_code=row["language_code"],
        results=_results_from_json(row["results"]),
        hit_count=row["hit_count"],
        created_at=datetime.fromisoformat(row["created_at"]),
        expires_at=datetime.fromisoformat(row["expires_at"]),
    )


def _row_to_query(row: dict) -> ResearchQuery:
    return ResearchQuery(
        id=row["id"],
        query_text=row["query_text"],
        language_code=row["language_code"],
        cache_key=row["cache_key"],
        cache_hit=bool(row["cache_hit"]),
        results_count=row["results_count"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


_INSERT_QUERY = """INSERT INTO research_queries
   (query_text, language_code, cache_key, cache_hit, results_count, created_at)
   VALUES (?, ?, ?, ?, ?, ?)"""

_INSERT_RESULT = """INSERT INTO research_results
   (query_id, source_type, title, url, excerpt, published_date, relevance_score)
   VALUES (?, ?, ?, ?, ?, ?, ?)"""

_UPSERT_CACHE = """INSERT INTO research_cache
   (cache_key, query_text, language_code, results, hit_count, created_at, expires_at)
   VALUES (?, ?, ?, ?, 0, ?, ?)
   ON CONFLICT(cache_key) DO UPDATE SET
     query_text = excluded.query_text,
     language_code = excluded.language_code,
     results = excluded.results,
     hit_count = 0,
     created_at = excluded.created_at,
     expires_at = excluded.expires_at"""


def _query_params(record: ResearchQuery) -> tuple:
    return (
        record.query_text,
        record.language_code,
        record.cache_key,
        int(record.cache_hit),
        record.results_count,
        _ts(record.created_at),
    )


class SQLiteResearchStore:
    """Async SQLite research store.

    Uses a connection per operation, so one instance can be shared freely
    between coroutines.

    Args:
        db_path: Database file path. Parent directories are created on
            ``initialize``.
    """

    def __init__(self, db_path: str | Path) -> None:
        self._db_path = str(db_path)

    async def initialize(self) -> None:
        """Create tables from schema.sql if they don't exist."""
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        schema = (Path(__file__).parent / "schema.sql").read_text()
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute("PRAGMA journal_mode=WAL")
            await db.executescript(schema)
            await db.commit()

    async def _query(self, sql: str, params: tuple = ()) -> list[dict]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    async def _execute(self, sql: str, params: tuple = ()) -> int:
        """Execute a write and return the affected row count."""
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(sql, params)
            await db.commit()
            return cursor.rowcount

    # --- Cache ---

    async def get_cached(self, cache_key: str, *, now: datetime) -> CacheEntry | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "UPDATE research_cache SET hit_count = hit_count + 1 "
                "WHERE cache_key = ? AND expires_at > ?",
                (cache_key, _ts(now)),
            )
            if cursor.rowcount == 0:
                await db.rollback()
                return None
            cursor = await db.execute(
                "SELECT * FROM research_cache WHERE cache_key = ?", (cache_key,)
            )
            row = await cursor.fetchone()
            await db.commit()
        return _row_to_entry(dict(row)) if row is not None else None

    async def record_query(self, record: ResearchQuery) -> ResearchQuery:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(_INSERT_QUERY, _query_params(record))
            await db.commit()
            return dataclasses.replace(record, id=cursor.lastrowid)

    async def save_search(
        self,
        record: ResearchQuery,
        results: list[ResultItem],
        entry: CacheEntry | None,
    ) -> ResearchQuery:
        async with aiosqlite.connect(self._db_path) as db:
            try:
                cursor = await db.execute(_INSERT_QUERY, _query_params(record))
                query_id = cursor.lastrowid
                await db.executemany(
                    _INSERT_RESULT,
                    [
                        (
                            query_id,
                            item.source_type.value,
                            item.title,
                            item.url,
                            item.excerpt,
                            item.published_date,
                            item.relevance_score,
                        )
                        for item in results
                    ],
                )
                if entry is not None:
                    await db.execute(
                        _UPSERT_CACHE,
                        (
                            entry.cache_key,
                            entry.query_text,
                            entry.language_code,
                            _results_to_json(entry.results),
                            _ts(entry.created_at),
                            _ts(entry.expires_at),
                        ),
                    )
                await db.commit()
            except BaseException:
                await db.rollback()
                raise
        return dataclasses.replace(record, id=query_id)

    # --- History ---

    async def list_results(self, query_id: int) -> list[ResearchResult]:
        rows = await self._query(
            "SELECT * FROM research_results WHERE query_id = ? ORDER BY id", (query_id,)
        )
        return [
            ResearchResult(
                id=row["id"],
                query_id=row["query_id"],
                source_type=SourceType(row["source_type"]),
                title=row["title"],
                url=row["url"],
                excerpt=row["excerpt"],
                published_date=row["published_date"],
                relevance_score=row["relevance_score"],
            )
            for row in rows
        ]

    async def recent_queries(self, limit: int = 20) -> list[ResearchQuery]:
        rows = await self._query(
            "SELECT * FROM research_queries ORDER BY id DESC LIMIT ?", (limit,)
        )
        return [_row_to_query(row) for row in rows]

    # --- Statistics and maintenance ---

    async def cache_stats(self, *, now: datetime) -> CacheStats:
        rows = await self._query(
            """SELECT COUNT(*) AS total,
                      COALESCE(SUM(CASE WHEN expires_at > ? THEN 1 ELSE 0 END), 0) AS live,
                      COALESCE(SUM(hit_count), 0) AS hits
               FROM research_cache""",
            (_ts(now),),
        )
        row = rows[0]
        return CacheStats(
            total_entries=row["total"],
            live_entries=row["live"],
            expired_entries=row["total"] - row["live"],
            total_hits=row["hits"],
        )

    async def most_popular(self, limit: int = 10) -> list[CacheEntry]:
        rows = await self._query(
            "SELECT * FROM research_cache ORDER BY hit_count DESC LIMIT ?", (limit,)
        )
        return [_row_to_entry(row) for row in rows]

    async def language_distribution(self) -> dict[str, int]:
        rows = await self._query(
            "SELECT language_code, COUNT(*) AS n FROM research_cache GROUP BY language_code"
        )
        return {row["language_code"]: row["n"] for row in rows}

    async def cache_hit_rate(self, *, since: datetime) -> float:
        rows = await self._query(
            "SELECT * FROM research_queries WHERE created_at >= ?", (_ts(since),)
        )
        return hit_rate([_row_to_query(row) for row in rows])

    async def clean_expired(self, *, now: datetime) -> int:
        return await self._execute("DELETE FROM research_cache WHERE expires_at <= ?", (_ts(now),))

    async def clear_cache(self) -> int:
        return await self._execute("DELETE FROM research_cache")
