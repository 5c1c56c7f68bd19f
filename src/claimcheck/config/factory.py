"""Factory functions to create components from configuration.

API keys are resolved here, once, from the config or the environment.
Components never read ambient configuration at call time.
"""

import os
from pathlib import Path

from claimcheck.aggregator.research import ResearchAggregator
from claimcheck.claims.patterns import PatternClaimExtractor
from claimcheck.config.models import (
    ClaimcheckConfig,
    ClaudeAnswerEngineConfig,
    MemoryStoreConfig,
    NewsAPIConfig,
    PerplexityAnswerEngineConfig,
    ResearchConfig,
    SQLiteStoreConfig,
)
from claimcheck.run_logger import RunLogger
from claimcheck.search.answer import AnswerEngineSource
from claimcheck.search.base import AnswerEngine, ResearchSource
from claimcheck.search.claude import ClaudeAnswerEngine
from claimcheck.search.newsapi import NewsAPISource
from claimcheck.search.perplexity import PerplexityAnswerEngine
from claimcheck.store.base import ResearchStore
from claimcheck.store.memory import InMemoryResearchStore
from claimcheck.store.sqlite import SQLiteResearchStore
from claimcheck.verify.checker import FactChecker


def _resolve_key(configured: str | None, env_var: str, enabled: bool) -> str | None:
    if not enabled:
        return None
    return configured or os.environ.get(env_var) or None


def create_answer_engine(
    config: ClaudeAnswerEngineConfig | PerplexityAnswerEngineConfig,
) -> AnswerEngine:
    """Create an answer engine from config.

    A disabled engine, or one without a key, is created unavailable.
    """
    if isinstance(config, ClaudeAnswerEngineConfig):
        return ClaudeAnswerEngine(
            api_key=_resolve_key(config.api_key, "CLAUDE_API_KEY", config.enabled),
            model=config.model,
            max_searches=config.max_searches,
        )
    if isinstance(config, PerplexityAnswerEngineConfig):
        return PerplexityAnswerEngine(
            api_key=_resolve_key(config.api_key, "PERPLEXITY_API_KEY", config.enabled),
            model=config.model,
            base_url=config.base_url,
            timeout=config.timeout,
        )
    msg = f"Unknown answer engine config type: {type(config)}"
    raise ValueError(msg)


def create_news_source(config: NewsAPIConfig) -> NewsAPISource:
    """Create the news index source from config."""
    return NewsAPISource(
        api_key=_resolve_key(config.api_key, "NEWS_API_KEY", config.enabled),
        page_size=config.page_size,
        lookback_months=config.lookback_months,
        timeout=config.timeout,
        base_url=config.base_url,
    )


def create_store(config: MemoryStoreConfig | SQLiteStoreConfig) -> ResearchStore:
    """Create a research store from config. Call ``initialize`` before use."""
    if isinstance(config, MemoryStoreConfig):
        return InMemoryResearchStore()
    if isinstance(config, SQLiteStoreConfig):
        return SQLiteResearchStore(config.path)
    msg = f"Unknown store config type: {type(config)}"
    raise ValueError(msg)


def create_aggregator(config: ResearchConfig, store: ResearchStore) -> ResearchAggregator:
    """Create a research aggregator with both sources from config."""
    sources: list[ResearchSource] = [
        AnswerEngineSource(create_answer_engine(config.answer_engine)),
        create_news_source(config.news),
    ]
    return ResearchAggregator(
        sources,
        store,
        cache_ttl_seconds=config.cache_ttl_seconds,
        max_results=config.max_results,
        corroboration_boost=config.corroboration_boost,
        single_flight=config.single_flight,
    )


def create_from_config(
    config: ClaimcheckConfig,
    *,
    log_override: bool | None = None,
    log_dir_override: str | None = None,
) -> tuple[FactChecker, RunLogger | None]:
    """Create a complete fact checker from root config.

    Args:
        config: Root configuration.
        log_override: Override the config's logging.enabled setting.
        log_dir_override: Override the config's logging.log_dir setting.

    Returns:
        Tuple of (fact_checker, run_logger).
        run_logger is None if logging is disabled.
    """
    log_enabled = log_override if log_override is not None else config.logging.enabled
    log_dir = Path(log_dir_override if log_dir_override is not None else config.logging.log_dir)

    run_logger: RunLogger | None = None
    if log_enabled:
        run_logger = RunLogger(log_dir=log_dir, enabled=True)

    store = create_store(config.store)
    aggregator = create_aggregator(config.research, store)
    checker = FactChecker(
        aggregator,
        extractor=PatternClaimExtractor(
            config.fact_check.language, max_claims=config.fact_check.max_claims
        ),
        run_logger=run_logger,
    )
    return (checker, run_logger)
