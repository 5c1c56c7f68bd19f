"""Claimcheck: research aggregation and fact verification for editorial content."""

from claimcheck.aggregator import ResearchAggregator, make_cache_key, merge_results
from claimcheck.claims import ClaimExtractor, PatternClaimExtractor
from claimcheck.config import ClaimcheckConfig, create_from_config, load_config
from claimcheck.data import (
    BiographicalClaim,
    CacheEntry,
    CacheStats,
    Claim,
    ClaimType,
    Confidence,
    FactCheckResult,
    HistoricalClaim,
    ProviderError,
    ProviderErrorKind,
    ProviderResult,
    Recommendation,
    ResearchQuery,
    ResearchResult,
    ResultItem,
    SearchReport,
    Sentiment,
    SourceAnalysis,
    SourceType,
    StatisticClaim,
    VerificationStatus,
    VerificationSummary,
)
from claimcheck.run_logger import RunLogger
from claimcheck.search import (
    Answer,
    AnswerEngine,
    AnswerEngineSource,
    ClaudeAnswerEngine,
    NewsAPISource,
    PerplexityAnswerEngine,
    ResearchSource,
)
from claimcheck.store import InMemoryResearchStore, ResearchStore, SQLiteResearchStore
from claimcheck.url import extract_domain, normalize_url
from claimcheck.verify import (
    FactChecker,
    KeywordSentimentClassifier,
    SentimentClassifier,
    summarize,
)

__all__ = [
    # Models
    "BiographicalClaim",
    "CacheEntry",
    "CacheStats",
    "Claim",
    "ClaimType",
    "Confidence",
    "FactCheckResult",
    "HistoricalClaim",
    "ProviderError",
    "ProviderErrorKind",
    "ProviderResult",
    "Recommendation",
    "ResearchQuery",
    "ResearchResult",
    "ResultItem",
    "SearchReport",
    "Sentiment",
    "SourceAnalysis",
    "SourceType",
    "StatisticClaim",
    "VerificationStatus",
    "VerificationSummary",
    # Search
    "Answer",
    "AnswerEngine",
    "AnswerEngineSource",
    "ClaudeAnswerEngine",
    "NewsAPISource",
    "PerplexityAnswerEngine",
    "ResearchSource",
    # Store
    "InMemoryResearchStore",
    "ResearchStore",
    "SQLiteResearchStore",
    # Aggregator
    "ResearchAggregator",
    "make_cache_key",
    "merge_results",
    # Claims
    "ClaimExtractor",
    "PatternClaimExtractor",
    # Verification
    "FactChecker",
    "KeywordSentimentClassifier",
    "SentimentClassifier",
    "summarize",
    # Config
    "ClaimcheckConfig",
    "create_from_config",
    "load_config",
    # Logging
    "RunLogger",
    # URL utilities
    "extract_domain",
    "normalize_url",
]
