"""Data models for claimcheck."""

from claimcheck.data.models import (
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

__all__ = [
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
]
