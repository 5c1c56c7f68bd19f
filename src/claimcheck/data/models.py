"""Core data models for claimcheck."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class SourceType(StrEnum):
    """Provider category a piece of evidence originated from."""

    ANSWER_ENGINE = "answer_engine"
    NEWS_INDEX = "news_index"


class ClaimType(StrEnum):
    """Kinds of factual assertion the claim extractor recognizes."""

    STATISTIC = "statistic"
    HISTORICAL = "historical"
    BIOGRAPHICAL = "biographical"


class Sentiment(StrEnum):
    """Stance of a single evidence item relative to a claim."""

    SUPPORTING = "supporting"
    CONTRADICTING = "contradicting"
    NEUTRAL = "neutral"


class Confidence(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class VerificationStatus(StrEnum):
    VERIFIED = "verified"
    DISPUTED = "disputed"
    UNKNOWN = "unknown"


class Recommendation(StrEnum):
    """Publication gate derived from status and confidence."""

    OK_TO_USE = "OK to use"
    DO_NOT_USE = "Do not use"
    NEEDS_REVIEW = "Needs review"


class ProviderErrorKind(StrEnum):
    UNAVAILABLE = "unavailable"
    REQUEST_FAILED = "request_failed"
    PARSE_FAILURE = "parse_failure"


# ============================================================
# Research
# ============================================================


@dataclass(frozen=True)
class ResultItem:
    """A single evidence item returned by a source adapter."""

    source_type: SourceType
    title: str
    url: str
    excerpt: str = ""
    published_date: str | None = None
    relevance_score: int = 0


@dataclass(frozen=True)
class ResearchQuery:
    """One record per ``search`` invocation, cache hit or miss."""

    query_text: str
    language_code: str
    cache_key: str
    cache_hit: bool
    results_count: int
    created_at: datetime
    id: int | None = None


@dataclass(frozen=True)
class ResearchResult:
    """A persisted evidence row attached to a research query."""

    query_id: int
    source_type: SourceType
    title: str
    url: str
    excerpt: str = ""
    published_date: str | None = None
    relevance_score: int = 0
    id: int | None = None

    @classmethod
    def from_item(cls, query_id: int, item: ResultItem) -> "ResearchResult":
        return cls(
            query_id=query_id,
            source_type=item.source_type,
            title=item.title,
            url=item.url,
            excerpt=item.excerpt,
            published_date=item.published_date,
            relevance_score=item.relevance_score,
        )


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot of the last aggregated result set for a (query, language) pair.

    An entry is live while ``now < expires_at``. Expiry is only enforced when
    the entry is read; nothing evicts it in the background.
    """

    cache_key: str
    query_text: str
    language_code: str
    results: tuple[ResultItem, ...]
    created_at: datetime
    expires_at: datetime
    hit_count: int = 0

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


@dataclass(frozen=True)
class CacheStats:
    total_entries: int = 0
    live_entries: int = 0
    expired_entries: int = 0
    total_hits: int = 0


@dataclass(frozen=True)
class ProviderError:
    """Why a source contributed no results to a search."""

    source_type: SourceType
    kind: ProviderErrorKind
    message: str = ""


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one source call: either items or an error, never both."""

    source_type: SourceType
    items: tuple[ResultItem, ...] = ()
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, source_type: SourceType, items: list[ResultItem]) -> "ProviderResult":
        return cls(source_type=source_type, items=tuple(items))

    @classmethod
    def failure(
        cls, source_type: SourceType, kind: ProviderErrorKind, message: str
    ) -> "ProviderResult":
        return cls(
            source_type=source_type,
            error=ProviderError(source_type=source_type, kind=kind, message=message),
        )


@dataclass
class SearchReport:
    """Everything the aggregator knows about one ``search`` call."""

    cache_key: str
    results: list[ResultItem] = field(default_factory=list)
    cache_hit: bool = False
    errors: list[ProviderError] = field(default_factory=list)
    query_id: int | None = None


# ============================================================
# Claims
# ============================================================


@dataclass(frozen=True)
class Claim:
    """Base type for an extracted assertion."""

    text: str


@dataclass(frozen=True)
class StatisticClaim(Claim):
    """A number with its trailing context, e.g. "304 million expatriates..."."""

    value: str = ""
    context: str = ""
    type: ClaimType = field(default=ClaimType.STATISTIC, init=False)


@dataclass(frozen=True)
class HistoricalClaim(Claim):
    """A year or year range followed by an event description."""

    date: str = ""
    event: str = ""
    type: ClaimType = field(default=ClaimType.HISTORICAL, init=False)


@dataclass(frozen=True)
class BiographicalClaim(Claim):
    """A proper name followed by a copular verb and a role."""

    person: str = ""
    role: str = ""
    type: ClaimType = field(default=ClaimType.BIOGRAPHICAL, init=False)


# ============================================================
# Verification
# ============================================================


@dataclass(frozen=True)
class SourceAnalysis:
    """Evidence partitioned by sentiment relative to a claim."""

    supporting: tuple[ResultItem, ...] = ()
    contradicting: tuple[ResultItem, ...] = ()
    neutral: tuple[ResultItem, ...] = ()

    @property
    def total(self) -> int:
        return len(self.supporting) + len(self.contradicting) + len(self.neutral)

    @property
    def explanation(self) -> str:
        return (
            f"Analyzed {self.total} source(s): {len(self.supporting)} supporting, "
            f"{len(self.contradicting)} contradicting, {len(self.neutral)} neutral."
        )


@dataclass(frozen=True)
class FactCheckResult:
    """Verdict for a single claim. Transient, never persisted."""

    claim: str
    confidence: Confidence
    verification_status: VerificationStatus
    recommendation: Recommendation
    explanation: str
    supporting_sources: tuple[str, ...] = ()
    contradicting_sources: tuple[ResultItem, ...] = ()
    neutral_sources: tuple[str, ...] = ()
    suggested_correction: str | None = None


@dataclass(frozen=True)
class VerificationSummary:
    """Status counts over a batch of fact-check results."""

    total: int = 0
    verified: int = 0
    disputed: int = 0
    unknown: int = 0
