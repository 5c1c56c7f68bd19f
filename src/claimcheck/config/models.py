"""Pydantic configuration models for claimcheck components."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field

# ============================================================
# Answer Engine Configs
# ============================================================


class ClaudeAnswerEngineConfig(BaseModel):
    """Configuration for ClaudeAnswerEngine."""

    type: Literal["claude"] = "claude"
    enabled: bool = True
    model: str = "claude-haiku-4-5-20251001"
    max_searches: int = 3
    api_key: str | None = None

    model_config = {"frozen": True}


class PerplexityAnswerEngineConfig(BaseModel):
    """Configuration for PerplexityAnswerEngine."""

    type: Literal["perplexity"] = "perplexity"
    enabled: bool = True
    model: str = "sonar"
    base_url: str = "https://api.perplexity.ai"
    timeout: float = 60.0
    api_key: str | None = None

    model_config = {"frozen": True}


AnswerEngineConfig = Annotated[
    ClaudeAnswerEngineConfig | PerplexityAnswerEngineConfig,
    Field(discriminator="type"),
]


# ============================================================
# News Index Config
# ============================================================


class NewsAPIConfig(BaseModel):
    """Configuration for NewsAPISource."""

    enabled: bool = True
    base_url: str = "https://newsapi.org/v2/everything"
    page_size: int = Field(default=10, ge=1, le=100)
    lookback_months: int = Field(default=3, ge=0)
    timeout: float = 30.0
    api_key: str | None = None

    model_config = {"frozen": True}


# ============================================================
# Research Config
# ============================================================


class ResearchConfig(BaseModel):
    """Configuration for ResearchAggregator and its sources."""

    answer_engine: AnswerEngineConfig = Field(default_factory=ClaudeAnswerEngineConfig)
    news: NewsAPIConfig = Field(default_factory=NewsAPIConfig)
    cache_ttl_seconds: int = Field(default=24 * 60 * 60, gt=0)
    max_results: int = Field(default=15, gt=0)
    corroboration_boost: int = Field(default=10, ge=0, le=100)
    single_flight: bool = False

    model_config = {"frozen": True}


# ============================================================
# Store Configs
# ============================================================


class MemoryStoreConfig(BaseModel):
    """In-memory store (history lost on exit)."""

    type: Literal["memory"] = "memory"

    model_config = {"frozen": True}


class SQLiteStoreConfig(BaseModel):
    """SQLite-backed store."""

    type: Literal["sqlite"] = "sqlite"
    path: str = "data/research.db"

    model_config = {"frozen": True}


StoreConfig = Annotated[
    MemoryStoreConfig | SQLiteStoreConfig,
    Field(discriminator="type"),
]


# ============================================================
# Fact Check Config
# ============================================================


class FactCheckConfig(BaseModel):
    """Configuration for claim extraction."""

    language: str = "en"
    max_claims: int = Field(default=10, gt=0, le=10)

    model_config = {"frozen": True}


# ============================================================
# Logging Config
# ============================================================


class LoggingConfig(BaseModel):
    """Configuration for JSON run logging."""

    enabled: bool = False
    log_dir: str = "logs"

    model_config = {"frozen": True}


# ============================================================
# Root Config
# ============================================================


class ClaimcheckConfig(BaseModel):
    """Root configuration for claimcheck."""

    research: ResearchConfig = Field(default_factory=ResearchConfig)
    store: StoreConfig = Field(default_factory=MemoryStoreConfig)
    fact_check: FactCheckConfig = Field(default_factory=FactCheckConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}
