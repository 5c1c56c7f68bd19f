"""Configuration module for claimcheck."""

from claimcheck.config.factory import create_from_config
from claimcheck.config.loader import get_default_config_path, load_config
from claimcheck.config.models import (
    AnswerEngineConfig,
    ClaimcheckConfig,
    ClaudeAnswerEngineConfig,
    FactCheckConfig,
    LoggingConfig,
    MemoryStoreConfig,
    NewsAPIConfig,
    PerplexityAnswerEngineConfig,
    ResearchConfig,
    SQLiteStoreConfig,
    StoreConfig,
)

__all__ = [
    "AnswerEngineConfig",
    "ClaimcheckConfig",
    "ClaudeAnswerEngineConfig",
    "FactCheckConfig",
    "LoggingConfig",
    "MemoryStoreConfig",
    "NewsAPIConfig",
    "PerplexityAnswerEngineConfig",
    "ResearchConfig",
    "SQLiteStoreConfig",
    "StoreConfig",
    "create_from_config",
    "get_default_config_path",
    "load_config",
]
