"""Tests for configuration loading and factory functions."""

from __future__ import annotations

from pathlib import Path
from tempfile import NamedTemporaryFile

import pytest
from pydantic import ValidationError

from claimcheck.aggregator import ResearchAggregator
from claimcheck.config import (
    ClaimcheckConfig,
    ClaudeAnswerEngineConfig,
    FactCheckConfig,
    LoggingConfig,
    MemoryStoreConfig,
    NewsAPIConfig,
    PerplexityAnswerEngineConfig,
    ResearchConfig,
    SQLiteStoreConfig,
    create_from_config,
    get_default_config_path,
    load_config,
)
from claimcheck.config.factory import (
    create_aggregator,
    create_answer_engine,
    create_news_source,
    create_store,
)
from claimcheck.data import SourceType
from claimcheck.run_logger import RunLogger
from claimcheck.search import ClaudeAnswerEngine, NewsAPISource, PerplexityAnswerEngine
from claimcheck.store import InMemoryResearchStore, SQLiteResearchStore
from claimcheck.verify import FactChecker


@pytest.fixture(autouse=True)
def _no_ambient_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("CLAUDE_API_KEY", "PERPLEXITY_API_KEY", "NEWS_API_KEY"):
        monkeypatch.delenv(var, raising=False)


def _load(yaml_content: str) -> ClaimcheckConfig:
    with NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        f.write(yaml_content)
        f.flush()
        return load_config(Path(f.name))


class TestConfigModels:
    """Tests for Pydantic config models."""

    def test_research_config_defaults(self) -> None:
        config = ResearchConfig()
        assert isinstance(config.answer_engine, ClaudeAnswerEngineConfig)
        assert config.cache_ttl_seconds == 86400
        assert config.max_results == 15
        assert config.corroboration_boost == 10
        assert config.single_flight is False

    def test_news_config_defaults(self) -> None:
        config = NewsAPIConfig()
        assert config.page_size == 10
        assert config.lookback_months == 3
        assert config.timeout == 30.0

    def test_root_defaults(self) -> None:
        config = ClaimcheckConfig()
        assert isinstance(config.store, MemoryStoreConfig)
        assert config.fact_check.language == "en"
        assert config.fact_check.max_claims == 10
        assert config.logging.enabled is False

    def test_configs_are_frozen(self) -> None:
        config = ResearchConfig()
        with pytest.raises(ValidationError):
            config.max_results = 3  # type: ignore[misc]

    def test_page_size_bounds(self) -> None:
        with pytest.raises(ValidationError):
            NewsAPIConfig(page_size=101)

    def test_ttl_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            ResearchConfig(cache_ttl_seconds=0)

    def test_max_claims_capped_at_ten(self) -> None:
        assert FactCheckConfig(max_claims=10).max_claims == 10
        with pytest.raises(ValidationError):
            FactCheckConfig(max_claims=50)


class TestConfigLoader:
    """Tests for YAML config loading."""

    def test_load_full_config(self) -> None:
        config = _load(
            """
research:
  answer_engine:
    type: perplexity
    model: sonar-pro
  news:
    page_size: 20
  cache_ttl_seconds: 3600
  single_flight: true
store:
  type: sqlite
  path: /tmp/research.db
fact_check:
  language: fr
logging:
  enabled: true
  log_dir: runs
"""
        )

        assert isinstance(config.research.answer_engine, PerplexityAnswerEngineConfig)
        assert config.research.answer_engine.model == "sonar-pro"
        assert config.research.news.page_size == 20
        assert config.research.cache_ttl_seconds == 3600
        assert config.research.single_flight is True
        assert isinstance(config.store, SQLiteStoreConfig)
        assert config.store.path == "/tmp/research.db"
        assert config.fact_check.language == "fr"
        assert config.logging.log_dir == "runs"

    def test_load_empty_file_uses_defaults(self) -> None:
        config = _load("")
        assert config == ClaimcheckConfig()

    def test_unknown_engine_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _load("research:\n  answer_engine:\n    type: bing\n")

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_get_default_config_path(self) -> None:
        path = get_default_config_path()
        assert path.name == "default.yaml"
        assert "configs" in str(path)

    def test_load_default_config(self) -> None:
        path = get_default_config_path()
        if path.exists():
            config = load_config(path)
            assert isinstance(config, ClaimcheckConfig)


class TestFactoryFunctions:
    """Tests for component factory functions."""

    def test_create_claude_engine_from_config_key(self) -> None:
        engine = create_answer_engine(ClaudeAnswerEngineConfig(api_key="test-key"))
        assert isinstance(engine, ClaudeAnswerEngine)
        assert engine.is_available()

    def test_create_claude_engine_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CLAUDE_API_KEY", "env-key")
        engine = create_answer_engine(ClaudeAnswerEngineConfig())
        assert engine.is_available()

    def test_engine_without_key_is_unavailable(self) -> None:
        assert not create_answer_engine(ClaudeAnswerEngineConfig()).is_available()

    def test_disabled_engine_is_unavailable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PERPLEXITY_API_KEY", "env-key")
        engine = create_answer_engine(PerplexityAnswerEngineConfig(enabled=False))
        assert isinstance(engine, PerplexityAnswerEngine)
        assert not engine.is_available()

    def test_create_news_source(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("NEWS_API_KEY", "env-key")
        source = create_news_source(NewsAPIConfig(page_size=5))
        assert isinstance(source, NewsAPISource)
        assert source.is_available()
        assert not create_news_source(NewsAPIConfig(enabled=False)).is_available()

    def test_create_store(self, tmp_path: Path) -> None:
        assert isinstance(create_store(MemoryStoreConfig()), InMemoryResearchStore)
        sqlite_store = create_store(SQLiteStoreConfig(path=str(tmp_path / "r.db")))
        assert isinstance(sqlite_store, SQLiteResearchStore)

    def test_create_aggregator(self) -> None:
        config = ResearchConfig(
            news=NewsAPIConfig(api_key="news-key"),
            cache_ttl_seconds=60,
        )
        aggregator = create_aggregator(config, InMemoryResearchStore())

        assert isinstance(aggregator, ResearchAggregator)
        assert aggregator.cache_ttl_seconds == 60
        assert aggregator.available_sources() == [SourceType.NEWS_INDEX]

    def test_create_from_config(self) -> None:
        checker, run_logger = create_from_config(ClaimcheckConfig())
        assert isinstance(checker, FactChecker)
        assert run_logger is None

    def test_create_from_config_with_logging(self, tmp_path: Path) -> None:
        config = ClaimcheckConfig(logging=LoggingConfig(enabled=False))
        checker, run_logger = create_from_config(
            config, log_override=True, log_dir_override=str(tmp_path)
        )
        assert isinstance(checker, FactChecker)
        assert isinstance(run_logger, RunLogger)
        assert run_logger.enabled
