#!/usr/bin/env python
"""CLI for claimcheck research aggregation and fact verification."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, field_validator, model_validator

from claimcheck.claims import PatternClaimExtractor
from claimcheck.config import create_from_config, get_default_config_path, load_config
from claimcheck.data import FactCheckResult, ResultItem
from claimcheck.verify import FactChecker, summarize

logger = logging.getLogger(__name__)


class CLIArgs(BaseModel):
    """Validated CLI arguments."""

    query: str | None = None
    claim: str | None = None
    content_file: Path | None = None
    lang: str = "en"
    config: Path
    stats: bool = False
    clear_cache: Literal["expired", "all"] | None = None
    log: bool = False
    log_dir: str = "logs"

    @field_validator("config")
    @classmethod
    def config_must_exist(cls, v: Path) -> Path:
        if not v.exists():
            raise ValueError(f"Config file not found: {v}")
        return v

    @field_validator("content_file")
    @classmethod
    def content_file_must_exist(cls, v: Path | None) -> Path | None:
        if v is not None and not v.exists():
            raise ValueError(f"Content file not found: {v}")
        return v

    @field_validator("lang")
    @classmethod
    def lang_must_be_two_letters(cls, v: str) -> str:
        v = v.lower()
        if len(v) != 2 or not v.isalpha():
            raise ValueError(f"Language must be a two-letter code, got {v!r}")
        return v

    @model_validator(mode="after")
    def one_action(self) -> "CLIArgs":
        actions = [
            self.query is not None,
            self.claim is not None,
            self.content_file is not None,
            self.stats,
            self.clear_cache is not None,
        ]
        if sum(actions) != 1:
            raise ValueError(
                "Choose exactly one of --query, --claim, --content-file, --stats, --clear-cache"
            )
        return self


def _log_item(i: int, item: ResultItem) -> None:
    logger.info(f"{i}. [{item.relevance_score}] {item.title}")
    logger.info(f"   Source: {item.source_type}")
    logger.info(f"   URL: {item.url}")
    if item.published_date:
        logger.info(f"   Published: {item.published_date}")


def _log_verdict(result: FactCheckResult) -> None:
    logger.info(f"\nClaim: {result.claim}")
    logger.info(f"   Status: {result.verification_status}")
    logger.info(f"   Confidence: {result.confidence}")
    logger.info(f"   Recommendation: {result.recommendation}")
    logger.info(f"   {result.explanation}")
    for url in result.supporting_sources:
        logger.info(f"   + {url}")
    for item in result.contradicting_sources:
        logger.info(f"   - {item.url}")
    if result.suggested_correction:
        logger.info(f"   {result.suggested_correction}")


async def _search(checker: FactChecker, query: str, lang: str) -> None:
    report = await checker.aggregator.search_with_report(query, lang)
    origin = "cache" if report.cache_hit else "providers"
    logger.info(f"\nFound {len(report.results)} results (from {origin}):\n")
    for i, item in enumerate(report.results, 1):
        _log_item(i, item)
    for error in report.errors:
        logger.warning(f"Source {error.source_type} failed ({error.kind}): {error.message}")


async def _verify_content(
    checker: FactChecker, content: str, lang: str, *, max_claims: int
) -> None:
    claims = PatternClaimExtractor(lang, max_claims=max_claims).extract(content)
    logger.info(f"\nExtracted {len(claims)} claim(s)")
    results = await checker.verify_claims(claims, lang)
    for result in results:
        _log_verdict(result)

    summary = summarize(results)
    logger.info("\n--- Verification Summary ---")
    logger.info(f"Total: {summary.total}")
    logger.info(f"Verified: {summary.verified}")
    logger.info(f"Disputed: {summary.disputed}")
    logger.info(f"Unknown: {summary.unknown}")


async def run(args: CLIArgs) -> None:
    """Execute the requested action with the given configuration.

    Args:
        args: Validated CLI arguments.
    """
    config = load_config(args.config)
    checker, run_logger = create_from_config(
        config,
        log_override=args.log if args.log else None,
        log_dir_override=args.log_dir if args.log_dir != "logs" else None,
    )
    aggregator = checker.aggregator
    await aggregator.store.initialize()

    logger.info(f"Config: {args.config}")
    logger.info(f"Available sources: {', '.join(aggregator.available_sources()) or 'none'}")

    if args.query is not None:
        await _search(checker, args.query, args.lang)
    elif args.claim is not None:
        result = await checker.check_fact(args.claim, args.lang)
        _log_verdict(result)
    elif args.content_file is not None:
        await _verify_content(
            checker,
            args.content_file.read_text(),
            args.lang,
            max_claims=config.fact_check.max_claims,
        )
    elif args.stats:
        stats = await aggregator.cache_statistics()
        logger.info(json.dumps(stats, indent=2))
    elif args.clear_cache == "expired":
        removed = await aggregator.clean_expired_cache()
        logger.info(f"Removed {removed} expired cache entries")
    elif args.clear_cache == "all":
        removed = await aggregator.clear_cache()
        logger.info(f"Removed {removed} cache entries")

    if run_logger and run_logger.last_log_path:
        logger.info(f"\nRun log written to: {run_logger.last_log_path}")


def main() -> None:
    """Entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Aggregate research and fact-check claims before publication."
    )
    parser.add_argument("--query", "-q", help="Search all sources for a query")
    parser.add_argument("--claim", help="Fact-check a single claim")
    parser.add_argument(
        "--content-file",
        type=Path,
        help="Extract claims from a text file and verify each of them",
    )
    parser.add_argument(
        "--lang",
        "-l",
        default="en",
        help="Two-letter language code (default: en)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to YAML config file (default: configs/default.yaml)",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        default=False,
        help="Show cache statistics",
    )
    parser.add_argument(
        "--clear-cache",
        nargs="?",
        const="expired",
        choices=["expired", "all"],
        help="Delete expired cache entries, or all of them with 'all'",
    )
    parser.add_argument(
        "--log",
        action="store_true",
        default=False,
        help="Enable JSON run logging of fact checks",
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default="logs",
        help="Directory for log files (default: logs/)",
    )

    logging.basicConfig(level=logging.INFO, format="%(message)s")

    ns = parser.parse_args()
    config_path: Path = ns.config if ns.config else get_default_config_path()

    try:
        args = CLIArgs(
            query=ns.query,
            claim=ns.claim,
            content_file=ns.content_file,
            lang=ns.lang,
            config=config_path,
            stats=ns.stats,
            clear_cache=ns.clear_cache,
            log=ns.log,
            log_dir=ns.log_dir,
        )
    except Exception as e:
        logger.error(str(e))
        sys.exit(1)

    try:
        asyncio.run(run(args))
    except ValueError as e:
        logger.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
