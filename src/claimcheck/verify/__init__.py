"""Fact verification module."""

from claimcheck.verify.checker import (
    FactChecker,
    analyze_sources,
    calculate_confidence,
    determine_status,
    recommend,
    suggest_correction,
    summarize,
)
from claimcheck.verify.sentiment import KeywordSentimentClassifier, SentimentClassifier

__all__ = [
    "FactChecker",
    "KeywordSentimentClassifier",
    "SentimentClassifier",
    "analyze_sources",
    "calculate_confidence",
    "determine_status",
    "recommend",
    "suggest_correction",
    "summarize",
]
