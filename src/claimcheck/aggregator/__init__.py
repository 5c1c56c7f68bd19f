"""Research aggregation module."""

from claimcheck.aggregator.research import (
    ResearchAggregator,
    make_cache_key,
    merge_results,
    normalize_query,
)

__all__ = [
    "ResearchAggregator",
    "make_cache_key",
    "merge_results",
    "normalize_query",
]
