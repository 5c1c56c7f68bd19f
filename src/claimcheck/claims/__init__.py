"""Claim extraction module."""

from claimcheck.claims.base import ClaimExtractor
from claimcheck.claims.patterns import MAX_CLAIMS, PatternClaimExtractor

__all__ = [
    "MAX_CLAIMS",
    "ClaimExtractor",
    "PatternClaimExtractor",
]
