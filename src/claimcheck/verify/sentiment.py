"""Keyword-based stance classification of evidence against a claim."""

import re
from typing import Protocol

from claimcheck.data import ResultItem, Sentiment

MIN_TOKEN_LENGTH = 4
SUPPORT_THRESHOLD = 0.5

CONTRADICTION_WORDS: dict[str, tuple[str, ...]] = {
    "en": ("false", "incorrect", "not", "error", "inaccurate", "wrong", "untrue", "misleading"),
    "fr": ("faux", "incorrect", "non", "pas", "erreur", "inexact"),
    "es": ("falso", "incorrecto", "no", "error", "inexacto"),
    "de": ("falsch", "unrichtig", "nicht", "fehler", "ungenau"),
    "it": ("falso", "errato", "non", "errore", "inesatto"),
    "pt": ("falso", "incorreto", "não", "erro", "impreciso"),
}

_PUNCTUATION = ".,;:!?\"'()[]«»“”"


def claim_tokens(claim: str) -> list[str]:
    """Lowercased claim words longer than three characters."""
    words = (w.strip(_PUNCTUATION) for w in claim.lower().split())
    return [w for w in words if len(w) >= MIN_TOKEN_LENGTH]


def match_rate(tokens: list[str], text: str) -> float:
    """Fraction of tokens found as substrings of ``text``."""
    if not tokens:
        return 0.0
    return sum(1 for t in tokens if t in text) / len(tokens)


class SentimentClassifier(Protocol):
    """Interface for classifying one evidence item against a claim."""

    def classify(self, item: ResultItem, claim: str) -> Sentiment: ...


class KeywordSentimentClassifier:
    """Classify evidence by contradiction keywords and claim-word overlap.

    A contradiction word anywhere in the title or excerpt makes the item
    contradicting, whatever its overlap with the claim. Otherwise the item is
    supporting when more than half of the claim's words appear in it.

    Args:
        language: Contradiction vocabulary; unknown languages use English.
    """

    def __init__(self, language: str = "en") -> None:
        words = CONTRADICTION_WORDS.get(language.lower(), CONTRADICTION_WORDS["en"])
        self._contradiction_re = re.compile(
            r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b"
        )

    def classify(self, item: ResultItem, claim: str) -> Sentiment:
        text = f"{item.title} {item.excerpt}".lower()

        if self._contradiction_re.search(text):
            return Sentiment.CONTRADICTING

        if match_rate(claim_tokens(claim), text) > SUPPORT_THRESHOLD:
            return Sentiment.SUPPORTING

        return Sentiment.NEUTRAL
