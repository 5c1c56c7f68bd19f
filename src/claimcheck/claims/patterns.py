"""Pattern-based claim extraction.

Three independent regex passes mine statistics, dated events and
biographical statements from prose. Matches are returned in pass order
(statistics first) and truncated, so the first claims found win over more
important ones further down the text.
"""

import re
from dataclasses import dataclass

from claimcheck.data import BiographicalClaim, Claim, HistoricalClaim, StatisticClaim

MAX_CLAIMS = 10

_NAME_WORD = r"[A-Z][a-zàâäéèêëïîôöùûüÿç]+"


@dataclass(frozen=True)
class ClaimVocabulary:
    """Language-specific alternations plugged into the extraction patterns."""

    units: str
    prepositions: str
    copulas: str


VOCABULARIES: dict[str, ClaimVocabulary] = {
    "en": ClaimVocabulary(
        units=r"millions?|billions?|%|percent|per\s*cent",
        prepositions=r"in|since|from|until|by",
        copulas=r"is|was|becomes|will\s+be",
    ),
    "fr": ClaimVocabulary(
        units=r"millions?|milliards?|%|pour\s*cent",
        prepositions=r"en|depuis|à\s+partir\s+de|jusqu'à",
        copulas=r"est|était|devient|sera",
    ),
}


def compile_patterns(vocab: ClaimVocabulary) -> tuple[re.Pattern[str], ...]:
    """Build the statistic, historical and biographical patterns."""
    statistic = re.compile(
        rf"(\d+(?:[,.\s]\d+)*)\s*(?:{vocab.units})?\s+([^.\n]{{10,100}})",
        re.IGNORECASE,
    )
    historical = re.compile(
        rf"(?:\b(?:{vocab.prepositions})\s+)?(?<!\d)(\d{{4}}(?:\s*-\s*\d{{4}})?)(?!\d)"
        rf"[,\s]+([^.\n]{{15,100}})",
        re.IGNORECASE,
    )
    biographical = re.compile(
        rf"({_NAME_WORD}(?:\s+{_NAME_WORD})+)\s+(?:{vocab.copulas})\s+([^.\n]{{10,80}})"
    )
    return statistic, historical, biographical


class PatternClaimExtractor:
    """Extract factual claims from content with localized regex passes.

    Args:
        language: Vocabulary to use; unknown languages fall back to English.
        max_claims: Maximum claims returned per call, between 1 and 10.
    """

    def __init__(self, language: str = "en", *, max_claims: int = MAX_CLAIMS) -> None:
        if not 1 <= max_claims <= MAX_CLAIMS:
            msg = f"max_claims must be between 1 and {MAX_CLAIMS}, got {max_claims}"
            raise ValueError(msg)
        vocab = VOCABULARIES.get(language.lower(), VOCABULARIES["en"])
        self._statistic, self._historical, self._biographical = compile_patterns(vocab)
        self._max_claims = max_claims

    def extract(self, content: str) -> list[Claim]:
        claims: list[Claim] = []

        for match in self._statistic.finditer(content):
            claims.append(
                StatisticClaim(
                    text=match.group(0).strip(),
                    value=match.group(1),
                    context=match.group(2),
                )
            )

        for match in self._historical.finditer(content):
            claims.append(
                HistoricalClaim(
                    text=match.group(0).strip(),
                    date=match.group(1),
                    event=match.group(2),
                )
            )

        for match in self._biographical.finditer(content):
            claims.append(
                BiographicalClaim(
                    text=match.group(0).strip(),
                    person=match.group(1),
                    role=match.group(2),
                )
            )

        return claims[: self._max_claims]
