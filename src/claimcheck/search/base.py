from dataclasses import dataclass, field
from typing import Protocol

from claimcheck.data import ProviderResult, SourceType


@dataclass(frozen=True)
class Answer:
    """Synthesized answer from an AI answer engine."""

    content: str = ""
    citations: tuple[str, ...] = field(default_factory=tuple)


class ResearchSource(Protocol):
    """Interface for a categorized evidence provider."""

    source_type: SourceType

    def is_available(self) -> bool:
        """Whether the source is configured (credentials present, enabled)."""
        ...

    async def search(self, query: str, language: str) -> ProviderResult:
        """Search for evidence matching the query.

        Implementations never raise on network or payload problems; they
        return a ``ProviderResult`` carrying the error instead.

        Args:
            query: Free-text query or claim.
            language: Two-letter language code.

        Returns:
            Items found, or the reason none could be fetched.
        """
        ...


class AnswerEngine(Protocol):
    """Interface for an AI engine answering a query with cited sources."""

    name: str
    answer_url: str

    def is_available(self) -> bool: ...

    async def answer(self, query: str, language: str) -> Answer:
        """Answer the query, returning the text and the cited URLs.

        Raises:
            httpx.HTTPError, anthropic.APIError: On transport failures.
            ValueError: On a malformed response payload.
        """
        ...
