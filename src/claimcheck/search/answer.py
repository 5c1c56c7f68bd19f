"""Adapter turning an AI answer engine into ranked evidence items."""

import logging
from datetime import UTC, datetime

import anthropic
import httpx

from claimcheck.data import ProviderErrorKind, ProviderResult, ResultItem, SourceType
from claimcheck.search.base import Answer, AnswerEngine
from claimcheck.url import extract_domain

logger = logging.getLogger(__name__)

ANSWER_RELEVANCE = 85
CITATION_START_RELEVANCE = 80
CITATION_RELEVANCE_STEP = 5
CITATION_MIN_RELEVANCE = 50
EXCERPT_LENGTH = 500
TITLE_QUERY_LENGTH = 100


def citation_relevance(index: int) -> int:
    """Relevance of the ``index``-th citation (0-based), decreasing to a floor."""
    return max(CITATION_START_RELEVANCE - index * CITATION_RELEVANCE_STEP, CITATION_MIN_RELEVANCE)


class AnswerEngineSource:
    """Source adapter for an AI answer engine.

    The engine's synthesized answer becomes one high-relevance result; each
    citation it supplies becomes an additional result with decreasing
    relevance.

    Args:
        engine: The answer engine to query.
    """

    source_type = SourceType.ANSWER_ENGINE

    def __init__(self, engine: AnswerEngine) -> None:
        self._engine = engine

    def is_available(self) -> bool:
        return self._engine.is_available()

    async def search(self, query: str, language: str) -> ProviderResult:
        try:
            answer = await self._engine.answer(query, language)
        except (httpx.HTTPError, anthropic.APIError) as e:
            logger.warning(f"{self._engine.name} search failed for {query!r}. Error: {e}")
            return ProviderResult.failure(
                self.source_type, ProviderErrorKind.REQUEST_FAILED, str(e)
            )
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"{self._engine.name} returned a malformed answer for {query!r}: {e}")
            return ProviderResult.failure(
                self.source_type, ProviderErrorKind.PARSE_FAILURE, str(e)
            )

        items = self._to_items(answer, query)
        logger.info(f"{self._engine.name} search completed: {len(items)} results")
        return ProviderResult.success(self.source_type, items)

    def _to_items(self, answer: Answer, query: str) -> list[ResultItem]:
        retrieved_at = datetime.now(tz=UTC).isoformat()
        items: list[ResultItem] = []

        if answer.content:
            items.append(
                ResultItem(
                    source_type=self.source_type,
                    title=f"{self._engine.name} - {query[:TITLE_QUERY_LENGTH]}",
                    url=self._engine.answer_url,
                    excerpt=answer.content[:EXCERPT_LENGTH],
                    published_date=retrieved_at,
                    relevance_score=ANSWER_RELEVANCE,
                )
            )

        for index, url in enumerate(answer.citations):
            items.append(
                ResultItem(
                    source_type=self.source_type,
                    title=extract_domain(url),
                    url=url,
                    published_date=retrieved_at,
                    relevance_score=citation_relevance(index),
                )
            )
        return items
