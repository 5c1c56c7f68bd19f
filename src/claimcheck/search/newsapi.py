"""News index search using the NewsAPI ``everything`` endpoint."""

import calendar
import logging
from datetime import UTC, datetime

import httpx

from claimcheck.data import ProviderErrorKind, ProviderResult, ResultItem, SourceType

NEWS_API_URL = "https://newsapi.org/v2/everything"

# Languages NewsAPI indexes that we publish in; anything else searches English.
LANGUAGE_MAP: dict[str, str] = {
    "fr": "fr",
    "en": "en",
    "es": "es",
    "de": "de",
    "it": "it",
    "pt": "pt",
    "ar": "ar",
    "zh": "zh",
    "hi": "hi",
}

MIN_TERM_LENGTH = 3
TERM_OCCURRENCE_SCORE = 10
TITLE_BONUS = 20

logger = logging.getLogger(__name__)


def map_language(code: str) -> str:
    """Map a language code to the NewsAPI vocabulary, falling back to English."""
    return LANGUAGE_MAP.get(code.lower(), "en")


def score_relevance(title: str, description: str, query: str) -> int:
    """Term-frequency relevance of an article to the query, in [0, 100].

    Each query term of at least three characters scores 10 per occurrence in
    the title and description, plus 20 if it appears in the title.
    """
    title = title.lower()
    content = f"{title} {description.lower()}"

    score = 0
    for term in query.lower().split():
        if len(term) < MIN_TERM_LENGTH:
            continue
        score += content.count(term) * TERM_OCCURRENCE_SCORE
        if term in title:
            score += TITLE_BONUS
    return min(100, score)


def months_ago(now: datetime, months: int) -> datetime:
    """Shift ``now`` back by whole calendar months, clamping the day."""
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


class NewsAPISource:
    """Search recent news articles using the NewsAPI.

    Args:
        api_key: NewsAPI key. Without one the source is unavailable and is
            skipped by the aggregator.
        page_size: Articles requested per search (default 10).
        lookback_months: Only articles published within this many months.
        timeout: HTTP timeout in seconds.
        base_url: Endpoint URL, overridable for testing.
    """

    source_type = SourceType.NEWS_INDEX

    def __init__(
        self,
        *,
        api_key: str | None = None,
        page_size: int = 10,
        lookback_months: int = 3,
        timeout: float = 30.0,
        base_url: str = NEWS_API_URL,
    ) -> None:
        self._api_key = api_key
        self._page_size = page_size
        self._lookback_months = lookback_months
        self._timeout = timeout
        self._base_url = base_url

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def search(self, query: str, language: str) -> ProviderResult:
        params: dict[str, str | int] = {
            "q": query,
            "language": map_language(language),
            "sortBy": "relevancy",
            "pageSize": min(self._page_size, 100),  # NewsAPI max is 100
            "from": months_ago(datetime.now(tz=UTC), self._lookback_months).isoformat(),
            "apiKey": self._api_key,  # type: ignore[dict-item]
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(self._base_url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"News API request failed for {query!r}. Error: {e}")
            return ProviderResult.failure(
                self.source_type, ProviderErrorKind.REQUEST_FAILED, str(e)
            )
        except ValueError as e:
            logger.warning(f"News API returned invalid JSON for {query!r}: {e}")
            return ProviderResult.failure(
                self.source_type, ProviderErrorKind.PARSE_FAILURE, str(e)
            )

        try:
            items = self._parse_articles(data, query)
        except (AttributeError, TypeError) as e:
            logger.warning(f"News API payload has an unexpected shape for {query!r}: {e}")
            return ProviderResult.failure(
                self.source_type, ProviderErrorKind.PARSE_FAILURE, str(e)
            )

        logger.info(f"News API search completed: {len(items)} results")
        return ProviderResult.success(self.source_type, items)

    def _parse_articles(self, data: dict, query: str) -> list[ResultItem]:
        items: list[ResultItem] = []
        for article in data.get("articles") or []:
            url = article.get("url") or ""
            if not url:
                continue
            title = article.get("title") or ""
            description = article.get("description") or ""
            items.append(
                ResultItem(
                    source_type=self.source_type,
                    title=title,
                    url=url,
                    excerpt=description,
                    published_date=article.get("publishedAt"),
                    relevance_score=score_relevance(title, description, query),
                )
            )
        return items
