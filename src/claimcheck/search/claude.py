import logging

import anthropic

from claimcheck.search.base import Answer

logger = logging.getLogger(__name__)

CLAUDE_ANSWER_URL = "https://claude.ai"


class ClaudeAnswerEngine:
    """Answer queries using Claude's built-in web search tool.

    This uses Anthropic's server-side web search, so you only need your
    existing Claude API key. The text blocks of the reply form the answer and
    the URLs of the web search results form its citations.

    Note: Web search must be enabled in your Anthropic Console settings.

    Args:
        api_key: Anthropic API key. Without one the engine reports itself
            unavailable instead of raising.
        model: Model to use for search (default: claude-haiku-4-5-20251001).
        max_searches: Max web searches per answer (default: 3).
        max_tokens: Token budget for the answer.
    """

    name = "Claude"
    answer_url = CLAUDE_ANSWER_URL

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "claude-haiku-4-5-20251001",
        max_searches: int = 3,
        max_tokens: int = 1024,
    ) -> None:
        self._client = anthropic.AsyncAnthropic(api_key=api_key) if api_key else None
        self._model = model
        self._max_searches = max_searches
        self._max_tokens = max_tokens

    def is_available(self) -> bool:
        return self._client is not None

    async def answer(self, query: str, language: str) -> Answer:
        if self._client is None:
            raise ValueError("Claude answer engine is not configured with an API key.")

        user_prompt = (
            f"Research the following statement or question using web search: {query}\n\n"
            "Give a short factual answer summarizing what reliable sources say, "
            "including any figures and dates they report. "
            f"Answer in the language with ISO code '{language}'."
        )

        response = await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            tools=[
                {
                    "type": "web_search_20250305",
                    "name": "web_search",
                    "max_uses": self._max_searches,
                }
            ],
            messages=[{"role": "user", "content": user_prompt}],
        )

        texts: list[str] = []
        citations: list[str] = []
        for block in response.content:
            if block.type == "text":
                texts.append(block.text)
            elif block.type == "web_search_tool_result":
                content = block.content
                # An error result carries a single object instead of a list
                if not isinstance(content, list):
                    logger.warning(f"Web search returned an error for {query!r}: {content}")
                    continue
                for result in content:
                    url = getattr(result, "url", "")
                    if url and url not in citations:
                        citations.append(url)

        return Answer(content="".join(texts).strip(), citations=tuple(citations))
