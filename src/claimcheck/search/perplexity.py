import logging

import httpx

from claimcheck.search.base import Answer

logger = logging.getLogger(__name__)

PERPLEXITY_API_URL = "https://api.perplexity.ai"
PERPLEXITY_ANSWER_URL = "https://perplexity.ai"

SYSTEM_PROMPT = (
    "You are a rigorous research assistant. Answer with verified, sourced facts, "
    "including the figures and dates reported by your sources."
)


class PerplexityAnswerEngine:
    """Answer queries with the Perplexity chat completions API.

    Perplexity's online models search the web themselves and return the
    URLs they relied on in a top-level ``citations`` array.

    Args:
        api_key: Perplexity API key. Without one the engine reports itself
            unavailable.
        model: Perplexity model name (default: "sonar").
        base_url: API base URL.
        timeout: Request timeout in seconds.
    """

    name = "Perplexity AI"
    answer_url = PERPLEXITY_ANSWER_URL

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "sonar",
        base_url: str = PERPLEXITY_API_URL,
        timeout: float = 60.0,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def answer(self, query: str, language: str) -> Answer:
        payload = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"{query}\n\nAnswer in the language with ISO code '{language}'.",
                },
            ],
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            response = await client.post(
                f"{self._base_url}/chat/completions", json=payload, headers=headers
            )
            response.raise_for_status()
            data = response.json()

        if not isinstance(data, dict):
            raise ValueError(f"Unexpected Perplexity payload: {type(data).__name__}")

        choices = data.get("choices") or []
        content = ""
        if choices:
            content = choices[0]["message"].get("content") or ""
        citations = tuple(url for url in data.get("citations") or [] if url)
        return Answer(content=content.strip(), citations=citations)
