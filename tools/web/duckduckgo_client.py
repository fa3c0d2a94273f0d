"""DuckDuckGo backends: text search and the Instant Answer API.

Text search goes through the duckduckgo-search library (no API key). The
Instant Answer API is a plain JSON endpoint, queried with httpx.
"""

import asyncio
from typing import Any

import httpx

from utils.logger import get_logger

from .contracts import SearchResult, ToolError

logger = get_logger(__name__)

INSTANT_ANSWER_URL = "https://api.duckduckgo.com/"
DEFAULT_TIMEOUT_S = 10.0


class DuckDuckGoClient:
    """
    Privacy-respecting search and quick-fact lookups via DuckDuckGo.
    """

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            timeout_s: Timeout for Instant Answer HTTP calls
            transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.timeout_s = timeout_s
        self._transport = transport

    @staticmethod
    def _search_sync(query: str, max_results: int) -> list[dict[str, Any]]:
        # Lazy import to avoid loading at startup
        from duckduckgo_search import DDGS

        with DDGS() as ddgs:
            return list(ddgs.text(query, max_results=max_results))

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        """
        Run a DuckDuckGo text search.

        Raises:
            ToolError: If the search library fails or is missing
        """
        logger.info(f"DuckDuckGo search: '{query}' (max_results={max_results})")
        try:
            raw_results = await asyncio.to_thread(self._search_sync, query, max_results)
        except ImportError as e:
            raise ToolError(
                "duckduckgo-search package not installed. Run: pip install duckduckgo-search",
                tool="web_search",
            ) from e
        except Exception as e:
            logger.warning(
                "DuckDuckGo search failed",
                extra={
                    "extra_fields": {
                        "query": query,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
            )
            raise ToolError(f"Search failed: {e}", tool="web_search") from e

        results = []
        for item in raw_results:
            url = str(item.get("href") or item.get("link") or "").strip()
            if not url:
                continue
            results.append(
                SearchResult(
                    title=str(item.get("title") or "").strip() or url,
                    url=url,
                    snippet=str(item.get("body") or item.get("snippet") or "").strip(),
                )
            )
        return results

    async def instant_answer(self, query: str) -> dict[str, Any]:
        """
        Query the DuckDuckGo Instant Answer API.

        Returns:
            The decoded JSON object (abstract, answer, definition, related topics...)

        Raises:
            ToolError: On HTTP failure or a non-JSON body
        """
        params = {
            "q": query,
            "format": "json",
            "no_html": "1",
            "skip_disambig": "1",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self._transport
            ) as client:
                response = await client.get(INSTANT_ANSWER_URL, params=params)
                response.raise_for_status()
                payload = response.json() if response.content else {}
        except httpx.HTTPError as e:
            raise ToolError(f"Instant answer request failed: {e}", tool="instant_answer") from e
        except ValueError as e:
            raise ToolError("Instant answer returned invalid JSON", tool="instant_answer") from e

        if not isinstance(payload, dict):
            raise ToolError("Instant answer returned an unexpected payload", tool="instant_answer")

        logger.info(
            "Instant answer retrieved",
            extra={
                "extra_fields": {"query": query, "has_abstract": bool(payload.get("AbstractText"))}
            },
        )
        return payload
