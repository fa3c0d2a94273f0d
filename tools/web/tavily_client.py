"""Tavily API client for web_search.

Tavily handles JavaScript rendering, content extraction and relevance
ranking, so its result snippets are usually cleaner than a plain search
engine's. Requires TAVILY_API_KEY.
"""

import asyncio
import os

from utils.logger import get_logger

from .contracts import SearchResult, ToolError

logger = get_logger(__name__)


class TavilySearchClient:
    """
    Tavily-powered search backend.
    """

    def __init__(self, api_key: str | None = None, search_depth: str = "basic"):
        """
        Initialize Tavily client.

        Args:
            api_key: Tavily API key (defaults to TAVILY_API_KEY env var)
            search_depth: "basic" (faster) or "advanced" (deeper)
        """
        self.api_key = api_key or os.getenv("TAVILY_API_KEY")
        if not self.api_key:
            raise ValueError("TAVILY_API_KEY not found in environment")

        # Lazy import so tests don't require tavily unless the engine is used
        try:
            from tavily import TavilyClient
        except ModuleNotFoundError as e:
            raise ModuleNotFoundError(
                "Optional dependency 'tavily' is not installed. "
                "Install it to enable Tavily search: pip install tavily-python"
            ) from e

        self.client = TavilyClient(api_key=self.api_key)
        self.search_depth = search_depth
        logger.info("Tavily client initialized")

    def _search_sync(self, query: str, max_results: int) -> list[SearchResult]:
        response = self.client.search(
            query=query,
            max_results=max_results,
            search_depth=self.search_depth,
            include_raw_content=False,
            include_answer=False,
        )

        results = []
        for item in response.get("results", []):
            url = str(item.get("url") or "").strip()
            if not url:
                continue
            results.append(
                SearchResult(
                    title=str(item.get("title") or "").strip() or url,
                    url=url,
                    snippet=str(item.get("content") or "").strip(),
                )
            )
        return results

    async def search(self, query: str, max_results: int = 10) -> list[SearchResult]:
        """
        Search the web using Tavily API.

        Args:
            query: Search query
            max_results: Maximum number of results

        Returns:
            Ranked list of SearchResult

        Raises:
            ToolError: If the Tavily call fails
        """
        logger.info(f"Tavily search: '{query}' (max_results={max_results})")
        try:
            results = await asyncio.to_thread(self._search_sync, query, max_results)
        except Exception as e:
            logger.error(f"❌ Tavily search failed: {e}", exc_info=True)
            raise ToolError(f"Tavily search failed: {e}", tool="web_search") from e

        logger.info(f"✅ Tavily returned {len(results)} results")
        return results
