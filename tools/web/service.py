"""Web tools service - the tool transport the orchestrator calls into."""

from typing import Any

from utils.logger import get_logger

from .contracts import ResultCallback, SearchResult, ToolError
from .duckduckgo_client import DuckDuckGoClient
from .page_reader import PageReader
from .tavily_client import TavilySearchClient

logger = get_logger(__name__)

DEFAULT_ENGINE = "duckduckgo"


class WebToolsService:
    """
    Backs the three model-facing tools:
    - web_search: DuckDuckGo (default) or Tavily
    - read_url: HTTP fetch + HTML-to-text
    - instant_answer: DuckDuckGo Instant Answer API

    Every method raises ToolError on failure; turning that into a
    conversation notice is up to the caller.
    """

    def __init__(
        self,
        *,
        duckduckgo: DuckDuckGoClient | None = None,
        tavily: TavilySearchClient | None = None,
        page_reader: PageReader | None = None,
        default_engine: str = DEFAULT_ENGINE,
        max_results: int = 10,
    ):
        self.duckduckgo = duckduckgo or DuckDuckGoClient()
        self.tavily = tavily
        self.page_reader = page_reader or PageReader()
        self.default_engine = default_engine
        self.max_results = max_results

    @property
    def engines(self) -> list[str]:
        available = ["duckduckgo"]
        if self.tavily is not None:
            available.append("tavily")
        return available

    async def web_search(
        self,
        query: str,
        on_result: ResultCallback | None = None,
        engine: str | None = None,
    ) -> list[SearchResult]:
        """
        Search the web.

        Args:
            query: Search query
            on_result: Called once per result in rank order
            engine: "duckduckgo" or "tavily" (defaults to the configured engine)

        Returns:
            Ranked list of SearchResult (possibly empty)
        """
        engine = (engine or self.default_engine).lower()
        if engine == "duckduckgo":
            results = await self.duckduckgo.search(query, max_results=self.max_results)
        elif engine == "tavily":
            if self.tavily is None:
                raise ToolError(
                    "Tavily engine is not configured (TAVILY_API_KEY)", tool="web_search"
                )
            results = await self.tavily.search(query, max_results=self.max_results)
        else:
            raise ToolError(
                f"Unsupported search engine '{engine}'. Use one of: {', '.join(self.engines)}",
                tool="web_search",
            )

        if on_result is not None:
            for result in results:
                on_result(result)

        logger.info(
            "Web search completed",
            extra={"extra_fields": {"engine": engine, "query": query, "results": len(results)}},
        )
        return results

    async def read_url(self, url: str) -> str:
        """Return the readable text of ``url``."""
        return await self.page_reader.read(url)

    async def instant_answer(self, query: str) -> dict[str, Any]:
        """Return the DuckDuckGo Instant Answer object for ``query``."""
        return await self.duckduckgo.instant_answer(query)
