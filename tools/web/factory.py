"""Factory for creating the web tools service from environment configuration."""

import os

from utils.logger import get_logger

from .duckduckgo_client import DuckDuckGoClient
from .page_reader import PageReader
from .service import DEFAULT_ENGINE, WebToolsService
from .tavily_client import TavilySearchClient

logger = get_logger(__name__)


def create_tools_service_from_env() -> WebToolsService:
    """
    Create WebToolsService from environment variables.

    Environment variables:
        SEARCH_ENGINE: Default web_search engine, "duckduckgo" or "tavily"
        TAVILY_API_KEY: Enables the Tavily engine (optional)
        HTTP_TIMEOUT_S: Timeout for page fetches and instant answers (default: 15)
        SEARCH_MAX_RESULTS: Results per search (default: 10)

    Returns:
        Configured WebToolsService instance
    """
    timeout_s = float(os.getenv("HTTP_TIMEOUT_S", "15"))
    max_results = int(os.getenv("SEARCH_MAX_RESULTS", "10"))
    default_engine = os.getenv("SEARCH_ENGINE", DEFAULT_ENGINE).lower()

    tavily = None
    tavily_api_key = os.getenv("TAVILY_API_KEY", "")
    if tavily_api_key:
        try:
            tavily = TavilySearchClient(api_key=tavily_api_key)
            logger.info("🚀 Tavily engine available for web_search")
        except ValueError as e:
            logger.warning(f"Tavily engine not available: {e}")

    if default_engine == "tavily" and tavily is None:
        logger.warning("SEARCH_ENGINE=tavily but Tavily is not available, using duckduckgo")
        default_engine = DEFAULT_ENGINE

    return WebToolsService(
        duckduckgo=DuckDuckGoClient(timeout_s=timeout_s),
        tavily=tavily,
        page_reader=PageReader(timeout_s=timeout_s),
        default_engine=default_engine,
        max_results=max_results,
    )
