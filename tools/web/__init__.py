"""Web tools (search, page read, instant answer) for the chat orchestrator."""

from .cache import ReadCache
from .contracts import SearchResult, ToolError
from .factory import create_tools_service_from_env
from .service import WebToolsService

__all__ = [
    "ReadCache",
    "SearchResult",
    "ToolError",
    "WebToolsService",
    "create_tools_service_from_env",
]
