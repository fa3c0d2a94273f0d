"""Data contracts for the web tools module."""

from dataclasses import dataclass
from typing import Any, Callable


@dataclass(frozen=True)
class SearchResult:
    """Result from a search provider."""

    title: str
    url: str
    snippet: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "url": self.url, "snippet": self.snippet}


# Invoked once per result, in rank order, as results become available
ResultCallback = Callable[[SearchResult], None]


class ToolError(Exception):
    """A web tool could not produce a result (network, provider, parsing)."""

    def __init__(self, message: str, *, tool: str | None = None):
        super().__init__(message)
        self.tool = tool
