"""Memo cache for read_url chunks."""

from typing import NamedTuple


class CachedChunk(NamedTuple):
    snippet: str
    has_more: bool


class ReadCache:
    """
    In-memory memoization of fetched page chunks.

    Keyed by the exact window requested, ``(url, start, length)``. Each entry
    keeps the chunk together with whether the page continues past it. Entries
    are never evicted or invalidated; the cache lives as long as the chat
    session that owns it. Single-threaded use only (one asyncio loop per session).
    """

    def __init__(self):
        self._cache: dict[tuple[str, int, int], CachedChunk] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def _make_key(url: str, start: int, length: int) -> tuple[str, int, int]:
        return (url, int(start), int(length))

    def get(self, url: str, start: int, length: int) -> CachedChunk | None:
        """
        Return the cached chunk for this window, or None.
        """
        value = self._cache.get(self._make_key(url, start, length))
        if value is None:
            self.misses += 1
        else:
            self.hits += 1
        return value

    def set(self, url: str, start: int, length: int, snippet: str, has_more: bool) -> None:
        self._cache[self._make_key(url, start, length)] = CachedChunk(snippet, has_more)

    def __contains__(self, key: tuple[str, int, int]) -> bool:
        return self._make_key(*key) in self._cache

    def __len__(self) -> int:
        return len(self._cache)
