"""
Deep reading - model-guided, multi-chunk retrieval of a single page, and the
post-search flow that picks which results to deep-read.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from api.base_client import BaseAIClient
from models.model_reply import ModelRequestError
from orchestrator.prompts import judgment_messages, suggestion_messages
from orchestrator.session import ChatSession
from orchestrator.tool_types import ToolCall, ToolName, ToolOutcome
from tools.web.contracts import SearchResult
from ui.base import ChatUI
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_MAX_CHUNKS = 5
DEFAULT_CHUNK_SIZE = 2000
DEFAULT_MAX_TOTAL_LENGTH = 10000

_INDEX_RUN = re.compile(r"\d[\d, ]*")
_LEADING_INT = re.compile(r"\s*(\d+)")

RunTool = Callable[[ToolCall], Awaitable[ToolOutcome | None]]
Summarize = Callable[[], Awaitable[Any]]


class StopReason(str, Enum):
    CHUNK_CAP = "chunk_cap"
    LENGTH_CAP = "length_cap"
    EXHAUSTED = "exhausted"
    JUDGMENT_FAILED = "judgment_failed"
    MODEL_DECLINED = "model_declined"
    EMPTY = "empty"


@dataclass(frozen=True)
class DeepReadResult:
    url: str
    chunks: list[str] = field(default_factory=list)
    stop_reason: StopReason = StopReason.EMPTY

    @property
    def total_length(self) -> int:
        return sum(len(chunk) for chunk in self.chunks)


def parse_result_indices(reply: str) -> list[int]:
    """
    Pull 1-based result numbers out of a free-form reply.

    Takes the first run of digits, commas and spaces, splits it on commas
    and keeps the leading integer of each token, in order, without repeats.
    "Results 2, 5 and 7" gives [2, 5]: the run stops at "and". "1 2 3" gives [1].
    """
    match = _INDEX_RUN.search(reply or "")
    if not match:
        return []

    numbers: list[int] = []
    for token in match.group(0).split(","):
        leading = _LEADING_INT.match(token)
        if leading and int(leading.group(1)) not in numbers:
            numbers.append(int(leading.group(1)))
    return numbers


class DeepReadController:
    """
    Reads a page chunk by chunk until a cap is hit or the model says it has
    enough.

    Chunks go through the orchestrator's own tool path (``run_tool``) with
    continuation suppressed, so they land in the conversation, the snippet
    buffer and the audit log like any other read_url call. The session's
    read cache is consulted first.
    """

    def __init__(
        self,
        session: ChatSession,
        client: BaseAIClient,
        ui: ChatUI,
        *,
        run_tool: RunTool,
        summarize: Summarize,
    ):
        self.session = session
        self.client = client
        self.ui = ui
        self.run_tool = run_tool
        self.summarize = summarize

    async def _fetch_chunk(self, url: str, start: int, chunk_size: int) -> tuple[str, bool]:
        cached = self.session.read_cache.get(url, start, chunk_size)
        if cached is not None:
            return cached.snippet, cached.has_more

        outcome = await self.run_tool(
            ToolCall(
                tool=ToolName.READ_URL,
                arguments={"url": url, "start": start, "length": chunk_size},
                skip_continue=True,
            )
        )
        if outcome is None or not outcome.ok or not outcome.snippet:
            return "", False

        self.session.read_cache.set(url, start, chunk_size, outcome.snippet, outcome.has_more)
        return outcome.snippet, outcome.has_more

    async def _wants_more(self, url: str, snippet: str) -> bool:
        reply = await self.client.send_request(judgment_messages(url, snippet))
        return reply.raise_for_error().text.strip().lower().startswith("yes")

    async def deep_read(
        self,
        url: str,
        max_chunks: int = DEFAULT_MAX_CHUNKS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_total_length: int = DEFAULT_MAX_TOTAL_LENGTH,
    ) -> DeepReadResult:
        """
        Read successive ``chunk_size`` windows of ``url``.

        After each chunk the caps are checked in order (chunk count, total
        length, end of page); only when none applies is the model asked
        whether more is needed.

        Returns:
            DeepReadResult with the chunks actually read and why reading stopped
        """
        chunks: list[str] = []
        start = 0
        total = 0

        while True:
            snippet, has_more = await self._fetch_chunk(url, start, chunk_size)
            if not snippet:
                reason = StopReason.EMPTY
                break

            chunks.append(snippet)
            total += len(snippet)

            if len(chunks) >= max_chunks:
                reason = StopReason.CHUNK_CAP
                break
            if total >= max_total_length:
                reason = StopReason.LENGTH_CAP
                break
            if not has_more:
                reason = StopReason.EXHAUSTED
                break

            try:
                wants_more = await self._wants_more(url, snippet)
            except ModelRequestError as e:
                logger.warning(
                    "Deep-read judgment failed",
                    extra={"extra_fields": {"url": url, "error": str(e)}},
                )
                reason = StopReason.JUDGMENT_FAILED
                break
            if not wants_more:
                reason = StopReason.MODEL_DECLINED
                break

            start += chunk_size

        logger.info(
            "📖 Deep read finished",
            extra={
                "extra_fields": {
                    "url": url,
                    "chunks": len(chunks),
                    "chars": total,
                    "stop_reason": reason.value,
                }
            },
        )
        return DeepReadResult(url=url, chunks=chunks, stop_reason=reason)

    async def suggest_results_to_read(self, results: list[SearchResult], query: str) -> None:
        """
        Ask the model which results deserve a deep read, then read them.

        A failed suggestion call is logged and otherwise ignored.
        """
        if not results:
            return

        reply = await self.client.send_request(suggestion_messages(results, query))
        if reply.is_error:
            logger.warning(
                "Result suggestion failed",
                extra={"extra_fields": {"query": query, "error": reply.error.message}},
            )
            return

        suggestion = reply.text.strip()
        if not suggestion:
            return
        self.ui.add_message("assistant", f"AI suggests reading results: {suggestion}")
        await self.auto_read_from_suggestion(suggestion)

    async def auto_read_from_suggestion(self, suggestion: str) -> None:
        """
        Deep-read the suggested results one after another, then summarize once.

        A call made while another auto-read is running returns immediately.
        """
        if self.session.auto_read_in_progress:
            logger.debug("Auto-read already in progress, ignoring new suggestion")
            return

        results = self.session.last_search_results
        if not results:
            return

        numbers = [n for n in parse_result_indices(suggestion) if n >= 1]
        if not numbers:
            return
        self.session.highlighted_indices = {n - 1 for n in numbers}

        urls = list(dict.fromkeys(results[n - 1].url for n in numbers if n <= len(results)))
        if not urls:
            return

        self.session.auto_read_in_progress = True
        try:
            for i, url in enumerate(urls, start=1):
                self.ui.show_spinner(f"Reading {i} of {len(urls)} URLs: {url}...")
                await self.deep_read(url)
            await self.summarize()
        finally:
            self.session.auto_read_in_progress = False
            self.ui.hide_spinner()
