"""
ToolExecutor - runs validated tool calls and records their results.

Each tool maps to one handler through ``self._handlers``. A handler turns
the tool transport's result into exactly one assistant turn and returns a
ToolOutcome. Transport failures become a "{label} failed: {message}" notice
that is both shown and appended, so the model can react on the next round.
Busy indicators are taken down in ``finally`` on every path.
"""

import json
from typing import Any, Awaitable, Callable

from orchestrator.session import ChatSession
from orchestrator.tool_types import (
    DEFAULT_READ_LENGTH,
    TOOL_LABELS,
    InstantAnswerArgs,
    ReadUrlArgs,
    ToolArgs,
    ToolCall,
    ToolName,
    ToolOutcome,
    WebSearchArgs,
)
from tools.web.contracts import SearchResult
from tools.web.service import WebToolsService
from ui.base import ChatUI
from utils.logger import get_logger

logger = get_logger(__name__)

ReadMoreHandler = Callable[[str], Awaitable[Any]]
SummarizeHandler = Callable[[], Awaitable[Any]]
AfterSearchHandler = Callable[[list[SearchResult], str], Awaitable[Any]]


def format_search_results(query: str, results: list[SearchResult]) -> str:
    lines = "\n".join(
        f"{i}. {r.title} ({r.url}) - {r.snippet}" for i, r in enumerate(results, start=1)
    )
    return f'Search results for "{query}" ({len(results)}):\n{lines}'


def slice_page(text: str, start: int, length: int) -> tuple[str, bool]:
    """
    Window of ``text`` read by read_url.

    Returns:
        (snippet, has_more) where has_more is True iff start + length < len(text)
    """
    return text[start:start + length], start + length < len(text)


class ToolExecutor:
    """
    Dispatches tool calls to the web tools service and the UI.

    The orchestrator hands in its own entry points as callbacks so UI actions
    (read more, summarize) and the post-search suggestion flow loop back
    through it rather than around it.
    """

    def __init__(
        self,
        session: ChatSession,
        tools: WebToolsService,
        ui: ChatUI,
        *,
        on_read_more: ReadMoreHandler,
        on_summarize: SummarizeHandler,
        after_search: AfterSearchHandler | None = None,
    ):
        self.session = session
        self.tools = tools
        self.ui = ui
        self.on_read_more = on_read_more
        self.on_summarize = on_summarize
        self.after_search = after_search
        self._handlers = {
            ToolName.WEB_SEARCH: self._web_search,
            ToolName.READ_URL: self._read_url,
            ToolName.INSTANT_ANSWER: self._instant_answer,
        }

    async def execute(self, call: ToolCall, args: ToolArgs) -> ToolOutcome:
        """
        Run one tool call whose arguments have already been validated.

        Args:
            call: The call as issued (used for its tool tag)
            args: Typed arguments from ArgumentValidator

        Returns:
            ToolOutcome; ``ok`` is False when the tool transport failed
        """
        handler = self._handlers[call.tool]
        logger.info(f"🔧 Executing tool: {call.tool.value}")
        return await handler(args)

    def _record_failure(self, tool: ToolName, error: Exception) -> ToolOutcome:
        message = f"{TOOL_LABELS[tool]} failed: {error}"
        logger.warning(
            "Tool call failed",
            extra={"extra_fields": {"tool": tool.value, "error": str(error)}},
        )
        self.ui.add_message("assistant", message)
        self.session.conversation.add_assistant(message)
        return ToolOutcome(tool=tool, ok=False, content=message)

    async def _web_search(self, args: WebSearchArgs) -> ToolOutcome:
        query = args.query
        engine = args.engine or self.tools.default_engine
        highlighted = set(self.session.highlighted_indices)
        shown: list[SearchResult] = []

        def on_result(result: SearchResult) -> None:
            index = len(shown)
            shown.append(result)
            self.ui.add_search_result(result, self.on_read_more, index in highlighted)

        self.ui.show_spinner(f'Searching ({engine}) for "{query}"...')
        try:
            results = await self.tools.web_search(query, on_result, engine)
        except Exception as e:
            return self._record_failure(ToolName.WEB_SEARCH, e)
        finally:
            self.ui.hide_spinner()

        results = list(results)
        if not results:
            self.ui.add_message("assistant", f'No search results found for "{query}".')

        content = format_search_results(query, results)
        self.session.conversation.add_assistant(content)
        self.session.last_search_results = results

        if results and self.after_search is not None and self.session.settings.auto_read:
            await self.after_search(results, query)

        return ToolOutcome(tool=ToolName.WEB_SEARCH, ok=True, content=content)

    async def _read_url(self, args: ReadUrlArgs) -> ToolOutcome:
        url = args.url
        self.ui.show_spinner(f"Reading content from {url}...")
        try:
            page = await self.tools.read_url(url)
        except Exception as e:
            return self._record_failure(ToolName.READ_URL, e)
        finally:
            self.ui.hide_spinner()

        snippet, has_more = slice_page(str(page), args.start, args.length)
        self.ui.add_read_result(url, snippet, has_more)

        content = f"Read content from {url}:\n{snippet}{'...' if has_more else ''}"
        self.session.conversation.add_assistant(content)

        if snippet:
            self.session.read_snippets.append(snippet)
        if len(self.session.read_snippets) >= 2:
            self.ui.add_summarize_button(self.on_summarize)

        logger.debug(
            "Read URL slice",
            extra={
                "extra_fields": {
                    "url": url,
                    "start": args.start,
                    "length": args.length,
                    "chars": len(snippet),
                    "has_more": has_more,
                }
            },
        )
        return ToolOutcome(
            tool=ToolName.READ_URL, ok=True, content=content, snippet=snippet, has_more=has_more
        )

    async def _instant_answer(self, args: InstantAnswerArgs) -> ToolOutcome:
        query = args.query
        self.ui.show_status(f'Retrieving instant answer for "{query}"...')
        try:
            result = await self.tools.instant_answer(query)
        except Exception as e:
            return self._record_failure(ToolName.INSTANT_ANSWER, e)
        finally:
            self.ui.clear_status()

        text = json.dumps(result, indent=2)
        self.ui.add_message("assistant", text)
        self.session.conversation.add_assistant(text)
        return ToolOutcome(tool=ToolName.INSTANT_ANSWER, ok=True, content=text)


def read_more_call(url: str) -> ToolCall:
    """The call a "read more" action issues for a search result."""
    return ToolCall(
        tool=ToolName.READ_URL,
        arguments={"url": url, "start": 0, "length": DEFAULT_READ_LENGTH},
    )
