from typing import Any, Callable

import pytest

from api.base_client import BaseAIClient, ChunkCallback
from models.model_reply import ModelReply, NormalizedError, TokenUsage
from models.settings import Settings
from orchestrator.core import ChatOrchestrator
from tools.web.contracts import SearchResult, ToolError
from ui.base import ChatUI


class FakeClient(BaseAIClient):
    """
    Scripted model transport.

    Replies come from ``replies`` in order (a str, or a NormalizedError for a
    failed call), or from ``responder(messages)`` when one is given.
    """

    provider_name = "fake"

    def __init__(
        self,
        replies: list[Any] | None = None,
        responder: Callable[[list[dict[str, str]]], Any] | None = None,
        stream_usage: int | None = 7,
    ):
        super().__init__(api_key="test-key", model_name="fake-model")
        self.replies = list(replies or [])
        self.responder = responder
        self.stream_usage = stream_usage
        self.calls: list[dict[str, Any]] = []

    def _next(self, messages: list[dict[str, str]]) -> Any:
        if self.responder is not None:
            return self.responder(messages)
        if not self.replies:
            raise AssertionError(f"Unexpected model call #{len(self.calls)}: {messages[-1]}")
        return self.replies.pop(0)

    def _reply(self, item: Any, usage: TokenUsage) -> ModelReply:
        if isinstance(item, NormalizedError):
            return ModelReply(
                request_id="req_fake",
                text="",
                provider=self.provider_name,
                model="fake-model",
                finish_reason="error",
                error=item,
            )
        return ModelReply(
            request_id="req_fake",
            text=item,
            provider=self.provider_name,
            model="fake-model",
            token_usage=usage,
            finish_reason="stop",
        )

    async def send_request(self, messages, *, model=None, timeout_s=None) -> ModelReply:
        self.calls.append({"messages": messages, "timeout_s": timeout_s, "stream": False})
        item = self._next(messages)
        return self._reply(item, TokenUsage(prompt_tokens=10, completion_tokens=5))

    async def stream_request(
        self, messages, on_chunk: ChunkCallback, *, model=None
    ) -> ModelReply:
        self.calls.append({"messages": messages, "timeout_s": None, "stream": True})
        item = self._next(messages)
        if isinstance(item, str):
            full = ""
            for i in range(0, len(item), 5):
                delta = item[i:i + 5]
                full += delta
                on_chunk(delta, full)
        return self._reply(item, TokenUsage())

    async def get_token_usage(self, messages, *, model=None) -> int | None:
        return self.stream_usage


class FakeTools:
    """In-memory stand-in for WebToolsService."""

    default_engine = "duckduckgo"

    def __init__(
        self,
        results: list[SearchResult] | None = None,
        pages: dict[str, str] | None = None,
        instant: dict[str, Any] | None = None,
        search_error: str | None = None,
        instant_error: str | None = None,
    ):
        self.results = list(results or [])
        self.pages = dict(pages or {})
        self.instant = instant if instant is not None else {"Abstract": "A fact."}
        self.search_error = search_error
        self.instant_error = instant_error
        self.search_calls: list[tuple[str, str | None]] = []
        self.read_calls: list[str] = []
        self.instant_calls: list[str] = []

    async def web_search(self, query, on_result=None, engine=None):
        self.search_calls.append((query, engine))
        if self.search_error:
            raise ToolError(self.search_error, tool="web_search")
        for result in self.results:
            if on_result is not None:
                on_result(result)
        return list(self.results)

    async def read_url(self, url):
        self.read_calls.append(url)
        if url not in self.pages:
            raise ToolError(f"HTTP 404 for {url}", tool="read_url")
        return self.pages[url]

    async def instant_answer(self, query):
        self.instant_calls.append(query)
        if self.instant_error:
            raise ToolError(self.instant_error, tool="instant_answer")
        return self.instant


class RecordingUI(ChatUI):
    """ChatUI that records every call for assertions."""

    def __init__(self):
        self.events: list[tuple] = []
        self.messages: list[tuple[str, str]] = []
        self.spinner_texts: list[str] = []
        self.spinner_visible = False
        self.status_visible = False
        self.search_results: list[tuple[SearchResult, Any, bool]] = []
        self.read_results: list[tuple[str, str, bool]] = []
        self.summarize_buttons: list[Any] = []
        self.streams: list[list[str]] = []
        self.pending_input = ""

    def show_spinner(self, text):
        self.events.append(("show_spinner", text))
        self.spinner_texts.append(text)
        self.spinner_visible = True

    def hide_spinner(self):
        self.events.append(("hide_spinner",))
        self.spinner_visible = False

    def show_status(self, text):
        self.events.append(("show_status", text))
        self.status_visible = True

    def clear_status(self):
        self.events.append(("clear_status",))
        self.status_visible = False

    def add_message(self, role, text):
        self.events.append(("add_message", role, text))
        self.messages.append((role, text))

    def add_search_result(self, result, on_read_more, highlighted):
        self.events.append(("add_search_result", result.url, highlighted))
        self.search_results.append((result, on_read_more, highlighted))

    def add_read_result(self, url, snippet, has_more):
        self.events.append(("add_read_result", url, has_more))
        self.read_results.append((url, snippet, has_more))

    def add_summarize_button(self, on_click):
        self.events.append(("add_summarize_button",))
        self.summarize_buttons.append(on_click)

    def create_empty_ai_message(self):
        self.streams.append([])
        return len(self.streams) - 1

    def update_message_content(self, handle, text):
        self.streams[handle].append(text)

    def get_user_input(self):
        return self.pending_input

    def clear_user_input(self):
        self.pending_input = ""

    def assistant_messages(self) -> list[str]:
        return [text for role, text in self.messages if role == "assistant"]


def search_results(count: int) -> list[SearchResult]:
    return [
        SearchResult(
            title=f"Result {i}", url=f"https://example.com/{i}", snippet=f"Snippet {i}"
        )
        for i in range(1, count + 1)
    ]


@pytest.fixture
def ui():
    return RecordingUI()


@pytest.fixture
def make_orchestrator(ui):
    """Build a ChatOrchestrator over fakes; auto_read defaults to off."""

    def _make(client=None, tools=None, **settings):
        settings.setdefault("auto_read", False)
        orchestrator = ChatOrchestrator(
            client or FakeClient(), tools or FakeTools(), ui, Settings(**settings)
        )
        orchestrator.initialize()
        return orchestrator

    return _make
