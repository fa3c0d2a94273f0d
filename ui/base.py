from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable

from tools.web.contracts import SearchResult

# UI actions hand control back to the orchestrator through these
ReadMoreCallback = Callable[[str], Awaitable[Any]]
SummarizeCallback = Callable[[], Awaitable[Any]]


class ChatUI(ABC):
    """
    The surface the orchestrator drives. Rendering is entirely the
    implementation's business; the orchestrator only calls these methods.

    Roles passed to add_message are "user" or "assistant". Every
    user-visible failure is rendered as an assistant message.
    """

    @abstractmethod
    def show_spinner(self, text: str) -> None:
        """Show (or relabel) a busy indicator."""

    @abstractmethod
    def hide_spinner(self) -> None:
        """Remove the busy indicator. Must be safe when none is shown."""

    @abstractmethod
    def show_status(self, text: str) -> None:
        """Show a one-line status text."""

    @abstractmethod
    def clear_status(self) -> None:
        """Clear the status text. Must be safe when none is shown."""

    @abstractmethod
    def add_message(self, role: str, text: str) -> None:
        """Render a complete message."""

    @abstractmethod
    def add_search_result(
        self, result: SearchResult, on_read_more: ReadMoreCallback, highlighted: bool
    ) -> None:
        """Render one search result with a "read more" action for its URL."""

    @abstractmethod
    def add_read_result(self, url: str, snippet: str, has_more: bool) -> None:
        """Render a page snippet returned by read_url."""

    @abstractmethod
    def add_summarize_button(self, on_click: SummarizeCallback) -> None:
        """Offer an action that summarizes the snippets read so far."""

    @abstractmethod
    def create_empty_ai_message(self) -> Any:
        """Create a placeholder assistant message for streaming; return its handle."""

    @abstractmethod
    def update_message_content(self, handle: Any, text: str) -> None:
        """Replace the content of a streamed message."""

    @abstractmethod
    def get_user_input(self) -> str:
        """Return the pending user input (empty string when there is none)."""

    @abstractmethod
    def clear_user_input(self) -> None:
        """Discard the pending user input."""
