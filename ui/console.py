"""Terminal implementation of ChatUI for the CLI entry point."""

import sys
import threading
import time
from dataclasses import dataclass
from typing import Any

from tools.web.contracts import SearchResult

from .base import ChatUI, ReadMoreCallback, SummarizeCallback

ROLE_LABELS = {"user": "You", "assistant": "AI"}


@dataclass
class StreamHandle:
    """A streamed message being written to the terminal."""

    shown: str = ""


def show_loading_animation(stop_event: threading.Event, label: dict[str, str]) -> None:
    """
    Show a loading animation in the console until ``stop_event`` is set.

    Args:
        stop_event: Set to stop the animation
        label: Shared holder whose "text" key may be replaced while spinning
    """
    while not stop_event.is_set():
        for char in "|/-\\":
            if stop_event.is_set():
                break
            sys.stdout.write(f"\r\033[93m{label['text']} {char}\033[0m\033[K")
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write("\r\033[K")
    sys.stdout.flush()


class ConsoleUI(ChatUI):
    """
    Prints to stdout. Clickable actions of a graphical UI become commands:
    "read N" opens search result N, "summarize" runs the summarize action.
    """

    def __init__(self):
        self._input = ""
        self._spinner_thread: threading.Thread | None = None
        self._spinner_stop: threading.Event | None = None
        self._spinner_label = {"text": ""}
        self._stream: StreamHandle | None = None
        self.read_more_actions: list[tuple[SearchResult, ReadMoreCallback]] = []
        self.summarize_action: SummarizeCallback | None = None

    # ---------- busy indicators ----------

    def show_spinner(self, text: str) -> None:
        self._spinner_label["text"] = text
        if self._spinner_thread and self._spinner_thread.is_alive():
            return
        self._end_stream()
        self._spinner_stop = threading.Event()
        self._spinner_thread = threading.Thread(
            target=show_loading_animation, args=(self._spinner_stop, self._spinner_label)
        )
        self._spinner_thread.daemon = True
        self._spinner_thread.start()

    def hide_spinner(self) -> None:
        if self._spinner_stop is not None:
            self._spinner_stop.set()
        if self._spinner_thread is not None:
            self._spinner_thread.join()
        self._spinner_thread = None
        self._spinner_stop = None

    def show_status(self, text: str) -> None:
        self._end_stream()
        print(f"\033[90m[{text}]\033[0m")

    def clear_status(self) -> None:
        # Status lines are printed once; nothing to take down in a terminal
        pass

    # ---------- messages ----------

    def add_message(self, role: str, text: str) -> None:
        self.hide_spinner()
        self._end_stream()
        print(f"\n{ROLE_LABELS.get(role, role)}: {text}\n")

    def add_search_result(
        self, result: SearchResult, on_read_more: ReadMoreCallback, highlighted: bool
    ) -> None:
        self.read_more_actions.append((result, on_read_more))
        index = len(self.read_more_actions)
        marker = "\033[92m*\033[0m" if highlighted else " "
        sys.stdout.write("\r\033[K")
        print(f"{marker}[{index}] {result.title}\n     {result.url}")
        if result.snippet:
            print(f"     {result.snippet[:160]}")

    def add_read_result(self, url: str, snippet: str, has_more: bool) -> None:
        self.hide_spinner()
        preview = snippet if len(snippet) <= 400 else snippet[:400] + "..."
        suffix = " (more available)" if has_more else ""
        print(f"\n--- {url}{suffix} ---\n{preview}\n")

    def add_summarize_button(self, on_click: SummarizeCallback) -> None:
        if self.summarize_action is None:
            print("\033[90m[type 'summarize' to summarize what has been read]\033[0m")
        self.summarize_action = on_click

    # ---------- streaming ----------

    def create_empty_ai_message(self) -> Any:
        self.hide_spinner()
        self._end_stream()
        self._stream = StreamHandle()
        sys.stdout.write("\nAI: ")
        sys.stdout.flush()
        return self._stream

    def update_message_content(self, handle: Any, text: str) -> None:
        if not isinstance(handle, StreamHandle):
            return
        if text.startswith(handle.shown):
            sys.stdout.write(text[len(handle.shown):])
        else:
            # Display text was rewritten (e.g. reasoning placeholder replaced)
            sys.stdout.write(f"\n{text}")
        handle.shown = text
        sys.stdout.flush()

    def _end_stream(self) -> None:
        if self._stream is not None:
            sys.stdout.write("\n\n")
            sys.stdout.flush()
            self._stream = None

    # ---------- input ----------

    def set_user_input(self, text: str) -> None:
        self._input = text

    def get_user_input(self) -> str:
        return self._input.strip()

    def clear_user_input(self) -> None:
        self._input = ""

    def reset_actions(self) -> None:
        self.read_more_actions.clear()
        self.summarize_action = None
