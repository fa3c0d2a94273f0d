from datetime import datetime
from typing import Any

from models.model_reply import TokenUsage


class TokenTracker:
    """
    Accumulates token usage across the model rounds of one chat session.

    Non-streaming rounds report a full TokenUsage; streaming rounds only get a
    total from the transport afterwards, so both shapes are accepted.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        """Reset all token counters to zero."""
        self.total_prompt_tokens = 0
        self.total_completion_tokens = 0
        self.total_tokens = 0
        self.requests = 0

    def update(self, usage: TokenUsage | None) -> None:
        """
        Add the usage of one model call.

        Args:
            usage: TokenUsage from a ModelReply; None or all-zero usage is ignored
        """
        if not usage or usage.total_tokens <= 0:
            return

        self.requests += 1
        self.total_prompt_tokens += usage.prompt_tokens
        self.total_completion_tokens += usage.completion_tokens
        self.total_tokens += usage.total_tokens

    def add_total(self, tokens: int | None) -> None:
        """Add a bare token count (streaming rounds)."""
        if not tokens or tokens <= 0:
            return
        self.requests += 1
        self.total_tokens += int(tokens)

    def get_summary(self) -> dict[str, Any]:
        return {
            "requests": self.requests,
            "prompt_tokens": self.total_prompt_tokens,
            "completion_tokens": self.total_completion_tokens,
            "total_tokens": self.total_tokens,
            "timestamp": datetime.now().isoformat(),
        }

    def format_summary(self) -> str:
        """
        Format the token usage summary as a human-readable string.
        """
        stats = self.get_summary()
        return (
            f"Requests: {stats['requests']}\n"
            f"Prompt tokens: {stats['prompt_tokens']}\n"
            f"Completion tokens: {stats['completion_tokens']}\n"
            f"Total tokens: {stats['total_tokens']}"
        )
