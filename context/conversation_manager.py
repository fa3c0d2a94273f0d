"""
ConversationManager - Append-only conversation log for one chat session.

Maintains chat history as a list of messages in role/content format, the
same shape the model transport sends over the wire. The log is the single
source of truth every orchestration step reads from and appends to.
"""

from typing import Literal

from utils.logger import get_logger

logger = get_logger(__name__)

Role = Literal["system", "user", "assistant"]


class ConversationManager:
    """
    Ordered, append-only history of conversation turns.

    Messages are stored in a standardized format:
    {"role": "system|user|assistant", "content": str}

    Invariants:
    - Exactly one system turn, always first (the tool contract)
    - Turns are appended whole; content is never edited after the fact
    - No trimming: the orchestrator owns the budget via summarization
    """

    def __init__(self, system_prompt: str):
        """
        Initialize ConversationManager.

        Args:
            system_prompt: The system prompt declaring the tool contract.
        """
        if not system_prompt or not system_prompt.strip():
            raise ValueError("system_prompt is required")

        self.system_prompt = system_prompt
        self.messages: list[dict[str, str]] = [{"role": "system", "content": system_prompt}]
        logger.info("Initialized ConversationManager with system prompt")

    def _append(self, role: Role, text: str) -> bool:
        if not isinstance(text, str) or not text.strip():
            logger.warning(f"Attempted to add empty {role} message")
            return False

        self.messages.append({"role": role, "content": text})
        logger.debug(f"Added {role} message (total messages: {len(self.messages)})")
        return True

    def add_user(self, text: str) -> bool:
        """
        Add a user message to the conversation.

        Args:
            text: The user's message content

        Returns:
            True if the turn was appended, False if it was empty
        """
        return self._append("user", text)

    def add_assistant(self, text: str) -> bool:
        """
        Add an assistant message to the conversation.

        Tool results, tool failures and summaries are all recorded as
        assistant turns so the model sees them on the next round.

        Args:
            text: The assistant turn content

        Returns:
            True if the turn was appended, False if it was empty
        """
        return self._append("assistant", text)

    def get_messages(self) -> list[dict[str, str]]:
        """
        Get a copy of all messages in the conversation.

        Returns:
            List of message dictionaries with 'role' and 'content' keys
        """
        return [dict(message) for message in self.messages]

    def last_message(self) -> dict[str, str] | None:
        """Return the most recent turn (the system turn when nothing else exists)."""
        return dict(self.messages[-1]) if self.messages else None

    def reset(self) -> None:
        """
        Clear the history back to the single system turn.
        """
        self.messages = [{"role": "system", "content": self.system_prompt}]
        logger.info("Reset conversation (kept system prompt)")

    def get_conversation_summary(self, last_n: int = 10) -> str:
        """
        Get a formatted summary of the last N messages.

        Args:
            last_n: Number of recent messages to include

        Returns:
            Formatted string showing the conversation history
        """
        if len(self.messages) <= 1:
            return "No conversation history"

        recent_messages = self.messages[-last_n:] if last_n < len(self.messages) else self.messages

        lines = [
            f"=== Conversation History (showing last {len(recent_messages)} "
            f"of {len(self.messages)} messages) ==="
        ]

        for i, msg in enumerate(recent_messages, 1):
            role = msg["role"].upper()
            content = msg["content"].replace("\n", " ")

            # Truncate long messages
            if len(content) > 100:
                content = content[:97] + "..."

            lines.append(f"{i}. [{role}] {content}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return f"ConversationManager(messages={len(self.messages)})"
