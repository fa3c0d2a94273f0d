import json
from typing import Any

from orchestrator.tool_types import ToolCall
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_TOOL_CALL_REPEAT = 3

LOOP_DETECTED_MESSAGE = (
    "Error: Tool call loop detected. The same tool call has been made more than "
    f"{MAX_TOOL_CALL_REPEAT} times in a row. Stopping to prevent infinite loop."
)


def call_signature(tool: str, arguments: dict[str, Any]) -> str:
    """
    Canonical form of (tool, arguments) for equality checks.

    Keys are sorted so two calls that differ only in argument order compare
    equal.
    """
    return json.dumps({"tool": tool, "args": arguments}, sort_keys=True, default=str)


class LoopGuard:
    """
    Blocks runaway repetition of the exact same tool call.

    Only the most recent signature is remembered: A, A, A, A trips the guard
    on the fourth call, while A, B, A never does.
    """

    def __init__(self, max_repeat: int = MAX_TOOL_CALL_REPEAT):
        self.max_repeat = max_repeat
        self.last_signature: str | None = None
        self.repeat_count = 0

    def register(self, call: ToolCall) -> bool:
        """
        Record ``call`` and report whether it may run.

        Returns:
            False when the same call has now been seen more than
            ``max_repeat`` times in a row
        """
        signature = call_signature(call.tool.value, call.arguments)
        if signature == self.last_signature:
            self.repeat_count += 1
        else:
            self.last_signature = signature
            self.repeat_count = 1

        if self.repeat_count > self.max_repeat:
            logger.warning(
                "Tool call loop detected",
                extra={
                    "extra_fields": {"tool": call.tool.value, "repeat_count": self.repeat_count}
                },
            )
            return False
        return True

    def reset(self) -> None:
        self.last_signature = None
        self.repeat_count = 0
