from enum import Enum

from orchestrator.response_classifier import is_tool_call_json
from orchestrator.session import ChatSession
from orchestrator.tool_types import ToolCall
from utils.logger import get_logger

logger = get_logger(__name__)

CHAINED_CALL_WARNING = (
    "Warning: AI outputted another tool call without reasoning. "
    "Stopping to prevent infinite loop."
)


class Continuation(str, Enum):
    RESUBMIT = "resubmit"  # send the updated history back to the model
    REFUSE = "refuse"  # last turn is itself a tool call
    SKIP = "skip"  # caller paces its own follow-ups


class ContinuationController:
    """
    Decides what happens after a tool has run.

    The model gets another round over the updated history (no new user
    turn) unless the most recent turn is, in its entirety, tool-call JSON.
    """

    def __init__(self, session: ChatSession):
        self.session = session

    def decide(self, call: ToolCall) -> Continuation:
        if call.skip_continue:
            return Continuation.SKIP

        last = self.session.conversation.last_message()
        if last is not None and is_tool_call_json(last.get("content", "")):
            logger.warning(
                "Refusing to continue after a chained tool call",
                extra={"extra_fields": {"tool": call.tool.value}},
            )
            return Continuation.REFUSE
        return Continuation.RESUBMIT
