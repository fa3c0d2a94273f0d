from pydantic import ValidationError

from orchestrator.tool_types import ARGUMENT_MODELS, ToolArgs, ToolCall, ToolName
from utils.logger import get_logger

logger = get_logger(__name__)

VALIDATION_MESSAGES = {
    ToolName.WEB_SEARCH: "Error: Invalid web_search query.",
    ToolName.READ_URL: "Error: Invalid read_url argument.",
    ToolName.INSTANT_ANSWER: "Error: Invalid instant_answer query.",
}


class ArgumentValidator:
    """
    Per-tool schema checks, run before anything is executed.

    | tool           | rule                                        |
    |----------------|---------------------------------------------|
    | web_search     | query is a string, non-empty after trim     |
    | read_url       | url is a string matching ^https?://         |
    | instant_answer | query is a string, non-empty after trim     |

    read_url's start/length never fail validation; bad values fall back to
    the default window (0, 1122).
    """

    def validate(self, call: ToolCall) -> ToolArgs | None:
        """
        Return the typed arguments for ``call``, or None when they are invalid.
        """
        model = ARGUMENT_MODELS.get(call.tool)
        if model is None:
            return None

        arguments = call.arguments if isinstance(call.arguments, dict) else {}
        try:
            return model.model_validate(arguments)
        except ValidationError as e:
            logger.warning(
                "Rejected tool call arguments",
                extra={
                    "extra_fields": {
                        "tool": call.tool.value,
                        "errors": [err.get("msg") for err in e.errors()],
                    }
                },
            )
            return None

    @staticmethod
    def error_message(tool: ToolName) -> str:
        """User-visible notice for a rejected call."""
        return VALIDATION_MESSAGES.get(tool, f"Error: Invalid {tool.value} arguments.")
