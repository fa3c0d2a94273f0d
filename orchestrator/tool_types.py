import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

DEFAULT_READ_LENGTH = 1122


class ToolName(str, Enum):
    WEB_SEARCH = "web_search"
    READ_URL = "read_url"
    INSTANT_ANSWER = "instant_answer"

    @classmethod
    def parse(cls, value: Any) -> "ToolName | None":
        try:
            return cls(value)
        except ValueError:
            return None


# Used in "{label} failed: {message}" notices
TOOL_LABELS = {
    ToolName.WEB_SEARCH: "Web search",
    ToolName.READ_URL: "Read URL",
    ToolName.INSTANT_ANSWER: "Instant answer",
}


def _require_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


def _non_negative_int(value: Any, default: int, *, allow_zero: bool) -> int:
    # bool is an int subclass but never a valid offset
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if isinstance(value, float) and not math.isfinite(value):
        return default
    as_int = int(value)
    if as_int < 0 or (as_int == 0 and not allow_zero):
        return default
    return as_int


class WebSearchArgs(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    query: StrictStr
    engine: StrictStr | None = None

    @field_validator("query")
    @classmethod
    def check_query(cls, value: str) -> str:
        return _require_text(value)


class ReadUrlArgs(BaseModel):
    """
    ``start``/``length`` are forgiving: anything that is not a usable number
    falls back to the default window instead of failing the call.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: StrictStr = Field(..., pattern=r"^https?://")
    start: int = 0
    length: int = DEFAULT_READ_LENGTH

    @field_validator("start", mode="before")
    @classmethod
    def coerce_start(cls, value: Any) -> int:
        return _non_negative_int(value, 0, allow_zero=True)

    @field_validator("length", mode="before")
    @classmethod
    def coerce_length(cls, value: Any) -> int:
        return _non_negative_int(value, DEFAULT_READ_LENGTH, allow_zero=False)


class InstantAnswerArgs(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    query: StrictStr

    @field_validator("query")
    @classmethod
    def check_query(cls, value: str) -> str:
        return _require_text(value)


ToolArgs = WebSearchArgs | ReadUrlArgs | InstantAnswerArgs

ARGUMENT_MODELS: dict[ToolName, type[BaseModel]] = {
    ToolName.WEB_SEARCH: WebSearchArgs,
    ToolName.READ_URL: ReadUrlArgs,
    ToolName.INSTANT_ANSWER: InstantAnswerArgs,
}


@dataclass(frozen=True)
class ToolCall:
    """
    A tool invocation parsed from model output (or issued internally).

    skip_continue suppresses the "resubmit to the model" step after the tool
    runs; deep reads set it because they pace their own follow-ups.
    """

    tool: ToolName
    arguments: dict[str, Any] = field(default_factory=dict)
    skip_continue: bool = False


@dataclass(frozen=True)
class ToolCallHistoryEntry:
    tool: str
    args: dict[str, Any]
    timestamp: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    )


@dataclass(frozen=True)
class ToolOutcome:
    """
    What one tool execution produced.

    ``content`` is exactly the assistant turn appended to the conversation.
    read_url also reports the raw ``snippet`` and whether the page has more.
    """

    tool: ToolName
    ok: bool
    content: str
    snippet: str | None = None
    has_more: bool = False
