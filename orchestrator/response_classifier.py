"""
Response classification - decides what a raw model reply is.

A reply is one of:
- a tool call: a JSON object {"tool": ..., "arguments": {...}}
- structured reasoning: "Thinking: ..." / "Answer: ..." (chain-of-thought mode)
- a partial reasoning snapshot while a stream is still arriving
- plain text

Tool-call extraction is deliberately lenient. Models wrap the JSON in prose
or markdown fences, so the span from the first "{" to the last "}" is
parsed. That heuristic misfires when prose around the call contains braces;
such replies simply degrade to plain text. Nothing in this module raises on
malformed input.
"""

import json
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any

from models.settings import Settings
from orchestrator.tool_types import ToolCall, ToolName
from utils.logger import get_logger

logger = get_logger(__name__)

THINKING_PLACEHOLDER = "🤔 Thinking..."

_JSON_SPAN = re.compile(r"\{[\s\S]*\}")
_THINKING = re.compile(r"Thinking:(.*?)(?=Answer:|\Z)", re.S)
_ANSWER = re.compile(r"Answer:(.*)\Z", re.S)


class ResponseKind(str, Enum):
    TOOL_CALL = "tool_call"
    STRUCTURED = "structured"
    PARTIAL = "partial"
    PLAIN = "plain"


@dataclass(frozen=True)
class ReasoningResult:
    thinking: str
    answer: str
    structured: bool
    partial: bool = False
    stage: str | None = None


@dataclass(frozen=True)
class Classification:
    kind: ResponseKind
    reasoning: ReasoningResult
    tool_call: ToolCall | None = None


def _as_tool_call(data: Any) -> ToolCall | None:
    if not isinstance(data, dict):
        return None
    tool = ToolName.parse(data.get("tool"))
    arguments = data.get("arguments")
    if tool is None or not isinstance(arguments, dict):
        return None
    return ToolCall(tool=tool, arguments=arguments)


def extract_tool_call(text: str) -> ToolCall | None:
    """
    Find a tool call anywhere in ``text``.

    Returns None when there is no brace span, it is not valid JSON, or it
    lacks a known ``tool`` name and an ``arguments`` object.
    """
    if not isinstance(text, str):
        return None
    match = _JSON_SPAN.search(text)
    if not match:
        return None
    try:
        data = json.loads(match.group(0))
    except ValueError as e:
        logger.warning(
            "Tool JSON parse error",
            extra={"extra_fields": {"error": str(e), "span": match.group(0)[:200]}},
        )
        return None

    call = _as_tool_call(data)
    if call is None and isinstance(data, dict) and "tool" in data:
        logger.warning(
            "Ignoring unrecognized tool call",
            extra={"extra_fields": {"tool": str(data.get("tool"))[:50]}},
        )
    return call


def is_tool_call_json(text: str) -> bool:
    """
    Strict check: the whole of ``text`` is a tool-call JSON object.

    Used on conversation turns, where a tool call would have been stored
    verbatim rather than embedded in prose.
    """
    if not isinstance(text, str):
        return False
    try:
        data = json.loads(text)
    except ValueError:
        return False
    return (
        isinstance(data, dict)
        and bool(data.get("tool"))
        and isinstance(data.get("arguments"), dict)
    )


class ResponseClassifier:
    """
    Classifies replies and remembers the last thinking/answer it saw.

    The remembered answer is what a "Thinking:"-only snapshot shows while
    the answer has not streamed in yet. Call ``reset()`` at the start of
    each user message.
    """

    def __init__(self):
        self.last_thinking = ""
        self.last_answer = ""

    def reset(self) -> None:
        self.last_thinking = ""
        self.last_answer = ""

    def parse_reasoning(self, text: str) -> ReasoningResult:
        """Split a chain-of-thought reply into thinking and answer."""
        if not isinstance(text, str):
            text = "" if text is None else str(text)

        thinking_match = _THINKING.search(text)
        answer_match = _ANSWER.search(text)

        if thinking_match and answer_match:
            thinking = thinking_match.group(1).strip()
            answer = answer_match.group(1).strip()
            self.last_thinking = thinking
            self.last_answer = answer
            return ReasoningResult(thinking=thinking, answer=answer, structured=True)

        stripped = text.lstrip()
        if stripped.startswith("Thinking:") and not answer_match:
            thinking = stripped[len("Thinking:"):].strip()
            self.last_thinking = thinking
            return ReasoningResult(
                thinking=thinking,
                answer=self.last_answer,
                structured=True,
                partial=True,
                stage="thinking",
            )

        if thinking_match and not answer_match:
            # "Thinking:" buried after some preamble: keep what follows it
            thinking = text.split("Thinking:", 1)[1].strip()
            return ReasoningResult(thinking=thinking, answer="", structured=False, partial=True)

        return ReasoningResult(thinking="", answer=text, structured=False)

    def classify(self, text: str, *, cot_enabled: bool, final: bool = True) -> Classification:
        """
        Classify a reply.

        Args:
            text: Raw reply text (a growing snapshot when ``final`` is False)
            cot_enabled: Whether chain-of-thought formatting was requested
            final: False while streaming; tool calls are only detected on
                the completed text
        """
        text = text if isinstance(text, str) else ""

        if final:
            call = extract_tool_call(text)
            if call is not None:
                return Classification(
                    kind=ResponseKind.TOOL_CALL,
                    reasoning=ReasoningResult(thinking="", answer=text, structured=False),
                    tool_call=call,
                )

        if not cot_enabled:
            return Classification(
                kind=ResponseKind.PLAIN,
                reasoning=ReasoningResult(thinking="", answer=text, structured=False),
            )

        reasoning = self.parse_reasoning(text)
        if reasoning.partial:
            kind = ResponseKind.PARTIAL
        elif reasoning.structured:
            kind = ResponseKind.STRUCTURED
        else:
            kind = ResponseKind.PLAIN
        return Classification(kind=kind, reasoning=reasoning)


def format_for_display(reasoning: ReasoningResult, settings: Settings) -> str:
    """
    Text to show for a (possibly partial) reply under the current settings.
    """
    if not settings.enable_cot or not reasoning.structured:
        if settings.enable_cot and reasoning.partial:
            # malformed reasoning: nothing trustworthy to show as an answer yet
            return reasoning.thinking if settings.show_thinking else THINKING_PLACEHOLDER
        return reasoning.answer

    if settings.show_thinking:
        if reasoning.partial and reasoning.stage == "thinking":
            return f"Thinking: {reasoning.thinking}"
        if reasoning.partial:
            return reasoning.thinking
        return f"Thinking: {reasoning.thinking}\n\nAnswer: {reasoning.answer}"

    return reasoning.answer or THINKING_PLACEHOLDER
