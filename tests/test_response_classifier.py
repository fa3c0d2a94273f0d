from models.settings import Settings
from orchestrator.response_classifier import (
    THINKING_PLACEHOLDER,
    ReasoningResult,
    ResponseClassifier,
    ResponseKind,
    extract_tool_call,
    format_for_display,
    is_tool_call_json,
)
from orchestrator.tool_types import ToolName


class TestExtractToolCall:
    def test_bare_json(self):
        call = extract_tool_call('{"tool": "web_search", "arguments": {"query": "python"}}')
        assert call is not None
        assert call.tool == ToolName.WEB_SEARCH
        assert call.arguments == {"query": "python"}
        assert call.skip_continue is False

    def test_json_inside_prose(self):
        text = (
            "Let me look that up.\n"
            '{"tool": "read_url", "arguments": {"url": "https://example.com", "start": 0}}\n'
            "I'll report back."
        )
        call = extract_tool_call(text)
        assert call.tool == ToolName.READ_URL
        assert call.arguments["url"] == "https://example.com"

    def test_json_inside_markdown_fence(self):
        text = '```json\n{"tool": "instant_answer", "arguments": {"query": "pi"}}\n```'
        call = extract_tool_call(text)
        assert call.tool == ToolName.INSTANT_ANSWER
        assert call.arguments == {"query": "pi"}

    def test_malformed_json_is_not_a_call(self):
        assert extract_tool_call('{"tool": "web_search", "arguments": {"query": }') is None

    def test_prose_with_stray_braces_degrades(self):
        # greedy span covers both objects and fails to parse
        text = 'Use {x} here, then {"tool": "web_search", "arguments": {"query": "a"}}'
        assert extract_tool_call(text) is None

    def test_unknown_tool_is_not_a_call(self):
        assert extract_tool_call('{"tool": "delete_files", "arguments": {}}') is None

    def test_arguments_must_be_an_object(self):
        assert extract_tool_call('{"tool": "web_search", "arguments": "python"}') is None
        assert extract_tool_call('{"tool": "web_search"}') is None

    def test_plain_text_and_non_strings(self):
        assert extract_tool_call("The answer is 42.") is None
        assert extract_tool_call("") is None
        assert extract_tool_call(None) is None


def test_is_tool_call_json_is_strict():
    assert is_tool_call_json('{"tool": "web_search", "arguments": {"query": "a"}}')
    assert not is_tool_call_json('Sure: {"tool": "web_search", "arguments": {"query": "a"}}')
    assert is_tool_call_json('{"tool": "web_search", "arguments": {}}')
    assert not is_tool_call_json('{"tool": "web_search", "arguments": "q"}')
    assert not is_tool_call_json('{"tool": "web_search"}')
    assert not is_tool_call_json("not json")
    assert not is_tool_call_json("[1, 2]")


class TestReasoningParsing:
    def test_complete_reasoning(self):
        classifier = ResponseClassifier()
        result = classifier.parse_reasoning("Thinking: because X\nAnswer: 42")
        assert result.thinking == "because X"
        assert result.answer == "42"
        assert result.structured is True
        assert result.partial is False

    def test_thinking_only_carries_previous_answer(self):
        classifier = ResponseClassifier()
        classifier.parse_reasoning("Thinking: first\nAnswer: 42")

        result = classifier.parse_reasoning("Thinking: still working")
        assert result.partial is True
        assert result.stage == "thinking"
        assert result.thinking == "still working"
        assert result.answer == "42"

    def test_thinking_only_after_reset_has_empty_answer(self):
        classifier = ResponseClassifier()
        classifier.parse_reasoning("Thinking: first\nAnswer: 42")
        classifier.reset()

        result = classifier.parse_reasoning("Thinking: still working")
        assert result.answer == ""

    def test_thinking_marker_not_at_start(self):
        classifier = ResponseClassifier()
        result = classifier.parse_reasoning("Okay. Thinking: some reasoning")
        assert result.thinking == "some reasoning"
        assert result.answer == ""
        assert result.partial is True
        assert result.structured is False

    def test_no_markers(self):
        classifier = ResponseClassifier()
        result = classifier.parse_reasoning("Just an answer.")
        assert result.thinking == ""
        assert result.answer == "Just an answer."
        assert result.structured is False
        assert result.partial is False

    def test_answer_only(self):
        classifier = ResponseClassifier()
        result = classifier.parse_reasoning("Answer: 7")
        assert result.structured is False
        assert result.answer == "Answer: 7"

    def test_same_input_same_result(self):
        classifier = ResponseClassifier()
        text = "Thinking: a\nAnswer: b"
        assert classifier.parse_reasoning(text) == classifier.parse_reasoning(text)


class TestClassify:
    def test_tool_call_wins_over_reasoning(self):
        classifier = ResponseClassifier()
        text = 'Thinking: I need data\n{"tool": "web_search", "arguments": {"query": "x"}}'
        result = classifier.classify(text, cot_enabled=True)
        assert result.kind is ResponseKind.TOOL_CALL
        assert result.tool_call.tool == ToolName.WEB_SEARCH

    def test_tool_calls_ignored_on_partial_snapshots(self):
        classifier = ResponseClassifier()
        text = '{"tool": "web_search", "arguments": {"query": "x"}}'
        result = classifier.classify(text, cot_enabled=False, final=False)
        assert result.kind is ResponseKind.PLAIN

    def test_plain_when_cot_disabled(self):
        classifier = ResponseClassifier()
        result = classifier.classify("Thinking: x\nAnswer: y", cot_enabled=False)
        assert result.kind is ResponseKind.PLAIN
        assert result.reasoning.answer == "Thinking: x\nAnswer: y"

    def test_structured_and_partial(self):
        classifier = ResponseClassifier()
        assert (
            classifier.classify("Thinking: x\nAnswer: y", cot_enabled=True).kind
            is ResponseKind.STRUCTURED
        )
        assert (
            classifier.classify("Thinking: x", cot_enabled=True, final=False).kind
            is ResponseKind.PARTIAL
        )

    def test_never_raises_on_garbage(self):
        classifier = ResponseClassifier()
        for text in ["{", "}{", "Thinking:", "Answer:", "{{{}}}", "\x00"]:
            classifier.classify(text, cot_enabled=True)


class TestFormatForDisplay:
    def test_cot_disabled_shows_answer(self):
        result = ReasoningResult(thinking="t", answer="a", structured=True)
        assert format_for_display(result, Settings(enable_cot=False)) == "a"

    def test_complete_with_thinking(self):
        result = ReasoningResult(thinking="t", answer="a", structured=True)
        settings = Settings(enable_cot=True, show_thinking=True)
        assert format_for_display(result, settings) == "Thinking: t\n\nAnswer: a"

    def test_partial_thinking_stage(self):
        result = ReasoningResult(
            thinking="t", answer="old", structured=True, partial=True, stage="thinking"
        )
        settings = Settings(enable_cot=True, show_thinking=True)
        assert format_for_display(result, settings) == "Thinking: t"

    def test_hidden_thinking_shows_answer_or_placeholder(self):
        settings = Settings(enable_cot=True, show_thinking=False)
        complete = ReasoningResult(thinking="t", answer="a", structured=True)
        waiting = ReasoningResult(
            thinking="t", answer="", structured=True, partial=True, stage="thinking"
        )
        assert format_for_display(complete, settings) == "a"
        assert format_for_display(waiting, settings) == THINKING_PLACEHOLDER

    def test_unstructured_shows_answer(self):
        result = ReasoningResult(thinking="", answer="plain", structured=False)
        assert format_for_display(result, Settings(enable_cot=True)) == "plain"
