import json

import pytest

from conftest import FakeClient, FakeTools, search_results
from orchestrator.tool_executor import format_search_results, read_more_call, slice_page
from orchestrator.tool_types import ToolCall, ToolName


def _call(tool: ToolName, **arguments) -> ToolCall:
    # skip_continue keeps these tests to a single tool step
    return ToolCall(tool=tool, arguments=arguments, skip_continue=True)


class TestSlicePage:
    def test_long_page_is_truncated(self):
        snippet, has_more = slice_page("x" * 1500, 0, 1122)
        assert len(snippet) == 1122
        assert has_more is True

    def test_short_page_is_returned_whole(self):
        snippet, has_more = slice_page("y" * 1000, 0, 1122)
        assert len(snippet) == 1000
        assert has_more is False

    def test_exact_fit_has_no_more(self):
        assert slice_page("z" * 2000, 1000, 1000) == ("z" * 1000, False)

    def test_offset_past_end(self):
        assert slice_page("abc", 10, 5) == ("", False)


def test_format_search_results():
    text = format_search_results("python", search_results(2))
    assert text == (
        'Search results for "python" (2):\n'
        "1. Result 1 (https://example.com/1) - Snippet 1\n"
        "2. Result 2 (https://example.com/2) - Snippet 2"
    )


@pytest.mark.asyncio
async def test_web_search_appends_one_turn(make_orchestrator, ui):
    tools = FakeTools(results=search_results(3))
    orchestrator = make_orchestrator(tools=tools)

    outcome = await orchestrator.handle_tool_call(_call(ToolName.WEB_SEARCH, query="python"))

    assert outcome.ok is True
    conversation = orchestrator.get_conversation()
    assert len(conversation) == 2
    assert conversation[-1] == {"role": "assistant", "content": outcome.content}
    assert outcome.content.startswith('Search results for "python" (3):')
    assert tools.search_calls == [("python", "duckduckgo")]
    assert [r.url for r, _, _ in ui.search_results] == [
        "https://example.com/1",
        "https://example.com/2",
        "https://example.com/3",
    ]
    assert orchestrator.session.last_search_results == tools.results
    assert ui.spinner_texts == ['Searching (duckduckgo) for "python"...']
    assert ui.spinner_visible is False


@pytest.mark.asyncio
async def test_web_search_engine_argument(make_orchestrator, ui):
    tools = FakeTools(results=search_results(1))
    orchestrator = make_orchestrator(tools=tools)

    await orchestrator.handle_tool_call(_call(ToolName.WEB_SEARCH, query="q", engine="tavily"))

    assert tools.search_calls == [("q", "tavily")]
    assert ui.spinner_texts == ['Searching (tavily) for "q"...']


@pytest.mark.asyncio
async def test_web_search_without_results(make_orchestrator, ui):
    orchestrator = make_orchestrator(tools=FakeTools(results=[]))

    outcome = await orchestrator.handle_tool_call(_call(ToolName.WEB_SEARCH, query="nothing"))

    assert outcome.ok is True
    assert ("assistant", 'No search results found for "nothing".') in ui.messages
    assert orchestrator.get_conversation()[-1]["content"] == 'Search results for "nothing" (0):\n'


@pytest.mark.asyncio
async def test_highlighted_results_are_flagged(make_orchestrator, ui):
    orchestrator = make_orchestrator(tools=FakeTools(results=search_results(3)))
    orchestrator.session.highlighted_indices = {1}

    await orchestrator.handle_tool_call(_call(ToolName.WEB_SEARCH, query="python"))

    assert [flag for _, _, flag in ui.search_results] == [False, True, False]


@pytest.mark.asyncio
async def test_web_search_failure(make_orchestrator, ui):
    orchestrator = make_orchestrator(tools=FakeTools(search_error="rate limited"))

    outcome = await orchestrator.handle_tool_call(_call(ToolName.WEB_SEARCH, query="python"))

    assert outcome.ok is False
    assert outcome.content == "Web search failed: rate limited"
    assert ui.messages[-1] == ("assistant", "Web search failed: rate limited")
    assert orchestrator.get_conversation()[-1]["content"] == "Web search failed: rate limited"
    assert ui.spinner_visible is False


@pytest.mark.asyncio
async def test_read_url_slices_and_marks_truncation(make_orchestrator, ui):
    url = "https://example.com/long"
    orchestrator = make_orchestrator(tools=FakeTools(pages={url: "a" * 1500}))

    outcome = await orchestrator.handle_tool_call(_call(ToolName.READ_URL, url=url))

    assert outcome.snippet == "a" * 1122
    assert outcome.has_more is True
    assert outcome.content == f"Read content from {url}:\n{'a' * 1122}..."
    assert ui.read_results == [(url, "a" * 1122, True)]
    assert orchestrator.session.read_snippets == ["a" * 1122]


@pytest.mark.asyncio
async def test_read_url_short_page(make_orchestrator, ui):
    url = "https://example.com/short"
    orchestrator = make_orchestrator(tools=FakeTools(pages={url: "b" * 1000}))

    outcome = await orchestrator.handle_tool_call(_call(ToolName.READ_URL, url=url))

    assert outcome.snippet == "b" * 1000
    assert outcome.has_more is False
    assert outcome.content == f"Read content from {url}:\n{'b' * 1000}"


@pytest.mark.asyncio
async def test_read_url_window(make_orchestrator):
    url = "https://example.com/digits"
    orchestrator = make_orchestrator(tools=FakeTools(pages={url: "0123456789"}))

    outcome = await orchestrator.handle_tool_call(
        _call(ToolName.READ_URL, url=url, start=2, length=3)
    )

    assert outcome.snippet == "234"
    assert outcome.has_more is True


@pytest.mark.asyncio
async def test_summarize_button_after_two_snippets(make_orchestrator, ui):
    pages = {"https://a.test": "first page", "https://b.test": "second page"}
    orchestrator = make_orchestrator(tools=FakeTools(pages=pages))

    await orchestrator.handle_tool_call(_call(ToolName.READ_URL, url="https://a.test"))
    assert ui.summarize_buttons == []

    await orchestrator.handle_tool_call(_call(ToolName.READ_URL, url="https://b.test"))
    assert len(ui.summarize_buttons) == 1
    assert orchestrator.session.read_snippets == ["first page", "second page"]


@pytest.mark.asyncio
async def test_read_url_failure(make_orchestrator, ui):
    orchestrator = make_orchestrator(tools=FakeTools())

    outcome = await orchestrator.handle_tool_call(_call(ToolName.READ_URL, url="https://gone.test"))

    assert outcome.ok is False
    assert outcome.content == "Read URL failed: HTTP 404 for https://gone.test"
    assert orchestrator.session.read_snippets == []
    assert ui.spinner_visible is False


@pytest.mark.asyncio
async def test_instant_answer(make_orchestrator, ui):
    payload = {"Heading": "Python", "AbstractText": "A language."}
    orchestrator = make_orchestrator(tools=FakeTools(instant=payload))

    outcome = await orchestrator.handle_tool_call(_call(ToolName.INSTANT_ANSWER, query="python"))

    expected = json.dumps(payload, indent=2)
    assert outcome.content == expected
    assert ui.messages[-1] == ("assistant", expected)
    assert orchestrator.get_conversation()[-1]["content"] == expected
    assert ("show_status", 'Retrieving instant answer for "python"...') in ui.events
    assert ui.status_visible is False


@pytest.mark.asyncio
async def test_instant_answer_failure(make_orchestrator, ui):
    orchestrator = make_orchestrator(tools=FakeTools(instant_error="timeout"))

    outcome = await orchestrator.handle_tool_call(_call(ToolName.INSTANT_ANSWER, query="python"))

    assert outcome.content == "Instant answer failed: timeout"
    assert ui.status_visible is False


@pytest.mark.asyncio
async def test_read_more_action_reads_default_window(make_orchestrator, ui):
    url = "https://example.com/1"
    client = FakeClient(replies=["Thanks, that helps."])
    tools = FakeTools(results=search_results(1), pages={url: "c" * 3000})
    orchestrator = make_orchestrator(client=client, tools=tools)
    await orchestrator.handle_tool_call(_call(ToolName.WEB_SEARCH, query="python"))

    result, on_read_more, _ = ui.search_results[0]
    await on_read_more(result.url)

    entry = orchestrator.get_tool_call_audit_log()[-1]
    assert entry.tool == "read_url"
    assert entry.args == read_more_call(url).arguments == {"url": url, "start": 0, "length": 1122}
    assert ui.read_results[-1] == (url, "c" * 1122, True)
    assert orchestrator.get_conversation()[-1]["content"] == "Thanks, that helps."
