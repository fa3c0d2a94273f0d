"""Prompt text sent to the model: the tool contract and the helper prompts."""

from orchestrator.tool_types import DEFAULT_READ_LENGTH
from tools.web.contracts import SearchResult

SYSTEM_PROMPT = f"""You are an AI assistant with access to three tools for external information. \
You may call them multiple times to retrieve additional data:
1. web_search(query) -> returns a list of search results [{{title, url, snippet}}, ...]
2. read_url(url[, start, length]) -> returns the text content of a web page from position \
'start' (default 0) up to 'length' characters (default {DEFAULT_READ_LENGTH})
3. instant_answer(query) -> returns a JSON object from DuckDuckGo's Instant Answer API for \
quick facts, definitions and summaries

For any question requiring up-to-date facts, statistics or detailed content, choose the \
appropriate tool above. Use read_url to fetch an initial snippet, then evaluate it for relevance.
If a snippet ends with "...", decide whether more text would improve your answer. If it would, \
call read_url again with the same url, start at the end of the previous snippet and length 5000. \
Stop when the snippet no longer ends with "..." or more content is not valuable.

When calling a tool, output EXACTLY one JSON object and nothing else, in this format:
{{"tool": "web_search", "arguments": {{"query": "your query"}}}}
{{"tool": "read_url", "arguments": {{"url": "https://example.com", "start": 0, "length": \
{DEFAULT_READ_LENGTH}}}}}
{{"tool": "instant_answer", "arguments": {{"query": "your query"}}}}

Wait for the tool result before continuing. After each tool result, reason about what you \
learned before deciding whether another tool call is needed, then give your answer."""

COT_INSTRUCTIONS = """I'd like you to use Chain of Thought reasoning. Please think step-by-step \
before providing your final answer. Format your response like this:
Thinking: [detailed reasoning process, exploring different angles and considerations]
Answer: [your final, concise answer based on the reasoning above]"""

SUGGEST_SYSTEM = "You are an assistant helping to select the most relevant search results."
JUDGE_SYSTEM = "You are an assistant that decides if more content is needed from a web page."
SUMMARIZE_SYSTEM = "You are an assistant that synthesizes information from multiple sources."

SNIPPET_SEPARATOR = "\n---\n"


def enhance_with_cot(message: str) -> str:
    """Append the chain-of-thought format request to a user message."""
    return f"{message}\n\n{COT_INSTRUCTIONS}"


def suggestion_messages(results: list[SearchResult], query: str) -> list[dict[str, str]]:
    listing = "\n".join(f"{i}. {r.title} - {r.snippet}" for i, r in enumerate(results, start=1))
    prompt = (
        f'Given these search results for the query: "{query}", which results (by number) '
        f"are most relevant to read in detail?\n\n{listing}\n\n"
        "Reply with a comma-separated list of result numbers."
    )
    return [{"role": "system", "content": SUGGEST_SYSTEM}, {"role": "user", "content": prompt}]


def judgment_messages(url: str, snippet: str) -> list[dict[str, str]]:
    prompt = (
        f"Given the following snippet from {url}, do you need more content to answer the "
        'user\'s question? Please reply with "YES" or "NO" and a brief reason. If YES, '
        f"estimate how many more characters you need.\n\nSnippet:\n{snippet}"
    )
    return [{"role": "system", "content": JUDGE_SYSTEM}, {"role": "user", "content": prompt}]


def summarize_messages(snippets: list[str]) -> list[dict[str, str]]:
    prompt = (
        "Summarize the following information extracted from web pages "
        f"(be as concise as possible):\n\n{SNIPPET_SEPARATOR.join(snippets)}"
    )
    return [{"role": "system", "content": SUMMARIZE_SYSTEM}, {"role": "user", "content": prompt}]
