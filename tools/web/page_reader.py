"""Fetch a web page and reduce it to readable text for read_url."""

import httpx
from bs4 import BeautifulSoup

from utils.logger import get_logger

from .contracts import ToolError

logger = get_logger(__name__)

DEFAULT_TIMEOUT_S = 15.0
USER_AGENT = "Mozilla/5.0 (compatible; ToolRelay/0.1)"
STRIP_TAGS = ["script", "style", "noscript", "svg", "iframe", "header", "footer", "nav"]


def html_to_text(html: str) -> str:
    """
    Extract visible text from an HTML document.

    Scripts, styles and page chrome are dropped; remaining text is collapsed
    to one non-empty line per block.
    """
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(STRIP_TAGS):
        tag.decompose()
    lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


class PageReader:
    """
    Plain HTTP page fetcher.

    The full text is returned; slicing into (start, length) windows is the
    orchestrator's job, so the same fetch can serve several chunks.
    """

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout_s = timeout_s
        self._transport = transport

    async def read(self, url: str) -> str:
        """
        Download ``url`` and return its readable text.

        Raises:
            ToolError: On HTTP errors or when nothing readable is found
        """
        headers = {"User-Agent": USER_AGENT, "Accept": "text/html,text/plain;q=0.9,*/*;q=0.5"}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s,
                follow_redirects=True,
                headers=headers,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ToolError(f"HTTP {e.response.status_code} for {url}", tool="read_url") from e
        except httpx.HTTPError as e:
            raise ToolError(f"Request failed: {e}", tool="read_url") from e

        content_type = response.headers.get("content-type", "").lower()
        if "html" in content_type or not content_type:
            text = html_to_text(response.text)
        elif content_type.startswith("text/") or "json" in content_type:
            text = response.text.strip()
        else:
            raise ToolError(f"Unsupported content type '{content_type}'", tool="read_url")

        if not text:
            raise ToolError("No readable text found", tool="read_url")

        logger.info(
            "Page read",
            extra={
                "extra_fields": {
                    "url": url,
                    "status_code": response.status_code,
                    "content_length": len(response.content),
                    "text_length": len(text),
                }
            },
        )
        return text
