"""
BatchSummarizer - folds the snippets read so far into one bounded summary.

Snippets are packed greedily, in order, into batches under a character
budget and summarized one batch at a time. When the joined batch summaries
are still over budget they become the input of another round. The snippet
buffer is cleared only at a terminal outcome (a summary or a failure),
never between rounds.
"""

from api.base_client import BaseAIClient
from models.model_reply import ModelRequestError
from orchestrator.prompts import SNIPPET_SEPARATOR, summarize_messages
from orchestrator.session import ChatSession
from ui.base import ChatUI
from utils.logger import get_logger

logger = get_logger(__name__)

MAX_PROMPT_LENGTH = 5857  # characters per batch
SUMMARIZATION_TIMEOUT_S = 88.0
MAX_ROUNDS = 5


def split_into_batches(snippets: list[str], max_len: int) -> list[list[str]]:
    """
    Greedy, order-preserving packing of ``snippets``.

    A batch never exceeds ``max_len`` characters unless it holds a single
    snippet that is longer than ``max_len`` on its own; snippets are never
    split. Separator characters are not counted.
    """
    batches: list[list[str]] = []
    current: list[str] = []
    current_len = 0
    for snippet in snippets:
        if current and current_len + len(snippet) > max_len:
            batches.append(current)
            current = []
            current_len = 0
        current.append(snippet)
        current_len += len(snippet)
    if current:
        batches.append(current)
    return batches


class SummarizationError(Exception):
    """Summaries could not be condensed under the budget."""


class BatchSummarizer:
    def __init__(
        self,
        session: ChatSession,
        client: BaseAIClient,
        ui: ChatUI,
        *,
        max_prompt_length: int = MAX_PROMPT_LENGTH,
        timeout_s: float = SUMMARIZATION_TIMEOUT_S,
        max_rounds: int = MAX_ROUNDS,
    ):
        self.session = session
        self.client = client
        self.ui = ui
        self.max_prompt_length = max_prompt_length
        self.timeout_s = timeout_s
        self.max_rounds = max_rounds

    async def summarize(self, snippets: list[str] | None = None) -> str | None:
        """
        Summarize ``snippets`` (default: the session's read buffer).

        The summary is shown as "Summary:\\n..." and appended to the
        conversation. Model failures are shown as a notice and never raised.

        Returns:
            The summary text, or None when there was nothing to do or it failed
        """
        if snippets is None:
            snippets = list(self.session.read_snippets)
        if not snippets:
            return None

        try:
            summary = await self._summarize_round(snippets, round_=1)
        except (ModelRequestError, SummarizationError) as e:
            logger.warning(
                "Summarization failed",
                extra={"extra_fields": {"snippets": len(snippets), "error": str(e)}},
            )
            self.ui.add_message("assistant", f"Summarization failed. Error: {e}")
            summary = None
        finally:
            self.ui.hide_spinner()
            self.session.read_snippets.clear()

        if summary:
            text = f"Summary:\n{summary}"
            self.ui.add_message("assistant", text)
            self.session.conversation.add_assistant(text)
        return summary

    async def _summarize_round(self, snippets: list[str], round_: int) -> str:
        if round_ > self.max_rounds:
            raise SummarizationError(
                f"could not condense the content below {self.max_prompt_length} "
                f"characters in {self.max_rounds} rounds"
            )

        if len(snippets) == 1:
            self.ui.show_spinner(f"Round {round_}: Summarizing information...")
            return await self._summarize_batch(snippets)

        batches = split_into_batches(snippets, self.max_prompt_length)
        summaries = []
        for i, batch in enumerate(batches, start=1):
            self.ui.show_spinner(f"Round {round_}: Summarizing batch {i} of {len(batches)}...")
            summaries.append(await self._summarize_batch(batch))

        combined = SNIPPET_SEPARATOR.join(summaries)
        logger.info(
            "Summarization round finished",
            extra={
                "extra_fields": {
                    "round": round_,
                    "batches": len(batches),
                    "combined_chars": len(combined),
                }
            },
        )
        if len(combined) > self.max_prompt_length:
            self.ui.show_spinner(f"Round {round_ + 1}: Combining summaries...")
            return await self._summarize_round(summaries, round_ + 1)

        self.ui.show_spinner(f"Round {round_}: Finalizing summary...")
        return combined

    async def _summarize_batch(self, batch: list[str]) -> str:
        reply = await self.client.send_request(
            summarize_messages(batch), timeout_s=self.timeout_s
        )
        return reply.raise_for_error().text.strip()
