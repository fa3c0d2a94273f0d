"""
ChatOrchestrator - the tool-calling chat loop.

Key guarantees:
- No exceptions bubble up from send_message(); failures become assistant messages
- Every model reply is classified before anything is shown or stored
- Tool calls run validator -> loop guard -> executor -> continuation, in that order
- TokenTracker updates happen here, for main-exchange model calls only
"""

from typing import Any

from api.base_client import BaseAIClient
from models.model_reply import ModelReply, ModelRequestError
from models.settings import Settings
from orchestrator.argument_validator import ArgumentValidator
from orchestrator.batch_summarizer import BatchSummarizer
from orchestrator.continuation import CHAINED_CALL_WARNING, Continuation, ContinuationController
from orchestrator.deep_reader import (
    DEFAULT_CHUNK_SIZE,
    DEFAULT_MAX_CHUNKS,
    DEFAULT_MAX_TOTAL_LENGTH,
    DeepReadController,
    DeepReadResult,
)
from orchestrator.loop_guard import LOOP_DETECTED_MESSAGE
from orchestrator.prompts import enhance_with_cot
from orchestrator.response_classifier import (
    THINKING_PLACEHOLDER,
    ResponseKind,
    format_for_display,
)
from orchestrator.session import ChatSession
from orchestrator.tool_executor import ToolExecutor, read_more_call
from orchestrator.tool_types import ToolCall, ToolCallHistoryEntry, ToolOutcome
from tools.web.contracts import SearchResult
from tools.web.service import WebToolsService
from ui.base import ChatUI
from utils.logger import get_logger

logger = get_logger(__name__)


class ChatOrchestrator:
    """
    Drives one conversation between the user (through ``ui``), the model
    (through ``client``) and the web tools (through ``tools``).

    Every step awaits the one before it; nothing here runs concurrently, so
    the session state needs no locking.
    """

    def __init__(
        self,
        client: BaseAIClient,
        tools: WebToolsService,
        ui: ChatUI,
        settings: Settings | None = None,
    ):
        self.client = client
        self.tools = tools
        self.ui = ui
        self.session = ChatSession(settings=settings or Settings())

        self.validator = ArgumentValidator()
        self.continuation = ContinuationController(self.session)
        self.summarizer = BatchSummarizer(self.session, client, ui)
        self.deep_reader = DeepReadController(
            self.session,
            client,
            ui,
            run_tool=self.handle_tool_call,
            summarize=self.summarize_snippets,
        )
        self.executor = ToolExecutor(
            self.session,
            tools,
            ui,
            on_read_more=self._read_more,
            on_summarize=self.summarize_snippets,
            after_search=self.suggest_results_to_read,
        )

    # ---------- lifecycle & settings ----------

    def initialize(self, settings: Settings | None = None) -> None:
        """
        Start a fresh conversation seeded with the tool-contract system turn.

        Args:
            settings: Replaces the current settings when given
        """
        if settings is not None:
            self.session.settings = settings
        self.session.reset()
        logger.info(
            "Chat orchestrator initialized",
            extra={"extra_fields": {"settings": self.session.settings.to_dict()}},
        )

    def update_settings(self, **changes: Any) -> Settings:
        """
        Replace the settings snapshot with a copy carrying ``changes``.

        Unknown keys are ignored.
        """
        self.session.settings = self.session.settings.with_update(**changes)
        logger.info(
            "Chat settings updated",
            extra={"extra_fields": {"settings": self.session.settings.to_dict()}},
        )
        return self.session.settings

    def get_settings(self) -> Settings:
        return self.session.settings

    def get_conversation(self) -> list[dict[str, str]]:
        return self.session.conversation.get_messages()

    def get_total_token_count(self) -> int:
        return self.session.token_tracker.total_tokens

    def get_tool_call_audit_log(self) -> list[ToolCallHistoryEntry]:
        return list(self.session.tool_call_history)

    def reset_conversation(self) -> None:
        """Back to the system turn only. Settings, read cache and audit log are kept."""
        self.session.reset()

    # ---------- main exchange ----------

    async def send_message(self, message: str | None = None) -> None:
        """
        Send one user message and run the exchange to completion.

        Args:
            message: Message text; when None the UI's pending input is used
        """
        text = self.ui.get_user_input() if message is None else message
        if not text or not text.strip():
            return

        self.ui.show_status("Sending message...")
        self.session.classifier.reset()
        self.ui.add_message("user", text)
        self.ui.clear_user_input()

        settings = self.session.settings
        self.session.conversation.add_user(enhance_with_cot(text) if settings.enable_cot else text)

        try:
            await self._run_model_round()
        except ModelRequestError as e:
            logger.warning(
                "Model request failed",
                extra={"extra_fields": {"code": e.error.code, "error": str(e)}},
            )
            self.ui.add_message("assistant", f"Error: {e}")
        except Exception as e:
            logger.error(f"Unexpected error during exchange: {e}", exc_info=True)
            self.ui.add_message("assistant", f"Error: {e}")
        finally:
            self.ui.clear_status()
            logger.debug(
                "Exchange finished",
                extra={"extra_fields": {"total_tokens": self.get_total_token_count()}},
            )

    async def _run_model_round(self) -> None:
        """
        One model call over the current history, then act on the reply.
        """
        settings = self.session.settings
        messages = self.session.conversation.get_messages()
        handle = None

        if settings.streaming:
            reply, handle = await self._stream_reply(messages, settings)
        else:
            self.ui.show_status("Waiting for AI response...")
            reply = (await self.client.send_request(messages)).raise_for_error()
            self.session.token_tracker.update(reply.token_usage)

        classification = self.session.classifier.classify(
            reply.text, cot_enabled=settings.enable_cot, final=True
        )

        if classification.kind is ResponseKind.TOOL_CALL:
            logger.info(
                "🔧 Model requested a tool",
                extra={"extra_fields": {"tool": classification.tool_call.tool.value}},
            )
            await self.handle_tool_call(classification.tool_call)
            return

        if classification.reasoning.thinking:
            logger.debug(
                "Model reasoning",
                extra={"extra_fields": {"thinking": classification.reasoning.thinking[:500]}},
            )

        self.session.conversation.add_assistant(reply.text)
        display = format_for_display(classification.reasoning, settings)
        if handle is not None:
            self.ui.update_message_content(handle, display)
        else:
            self.ui.add_message("assistant", display)

    async def _stream_reply(
        self, messages: list[dict[str, str]], settings: Settings
    ) -> tuple[ModelReply, Any]:
        self.ui.show_status("Streaming response...")
        handle = self.ui.create_empty_ai_message()
        if settings.enable_cot:
            self.ui.update_message_content(handle, THINKING_PLACEHOLDER)

        def on_chunk(_delta: str, full_text: str) -> None:
            if not settings.enable_cot:
                self.ui.update_message_content(handle, full_text)
                return
            partial = self.session.classifier.classify(full_text, cot_enabled=True, final=False)
            self.ui.update_message_content(handle, format_for_display(partial.reasoning, settings))

        reply = (await self.client.stream_request(messages, on_chunk)).raise_for_error()

        if reply.token_usage.total_tokens:
            self.session.token_tracker.update(reply.token_usage)
        else:
            self.session.token_tracker.add_total(await self.client.get_token_usage(messages))
        return reply, handle

    # ---------- tool calls ----------

    async def handle_tool_call(self, call: ToolCall) -> ToolOutcome | None:
        """
        Validate, loop-check, execute and (maybe) continue after one tool call.

        Returns:
            The executor's ToolOutcome, or None when the call was rejected by
            validation or stopped by the loop guard
        """
        args = self.validator.validate(call)
        if args is None:
            self.ui.add_message("assistant", self.validator.error_message(call.tool))
            return None

        if not self.session.loop_guard.register(call):
            self.ui.add_message("assistant", LOOP_DETECTED_MESSAGE)
            return None

        self.session.tool_call_history.append(
            ToolCallHistoryEntry(tool=call.tool.value, args=dict(call.arguments))
        )
        outcome = await self.executor.execute(call, args)

        decision = self.continuation.decide(call)
        if decision is Continuation.RESUBMIT:
            await self._run_model_round()
        elif decision is Continuation.REFUSE:
            self.ui.add_message("assistant", CHAINED_CALL_WARNING)
        return outcome

    async def _read_more(self, url: str) -> ToolOutcome | None:
        try:
            return await self.handle_tool_call(read_more_call(url))
        except ModelRequestError as e:
            self.ui.add_message("assistant", f"Error: {e}")
            return None

    # ---------- retrieval helpers ----------

    async def summarize_snippets(self) -> str | None:
        """Summarize everything read since the last summary."""
        return await self.summarizer.summarize()

    async def deep_read_url(
        self,
        url: str,
        max_chunks: int = DEFAULT_MAX_CHUNKS,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_total_length: int = DEFAULT_MAX_TOTAL_LENGTH,
    ) -> DeepReadResult:
        return await self.deep_reader.deep_read(
            url, max_chunks=max_chunks, chunk_size=chunk_size, max_total_length=max_total_length
        )

    async def suggest_results_to_read(self, results: list[SearchResult], query: str) -> None:
        await self.deep_reader.suggest_results_to_read(results, query)
