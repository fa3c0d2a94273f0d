import time
import uuid
from abc import ABC, abstractmethod
from typing import Callable

from models.model_reply import ModelReply, NormalizedError, TokenUsage

# (delta, full_text) - full_text is the whole reply received so far
ChunkCallback = Callable[[str, str], None]


class BaseAIClient(ABC):
    """
    Abstract base class for model transport clients.

    The orchestrator only needs "send the conversation, get the reply text
    and token usage back", streamed or not. Implementations must never
    raise from send_request / stream_request: failures are returned as a
    ModelReply with ``error`` set.
    """

    provider_name = "base"

    def __init__(self, api_key: str, model_name: str | None = None, **kwargs):
        """
        Initialize the AI client.

        Args:
            api_key: API key for the AI service
            model_name: Default model used when a call does not override it
            **kwargs: Additional provider-specific parameters
        """
        self.api_key = api_key
        self.model_name = model_name

    @abstractmethod
    async def send_request(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        timeout_s: float | None = None,
    ) -> ModelReply:
        """
        Send a full conversation and wait for the complete reply.

        Args:
            messages: Conversation turns with 'role' and 'content' keys
            model: Override the default model for this call
            timeout_s: Advisory timeout handed to the provider SDK

        Returns:
            ModelReply with the reply text and token usage, or an error
        """

    @abstractmethod
    async def stream_request(
        self,
        messages: list[dict[str, str]],
        on_chunk: ChunkCallback,
        *,
        model: str | None = None,
    ) -> ModelReply:
        """
        Send a full conversation and stream the reply.

        ``on_chunk`` is invoked zero or more times with monotonically growing
        snapshots before the final ModelReply is returned.
        """

    async def get_token_usage(
        self, messages: list[dict[str, str]], *, model: str | None = None
    ) -> int | None:
        """
        Token count for the last streamed exchange, if the provider can tell.

        Default implementation returns None.
        """
        return None

    # ---------- helpers shared by implementations ----------

    @staticmethod
    def _generate_request_id() -> str:
        return str(uuid.uuid4())

    @staticmethod
    def _measure_latency(start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    @staticmethod
    def _estimate_tokens(messages: list[dict[str, str]]) -> int:
        chars = sum(len(m.get("content") or "") for m in messages)
        words = sum(len((m.get("content") or "").split()) for m in messages)
        if words == 0 and chars == 0:
            return 0
        return max(int(words * 1.3), int(chars / 4))

    @staticmethod
    def _normalize_finish_reason(reason: str | None) -> str | None:
        if reason is None:
            return None
        mapping = {
            "stop": "stop",
            "length": "length",
            "max_tokens": "length",
            "tool_calls": "tool",
            "function_call": "tool",
            "content_filter": "content_filter",
        }
        return mapping.get(reason, reason)

    def _normalize_error(self, exc: Exception) -> NormalizedError:
        """Map an SDK/transport exception onto a NormalizedError code."""
        name = type(exc).__name__.lower()
        message = str(exc) or type(exc).__name__

        if "timeout" in name:
            code, retryable = "timeout", True
        elif "authentication" in name or "permission" in name:
            code, retryable = "auth", False
        elif "ratelimit" in name:
            code, retryable = "rate_limit", True
        elif "badrequest" in name or "notfound" in name or "unprocessable" in name:
            code, retryable = "bad_request", False
        elif "apiconnection" in name or "internalserver" in name or "apistatus" in name:
            code, retryable = "provider_error", True
        else:
            code, retryable = "unknown", False

        return NormalizedError(
            code=code,
            message=message,
            provider=self.provider_name,
            retryable=retryable,
            details={"exception_type": type(exc).__name__},
        )

    def _create_error_reply(
        self, *, request_id: str, error: NormalizedError, latency_ms: int, model: str | None
    ) -> ModelReply:
        return ModelReply(
            request_id=request_id,
            text="",
            provider=self.provider_name,
            model=model or self.model_name or "unknown",
            latency_ms=latency_ms,
            token_usage=TokenUsage(),
            finish_reason="error",
            error=error,
        )
