import time

import openai

from models.model_reply import ModelReply, TokenUsage
from utils.logger import get_logger

from .base_client import BaseAIClient, ChunkCallback

logger = get_logger(__name__)


class OpenAIClient(BaseAIClient):
    """
    Async client for the OpenAI chat completions API.

    OpenAI-compatible providers (DeepSeek, Grok) subclass this and only swap
    ``base_url`` and ``provider_name``.
    """

    provider_name = "openai"
    base_url: str | None = None

    def __init__(
        self,
        api_key: str,
        model_name: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int | None = None,
        **kwargs,
    ):
        """
        Initialize the OpenAI client.

        Args:
            api_key: The provider API key
            model_name: The name of the model to use
            temperature: Sampling temperature for every call
            max_tokens: Optional completion cap for every call
            **kwargs: Additional keyword arguments
        """
        super().__init__(api_key, model_name=model_name, **kwargs)
        self.client = openai.AsyncOpenAI(api_key=api_key, base_url=self.base_url)
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._last_stream_usage: TokenUsage | None = None

    def _request_params(self, model: str, messages: list[dict[str, str]]) -> dict:
        params = {
            "model": model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if self.max_tokens:
            params["max_tokens"] = self.max_tokens
        return params

    @staticmethod
    def _usage_from(raw_usage) -> TokenUsage:
        if raw_usage is None:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=getattr(raw_usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(raw_usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(raw_usage, "total_tokens", 0) or 0,
        )

    async def send_request(
        self,
        messages: list[dict[str, str]],
        *,
        model: str | None = None,
        timeout_s: float | None = None,
    ) -> ModelReply:
        """
        Get a complete reply for the conversation.

        IMPORTANT: Never raises exceptions - returns ModelReply with error instead
        """
        request_id = self._generate_request_id()
        start_time = time.time()
        model = model or self.model_name

        try:
            params = self._request_params(model, messages)
            if timeout_s:
                params["timeout"] = timeout_s
            response = await self.client.chat.completions.create(**params)

            latency_ms = self._measure_latency(start_time)
            choice = response.choices[0] if response.choices else None
            text = (choice.message.content if choice else "") or ""
            token_usage = self._usage_from(getattr(response, "usage", None))

            logger.info(
                f"{self.provider_name} completion successful",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "latency_ms": latency_ms,
                        "tokens": token_usage.total_tokens,
                    }
                },
            )

            return ModelReply(
                request_id=request_id,
                text=text,
                provider=self.provider_name,
                model=model,
                latency_ms=latency_ms,
                token_usage=token_usage,
                finish_reason=self._normalize_finish_reason(
                    choice.finish_reason if choice else None
                ),
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e)
            logger.error(
                f"{self.provider_name} completion failed: {error.code}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "error_code": error.code,
                        "error_message": error.message,
                        "retryable": error.retryable,
                    }
                },
            )
            return self._create_error_reply(
                request_id=request_id, error=error, latency_ms=latency_ms, model=model
            )

    async def stream_request(
        self,
        messages: list[dict[str, str]],
        on_chunk: ChunkCallback,
        *,
        model: str | None = None,
    ) -> ModelReply:
        """
        Stream a reply, pushing (delta, full_text) snapshots to ``on_chunk``.

        IMPORTANT: Never raises exceptions - returns ModelReply with error instead
        """
        request_id = self._generate_request_id()
        start_time = time.time()
        model = model or self.model_name
        self._last_stream_usage = None
        full_text = ""
        finish_reason = None

        try:
            params = self._request_params(model, messages)
            stream = await self.client.chat.completions.create(
                **params, stream=True, stream_options={"include_usage": True}
            )

            async for chunk in stream:
                if getattr(chunk, "usage", None):
                    self._last_stream_usage = self._usage_from(chunk.usage)
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                if choice.finish_reason:
                    finish_reason = choice.finish_reason
                delta = getattr(choice.delta, "content", None)
                if delta:
                    full_text += delta
                    on_chunk(delta, full_text)

            latency_ms = self._measure_latency(start_time)
            logger.info(
                f"{self.provider_name} stream completed",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "latency_ms": latency_ms,
                        "chars": len(full_text),
                    }
                },
            )

            return ModelReply(
                request_id=request_id,
                text=full_text,
                provider=self.provider_name,
                model=model,
                latency_ms=latency_ms,
                token_usage=self._last_stream_usage or TokenUsage(),
                finish_reason=self._normalize_finish_reason(finish_reason),
            )

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e)
            logger.error(
                f"{self.provider_name} stream failed: {error.code}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": model,
                        "error_code": error.code,
                        "error_message": error.message,
                        "partial_chars": len(full_text),
                    }
                },
            )
            return self._create_error_reply(
                request_id=request_id, error=error, latency_ms=latency_ms, model=model
            )

    async def get_token_usage(
        self, messages: list[dict[str, str]], *, model: str | None = None
    ) -> int | None:
        """
        Total tokens of the last streamed exchange.

        Uses the usage block the API sends at the end of a stream; falls back
        to a character-based estimate over the conversation when the provider
        does not send one.
        """
        if self._last_stream_usage and self._last_stream_usage.total_tokens:
            return self._last_stream_usage.total_tokens
        estimate = self._estimate_tokens(messages)
        return estimate or None
