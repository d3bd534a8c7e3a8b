# src/groqai/api/chat.py

import logging
from typing import TYPE_CHECKING, Any

from groqai.observability import names
from groqai.transport.dispatcher import RequestSpec
from groqai.transport.streaming import StreamDecoder
from groqai.types import (
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    ResponseFormat,
    Role,
    StreamOptions,
    Tool,
)

if TYPE_CHECKING:
    from groqai.client import GroqClient

logger = logging.getLogger(__name__)

COMPLETIONS_PATH = "chat/completions"


class ChatAPI:
    """``/chat/completions``, buffered and streaming."""

    def __init__(self, client: "GroqClient") -> None:
        self._client = client

    async def create(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        payload = request.to_payload()
        payload.pop("stream", None)
        payload.pop("stream_options", None)

        logger.debug(
            "Calling chat completions: model=%s, messages=%d, tools=%d",
            request.model,
            len(request.messages),
            len(request.tools) if request.tools else 0,
        )
        response = await self._client.request(
            RequestSpec("POST", COMPLETIONS_PATH, json_body=payload),
            ChatCompletionResponse,
        )

        if response.usage:
            hook = self._client.metrics_hook
            labels = {"model": response.model}
            hook.increment(
                names.LLM_TOKENS_PROMPT, response.usage.prompt_tokens, labels
            )
            hook.increment(
                names.LLM_TOKENS_COMPLETION, response.usage.completion_tokens, labels
            )
            hook.increment(names.LLM_TOKENS_TOTAL, response.usage.total_tokens, labels)

        logger.info(
            "Chat completion: model=%s, finish=%s, tokens=%s",
            response.model,
            response.choices[0].finish_reason if response.choices else None,
            response.usage.total_tokens if response.usage else "n/a",
        )
        return response

    async def stream(
        self, request: ChatCompletionRequest
    ) -> StreamDecoder[ChatCompletionChunk]:
        """Open a streaming completion. Iterate the result with ``async for``."""
        payload = request.model_copy(update={"stream": True}).to_payload()
        logger.debug("Opening chat completion stream: model=%s", request.model)
        return await self._client.stream(
            RequestSpec(
                "POST",
                COMPLETIONS_PATH,
                headers={"Accept": "text/event-stream"},
                json_body=payload,
            ),
            ChatCompletionChunk,
        )

    def builder(self, model: str) -> "ChatRequestBuilder":
        return ChatRequestBuilder(self, model)


class ChatRequestBuilder:
    """Fluent construction of a chat completion request.

    Example:
        >>> response = await (
        ...     client.chat.builder("llama-3.1-8b-instant")
        ...     .system("You are terse.")
        ...     .user("Hello!")
        ...     .temperature(0.2)
        ...     .send()
        ... )
    """

    def __init__(self, api: ChatAPI, model: str) -> None:
        self._api = api
        self._model = model
        self._messages: list[ChatMessage] = []
        self._options: dict[str, Any] = {}

    def message(self, message: ChatMessage) -> "ChatRequestBuilder":
        self._messages.append(message)
        return self

    def messages(self, messages: list[ChatMessage]) -> "ChatRequestBuilder":
        self._messages.extend(messages)
        return self

    def system(self, content: str) -> "ChatRequestBuilder":
        return self.message(ChatMessage.text(Role.SYSTEM, content))

    def user(self, content: str) -> "ChatRequestBuilder":
        return self.message(ChatMessage.text(Role.USER, content))

    def temperature(self, value: float) -> "ChatRequestBuilder":
        return self._set("temperature", value)

    def top_p(self, value: float) -> "ChatRequestBuilder":
        return self._set("top_p", value)

    def max_completion_tokens(self, value: int) -> "ChatRequestBuilder":
        return self._set("max_completion_tokens", value)

    def tools(self, tools: list[Tool]) -> "ChatRequestBuilder":
        return self._set("tools", tools)

    def tool_choice(self, choice: str | dict[str, Any]) -> "ChatRequestBuilder":
        """``"auto"``, ``"none"``, ``"required"`` or a named-function object."""
        return self._set("tool_choice", choice)

    def parallel_tool_calls(self, enabled: bool) -> "ChatRequestBuilder":
        return self._set("parallel_tool_calls", enabled)

    def response_format(self, value: ResponseFormat) -> "ChatRequestBuilder":
        return self._set("response_format", value)

    def frequency_penalty(self, value: float) -> "ChatRequestBuilder":
        return self._set("frequency_penalty", value)

    def presence_penalty(self, value: float) -> "ChatRequestBuilder":
        return self._set("presence_penalty", value)

    def logprobs(self, enabled: bool) -> "ChatRequestBuilder":
        return self._set("logprobs", enabled)

    def top_logprobs(self, count: int) -> "ChatRequestBuilder":
        return self._set("top_logprobs", count)

    def logit_bias(self, bias: dict[str, float]) -> "ChatRequestBuilder":
        return self._set("logit_bias", bias)

    def reasoning_effort(self, value: str) -> "ChatRequestBuilder":
        return self._set("reasoning_effort", value)

    def n(self, value: int) -> "ChatRequestBuilder":
        return self._set("n", value)

    def seed(self, value: int) -> "ChatRequestBuilder":
        return self._set("seed", value)

    def service_tier(self, value: str) -> "ChatRequestBuilder":
        return self._set("service_tier", value)

    def stop(self, value: str | list[str]) -> "ChatRequestBuilder":
        return self._set("stop", value)

    def stream_options(self, value: StreamOptions) -> "ChatRequestBuilder":
        """Only sent with streaming requests."""
        return self._set("stream_options", value)

    def user_id(self, value: str) -> "ChatRequestBuilder":
        return self._set("user", value)

    def build(self) -> ChatCompletionRequest:
        if not self._messages:
            raise ValueError("A chat request needs at least one message")
        return ChatCompletionRequest(
            model=self._model, messages=list(self._messages), **self._options
        )

    async def send(self) -> ChatCompletionResponse:
        return await self._api.create(self.build())

    async def stream(self) -> StreamDecoder[ChatCompletionChunk]:
        return await self._api.stream(self.build())

    def _set(self, key: str, value: Any) -> "ChatRequestBuilder":
        self._options[key] = value
        return self
