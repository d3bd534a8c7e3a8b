# src/groqai/client.py

import logging
import random
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from groqai.api import (
    AudioAPI,
    BatchesAPI,
    ChatAPI,
    FilesAPI,
    FineTuningsAPI,
    ModelsAPI,
)
from groqai.observability.base import MetricsHook, NoOpMetricsHook
from groqai.transport.clock import Clock, SystemClock
from groqai.transport.config import ClientConfig
from groqai.transport.dispatcher import Dispatcher, RequestSpec
from groqai.transport.executor import ResilientExecutor
from groqai.transport.rate_limit import RateLimitTracker
from groqai.transport.retry import RetryPolicy
from groqai.transport.streaming import StreamDecoder

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class GroqClient:
    """Async client for the Groq API.

    One instance owns one connection pool and one rate-limit tracker, and is
    safe to share between concurrent tasks.

    Example:
        >>> async with GroqClient.from_env() as client:
        ...     builder = client.chat.builder("llama-3.1-8b-instant")
        ...     response = await builder.user("Hi").send()
        ...     print(response.choices[0].message.content)
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.metrics_hook = metrics_hook
        self.rate_limits = RateLimitTracker()
        clock = clock or SystemClock()
        self._dispatcher = Dispatcher(config, transport=transport, clock=clock)
        self._executor = ResilientExecutor(
            self._dispatcher,
            RetryPolicy(config, rng),
            self.rate_limits,
            clock=clock,
            metrics_hook=metrics_hook,
        )

        self.chat = ChatAPI(self)
        self.models = ModelsAPI(self)
        self.files = FilesAPI(self)
        self.batches = BatchesAPI(self)
        self.audio = AudioAPI(self)
        self.fine_tunings = FineTuningsAPI(self)
        logger.info(
            "Initialized GroqClient with base_url=%s, max_retries=%d",
            config.base_url,
            config.max_retries,
        )

    @classmethod
    def from_env(cls, **kwargs: Any) -> "GroqClient":
        """Client configured from ``GROQ_*`` environment variables."""
        return cls(ClientConfig.from_env(), **kwargs)

    async def request(self, spec: RequestSpec, response_type: type[T]) -> T:
        """Send a buffered request with retries and decode the body."""
        return await self._executor.send(spec, response_type)

    async def stream(self, spec: RequestSpec, chunk_type: type[T]) -> StreamDecoder[T]:
        """Open a server-sent-event response decoded into ``chunk_type`` records."""
        response = await self._executor.open_stream(spec)
        return StreamDecoder(
            response.segments(),
            chunk_type,
            status=response.status,
            on_close=response.aclose,
            metrics_hook=self.metrics_hook,
        )

    async def aclose(self) -> None:
        await self._dispatcher.aclose()

    async def __aenter__(self) -> "GroqClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
