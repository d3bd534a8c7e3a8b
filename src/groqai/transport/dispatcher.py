# src/groqai/transport/dispatcher.py

import asyncio
import json
import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from groqai.errors import TransportError

from .clock import Clock, SystemClock
from .config import ClientConfig

logger = logging.getLogger(__name__)

# (filename, payload, content type)
FilePart = tuple[str, bytes, str]


@dataclass(frozen=True)
class RequestSpec:
    """One HTTP exchange, relative to the client's base URL.

    At most one body kind is set: ``json_body`` for JSON requests, ``content``
    for a raw byte payload, or ``form`` / ``files`` for multipart uploads.
    """

    method: str
    path: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] | None = None
    json_body: Any = None
    content: bytes | None = None
    form: Mapping[str, Any] | None = None
    files: Mapping[str, FilePart] | None = None

    def __post_init__(self) -> None:
        kinds = [self.json_body is not None, self.content is not None]
        kinds.append(self.form is not None or self.files is not None)
        if sum(kinds) > 1:
            raise ValueError("RequestSpec accepts only one body kind")

    def describe(self) -> str:
        return f"{self.method} {self.path}"


@dataclass(frozen=True)
class BufferedResponse:
    status: int
    headers: Mapping[str, str]
    body: bytes
    received_at: float

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


class StreamingResponse:
    """Response whose body is read incrementally.

    ``segments()`` yields raw byte segments as they arrive. Closing the
    iterator, or this object, releases the connection.
    """

    def __init__(
        self, response: httpx.Response, *, description: str, received_at: float
    ) -> None:
        self._response = response
        self._description = description
        self.status = response.status_code
        self.headers: Mapping[str, str] = response.headers
        self.received_at = received_at

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_closed(self) -> bool:
        return self._response.is_closed

    async def segments(self) -> AsyncIterator[bytes]:
        try:
            async for segment in self._response.aiter_bytes():
                if segment:
                    yield segment
        except httpx.RequestError as exc:
            raise TransportError(
                f"{self._description} stream interrupted: {exc}",
                timeout=isinstance(exc, httpx.TimeoutException),
            ) from exc
        finally:
            await self._response.aclose()

    async def aread(self) -> bytes:
        """Read and return the rest of the body, then close."""
        try:
            return await self._response.aread()
        except httpx.RequestError as exc:
            raise TransportError(f"{self._description} failed: {exc}") from exc
        finally:
            await self._response.aclose()

    async def aclose(self) -> None:
        await self._response.aclose()


class Dispatcher:
    """Performs single authenticated exchanges over a pooled ``httpx.AsyncClient``.

    Never retries. Network failures and timeouts surface as ``TransportError``.
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or SystemClock()
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
            proxy=config.proxy if transport is None else None,
            transport=transport,
        )
        logger.info(
            "Initialized Dispatcher with base_url=%s, timeout=%s, proxy=%s",
            config.base_url,
            config.timeout,
            "set" if config.proxy else "none",
        )

    async def send(self, spec: RequestSpec) -> BufferedResponse:
        """Buffered exchange: the timeout covers connect and the full body."""
        request = self._build_request(spec)
        logger.debug("Sending request: %s", spec.describe())
        try:
            response = await asyncio.wait_for(
                self._client.send(request), timeout=self._config.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise self._timeout_error(spec) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{spec.describe()} failed: {exc}") from exc

        logger.debug(
            "Response status: %d for %s", response.status_code, spec.describe()
        )
        return BufferedResponse(
            status=response.status_code,
            headers=response.headers,
            body=response.content,
            received_at=self._clock.monotonic(),
        )

    async def open_stream(self, spec: RequestSpec) -> StreamingResponse:
        """Streaming exchange: the timeout covers connect and header receipt."""
        request = self._build_request(spec)
        logger.debug("Opening stream: %s", spec.describe())
        try:
            response = await asyncio.wait_for(
                self._client.send(request, stream=True), timeout=self._config.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise self._timeout_error(spec) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"{spec.describe()} failed: {exc}") from exc

        logger.debug("Stream status: %d for %s", response.status_code, spec.describe())
        return StreamingResponse(
            response,
            description=spec.describe(),
            received_at=self._clock.monotonic(),
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self, spec: RequestSpec) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "User-Agent": self._config.user_agent,
            "Accept": "application/json",
        }
        headers.update(self._config.headers)
        headers.update(spec.headers)
        return headers

    def _build_request(self, spec: RequestSpec) -> httpx.Request:
        return self._client.build_request(
            spec.method,
            spec.path.lstrip("/"),
            headers=self._headers(spec),
            params=spec.params,
            json=spec.json_body,
            content=spec.content,
            data=spec.form,
            files=spec.files,
        )

    def _timeout_error(self, spec: RequestSpec) -> TransportError:
        return TransportError(
            f"{spec.describe()} timed out after {self._config.timeout}s", timeout=True
        )
