# src/groqai/transport/executor.py

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import TypeVar

from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
)

from groqai.errors import ApiError, DecodeError, GroqError, api_error_from_response
from groqai.observability import names
from groqai.observability.base import MetricsHook, NoOpMetricsHook

from .clock import Clock, SystemClock
from .dispatcher import BufferedResponse, Dispatcher, RequestSpec, StreamingResponse
from .rate_limit import RateLimitTracker
from .retry import RetryPolicy, parse_retry_after

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")


class ResilientExecutor:
    """Sends requests through the dispatcher with admission control and retries.

    Every request first waits out any exhausted rate-limit window, then is
    attempted until it succeeds, fails with a non-retryable error, or reaches
    the configured attempt ceiling. Response headers from every attempt are
    fed into the shared tracker.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        policy: RetryPolicy,
        tracker: RateLimitTracker,
        *,
        clock: Clock | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        self._dispatcher = dispatcher
        self._policy = policy
        self._tracker = tracker
        self._clock = clock or SystemClock()
        self.metrics_hook = metrics_hook
        self._log_retry = before_sleep_log(logger, logging.WARNING)

    async def send(self, spec: RequestSpec, response_type: type[T]) -> T:
        """Buffered request decoded into ``response_type``.

        A success body that does not match ``response_type`` raises
        ``DecodeError``; it is never retried.
        """
        response, attempts = await self._run(spec, self._attempt_buffered)
        try:
            return response_type.model_validate_json(response.body)
        except ValidationError as exc:
            logger.error(
                "Failed to decode %s response as %s: %s",
                spec.describe(),
                response_type.__name__,
                exc,
            )
            raise DecodeError(
                f"Response for {spec.describe()} does not match "
                f"{response_type.__name__}",
                raw=response.text(),
                attempts=attempts,
            ) from exc

    async def send_raw(self, spec: RequestSpec) -> BufferedResponse:
        response, _ = await self._run(spec, self._attempt_buffered)
        return response

    async def open_stream(self, spec: RequestSpec) -> StreamingResponse:
        """Open a streaming response; only establishing it is retried."""
        response, _ = await self._run(spec, self._attempt_stream)
        return response

    async def _run(
        self,
        spec: RequestSpec,
        attempt_fn: Callable[[RequestSpec], Awaitable[R]],
    ) -> tuple[R, int]:
        start = self._clock.monotonic()
        labels = {"method": spec.method}
        await self._admit(spec)

        attempts = 0
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._policy.max_attempts),
                wait=self._policy.wait,
                retry=retry_if_exception(self._policy.is_retryable),
                sleep=self._clock.sleep,
                before_sleep=self._before_sleep,
                reraise=True,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    result = await attempt_fn(spec)
        except GroqError as exc:
            exc.with_attempts(attempts)
            logger.error("Request %s failed: %s", spec.describe(), exc)
            self.metrics_hook.increment(
                names.HTTP_ERRORS_TOTAL,
                labels={**labels, "error": type(exc).__name__},
            )
            raise

        elapsed_ms = 1000 * (self._clock.monotonic() - start)
        self.metrics_hook.record_latency(
            names.HTTP_REQUEST_DURATION, elapsed_ms, labels
        )
        self.metrics_hook.increment(names.HTTP_REQUESTS_TOTAL, labels=labels)
        logger.debug(
            "Request %s succeeded after %d attempt(s) in %.0fms",
            spec.describe(),
            attempts,
            elapsed_ms,
        )
        return result, attempts

    async def _admit(self, spec: RequestSpec) -> None:
        delay = self._tracker.admission_delay(self._clock.monotonic())
        if delay <= 0:
            return
        logger.info(
            "Rate limit exhausted; holding %s for %.2fs", spec.describe(), delay
        )
        self.metrics_hook.record_latency(names.RATE_LIMIT_ADMISSION_DELAY, 1000 * delay)
        await self._clock.sleep(delay)

    async def _attempt_buffered(self, spec: RequestSpec) -> BufferedResponse:
        response = await self._dispatcher.send(spec)
        self._tracker.observe(response.headers, response.received_at)
        if not response.is_success:
            raise self._error_for(response.status, response.headers, response.body)
        return response

    async def _attempt_stream(self, spec: RequestSpec) -> StreamingResponse:
        response = await self._dispatcher.open_stream(spec)
        self._tracker.observe(response.headers, response.received_at)
        if not response.is_success:
            body = await response.aread()
            raise self._error_for(response.status, response.headers, body)
        return response

    def _error_for(
        self, status: int, headers: Mapping[str, str], body: bytes
    ) -> ApiError:
        retry_after = parse_retry_after(headers.get("retry-after"), self._clock.time())
        reset_after = None
        if status == 429:
            reset_after = self._tracker.reset_after(self._clock.monotonic())
        error = api_error_from_response(
            status, body, retry_after=retry_after, reset_after=reset_after
        )
        logger.debug("Attempt failed with status %d: %s", status, error.message)
        return error

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        self.metrics_hook.increment(names.HTTP_RETRIES_TOTAL)
        self._log_retry(retry_state)
