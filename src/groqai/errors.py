# src/groqai/errors.py

"""Exception hierarchy for groqai.

Every failure surfaced by the client is a ``GroqError``:

- ``InvalidCredentialError``: the API key was rejected before any network call.
- ``TransportError``: connect, TLS, protocol or timeout failure. Retryable.
- ``ApiError``: the server answered with a non-2xx status.
- ``RateLimitError``: an ``ApiError`` for HTTP 429.
- ``DecodeError``: a body or a streamed record did not match the expected shape.

``ApiError`` is the catch-all for statuses and error kinds the client does not
know about. Callers that need more than the class can inspect ``status`` and
``details``.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

logger = logging.getLogger(__name__)


class ApiErrorDetails(BaseModel):
    """Structured ``{"error": {...}}`` body returned by the API."""

    model_config = ConfigDict(extra="allow")

    message: str
    type: str | None = None
    code: str | None = None
    param: str | None = None


class GroqError(Exception):
    """Base class for all groqai errors."""

    def __init__(self, message: str, *, attempts: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.attempts = attempts

    def with_attempts(self, attempts: int) -> "GroqError":
        """Record how many attempts were made before this error became final."""
        self.attempts = attempts
        return self

    def __str__(self) -> str:
        if self.attempts is None:
            return self.message
        suffix = "attempt" if self.attempts == 1 else "attempts"
        return f"{self.message} (after {self.attempts} {suffix})"


class InvalidCredentialError(GroqError):
    pass


class TransportError(GroqError):
    """The exchange failed before a complete HTTP response was received."""

    def __init__(
        self,
        message: str,
        *,
        timeout: bool = False,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message, attempts=attempts)
        self.timeout = timeout


class DecodeError(GroqError):
    """A payload could not be parsed into the expected type."""

    def __init__(self, message: str, *, raw: str, attempts: int | None = None) -> None:
        super().__init__(message, attempts=attempts)
        self.raw = raw


class ApiError(GroqError):
    """The server answered with a non-success status."""

    def __init__(
        self,
        status: int,
        message: str,
        *,
        details: ApiErrorDetails | None = None,
        raw_body: str = "",
        retry_after: float | None = None,
        attempts: int | None = None,
    ) -> None:
        super().__init__(message, attempts=attempts)
        self.status = status
        self.details = details
        self.raw_body = raw_body
        self.retry_after = retry_after

    @property
    def error_type(self) -> str | None:
        return self.details.type if self.details else None

    @property
    def code(self) -> str | None:
        return self.details.code if self.details else None

    @property
    def is_rate_limit(self) -> bool:
        return self.status == 429 or self.error_type == "rate_limit_exceeded"

    @property
    def is_authentication_error(self) -> bool:
        return self.status in (401, 403)

    def __str__(self) -> str:
        text = f"API request failed with status {self.status}: {self.message}"
        if self.error_type:
            text += f" (type={self.error_type})"
        if self.attempts is not None:
            suffix = "attempt" if self.attempts == 1 else "attempts"
            text += f" (after {self.attempts} {suffix})"
        return text


class RateLimitError(ApiError):
    """HTTP 429.

    ``reset_after`` is the last known wait, in seconds, until quota resets.
    """

    def __init__(
        self,
        status: int,
        message: str,
        *,
        reset_after: float | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(status, message, **kwargs)
        self.reset_after = reset_after


def parse_error_details(body: str) -> ApiErrorDetails | None:
    """Extract ``ApiErrorDetails`` from a raw error body, if it has one."""
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("error"), dict):
        return None
    try:
        return ApiErrorDetails.model_validate(payload["error"])
    except ValidationError:
        logger.debug("Unrecognized error body shape: %s", body)
        return None


def api_error_from_response(
    status: int,
    body: bytes,
    *,
    retry_after: float | None = None,
    reset_after: float | None = None,
) -> ApiError:
    """Build the typed error for a non-success response."""
    text = body.decode("utf-8", errors="replace")
    details = parse_error_details(text)
    message = details.message if details else (text.strip() or f"HTTP {status}")

    if status == 429:
        return RateLimitError(
            status,
            message,
            details=details,
            raw_body=text,
            retry_after=retry_after,
            reset_after=reset_after if reset_after is not None else retry_after,
        )
    return ApiError(
        status,
        message,
        details=details,
        raw_body=text,
        retry_after=retry_after,
    )
