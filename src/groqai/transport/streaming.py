# src/groqai/transport/streaming.py

"""Incremental decoding of server-sent-event bodies.

The body is a sequence of records separated by a blank line. Each record
carries one or more ``data:`` fields; the payload ``[DONE]`` ends the stream.
Bytes are buffered until a full separator arrives, so records split across
network reads (including split UTF-8 sequences and split separators) decode
the same way regardless of how the body was segmented.
"""

import logging
import re
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from groqai.errors import ApiError, DecodeError, GroqError, parse_error_details
from groqai.observability import names
from groqai.observability.base import MetricsHook, NoOpMetricsHook

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

SENTINEL = "[DONE]"
SEPARATORS = (b"\r\n\r\n", b"\n\n", b"\r\r")
_LONGEST_SEPARATOR = max(len(s) for s in SEPARATORS)
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class StreamRecord(Generic[T]):
    """One decoded record: either ``chunk`` or ``error`` is set."""

    chunk: T | None = None
    error: GroqError | None = None
    raw: str = ""

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the chunk or raise the record's error."""
        if self.error is not None:
            raise self.error
        assert self.chunk is not None
        return self.chunk


class RawFrame:
    """Growing byte buffer of not-yet-complete records.

    ``_cursor`` marks how far the buffer has already been searched for a
    separator, so each byte is scanned a bounded number of times.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._buffer)

    def feed(self, segment: bytes) -> None:
        self._buffer.extend(segment)

    def next_record(self) -> bytes | None:
        """Pop the next complete record, without its separator."""
        # A separator may straddle the previous search boundary.
        start = max(0, self._cursor - (_LONGEST_SEPARATOR - 1))
        found: tuple[int, int] | None = None
        for separator in SEPARATORS:
            index = self._buffer.find(separator, start)
            if index != -1 and (found is None or index < found[0]):
                found = (index, len(separator))

        if found is None:
            self._cursor = len(self._buffer)
            return None

        index, length = found
        record = bytes(self._buffer[:index])
        del self._buffer[: index + length]
        self._cursor = 0
        return record

    def drain(self) -> bytes:
        remainder = bytes(self._buffer)
        self.clear()
        return remainder

    def clear(self) -> None:
        self._buffer.clear()
        self._cursor = 0


def extract_data(record: str) -> str | None:
    """Join the ``data:`` fields of one record; ``None`` if it has none."""
    lines = []
    for line in _LINE_BREAK.split(record):
        if line.startswith("data:"):
            lines.append(line[len("data:") :].lstrip())
    if not lines:
        return None
    return "\n".join(lines)


class StreamDecoder(Generic[T]):
    """Lazy, forward-only sequence of ``StreamRecord`` over raw byte segments.

    Records are produced only when the consumer asks for the next one. A
    malformed record yields an error record and decoding continues; a transport
    failure of the underlying source is raised and ends the sequence.

    Use ``async with`` or call ``aclose()`` to stop early; this drops the
    buffer and releases the connection.
    """

    def __init__(
        self,
        segments: AsyncIterator[bytes],
        chunk_type: type[T],
        *,
        status: int = 200,
        on_close: Callable[[], Awaitable[None]] | None = None,
        metrics_hook: MetricsHook = NoOpMetricsHook(),
    ) -> None:
        self._source = segments
        self._chunk_type = chunk_type
        self._status = status
        self._on_close = on_close
        self.metrics_hook = metrics_hook
        self._frame = RawFrame()
        self._source_exhausted = False
        self._finished = False
        self._closed = False

    def __aiter__(self) -> "StreamDecoder[T]":
        return self

    async def __anext__(self) -> StreamRecord[T]:
        while not self._finished:
            raw = self._frame.next_record()
            if raw is not None:
                record = self._decode(raw)
                if record is not None:
                    return record
                continue

            if self._source_exhausted:
                tail = self._frame.drain().strip()
                self._finished = True
                await self.aclose()
                if tail:
                    record = self._decode(tail)
                    if record is not None:
                        return record
                break

            try:
                segment = await self._source.__anext__()
            except StopAsyncIteration:
                logger.debug("Stream ended without %s sentinel", SENTINEL)
                self._source_exhausted = True
                continue
            except BaseException:
                self._finished = True
                await self.aclose()
                raise
            self._frame.feed(segment)

        await self.aclose()
        raise StopAsyncIteration

    async def aclose(self) -> None:
        """Stop decoding and release the underlying connection. Idempotent."""
        self._finished = True
        if self._closed:
            return
        self._closed = True
        self._frame.clear()
        aclose = getattr(self._source, "aclose", None)
        if aclose is not None:
            await aclose()
        if self._on_close is not None:
            await self._on_close()
        logger.debug("Stream closed")

    async def __aenter__(self) -> "StreamDecoder[T]":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _decode(self, raw: bytes) -> StreamRecord[T] | None:
        """Decode one complete record. ``None`` means nothing to yield."""
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            text = raw.decode("utf-8", errors="replace")
            return self._error_record(
                DecodeError(f"Stream record is not valid UTF-8: {exc}", raw=text)
            )

        payload = extract_data(text)
        if payload is None:
            return None
        if payload.strip() == SENTINEL:
            logger.debug("Received %s sentinel", SENTINEL)
            self._finished = True
            return None

        try:
            chunk = self._chunk_type.model_validate_json(payload)
        except ValidationError as exc:
            details = parse_error_details(payload)
            if details is not None:
                error: GroqError = ApiError(
                    self._status, details.message, details=details, raw_body=payload
                )
            else:
                error = DecodeError(
                    f"Malformed stream record: {exc.error_count()} validation error(s)",
                    raw=payload,
                )
            return self._error_record(error)

        self.metrics_hook.increment(names.STREAM_RECORDS_TOTAL)
        return StreamRecord(chunk=chunk, raw=payload)

    def _error_record(self, error: GroqError) -> StreamRecord[T]:
        raw = getattr(error, "raw", None) or getattr(error, "raw_body", "")
        logger.warning("Skipping malformed stream record: %s", error)
        self.metrics_hook.increment(names.STREAM_DECODE_ERRORS_TOTAL)
        return StreamRecord(error=error, raw=raw)
