# tests/unit/transport/test_streaming.py

import json
from collections.abc import Iterable
from unittest.mock import AsyncMock, MagicMock

import pytest

from groqai.errors import ApiError, DecodeError, TransportError
from groqai.observability import names
from groqai.transport.streaming import RawFrame, StreamDecoder, extract_data
from groqai.types import ChatCompletionChunk


def _chunk(text: str, index: int = 0) -> str:
    return json.dumps(
        {
            "id": f"chatcmpl-{index}",
            "object": "chat.completion.chunk",
            "created": 1700000000,
            "model": "llama-3.1-8b-instant",
            "choices": [
                {"index": 0, "delta": {"content": text}, "finish_reason": None}
            ],
        },
        ensure_ascii=False,
    )


class Source:
    """Async byte source that records whether it was closed."""

    def __init__(
        self, segments: Iterable[bytes], fail_with: Exception | None = None
    ) -> None:
        self._segments = list(segments)
        self._fail_with = fail_with
        self.closed = False
        self.reads = 0

    def __aiter__(self) -> "Source":
        return self

    async def __anext__(self) -> bytes:
        if self.closed:
            raise StopAsyncIteration
        if self._segments:
            self.reads += 1
            return self._segments.pop(0)
        if self._fail_with is not None:
            raise self._fail_with
        raise StopAsyncIteration

    async def aclose(self) -> None:
        self.closed = True


def _split(body: bytes, size: int) -> list[bytes]:
    return [body[i : i + size] for i in range(0, len(body), size)]


async def _collect(decoder: StreamDecoder) -> list:
    return [record async for record in decoder]


BODY = (
    f"data: {_chunk('héllo 🌍', 0)}\r\n\r\n"
    ": keep-alive\n\n"
    f"data: {_chunk(' wörld', 1)}\n\n"
    f"data: {_chunk('!', 2)}\r\r"
    "data: [DONE]\n\n"
).encode("utf-8")


class TestRawFrame:
    def test_waits_for_full_separator(self) -> None:
        frame = RawFrame()
        frame.feed(b"data: a\n")

        assert frame.next_record() is None

        frame.feed(b"\ndata: b")

        assert frame.next_record() == b"data: a"
        assert frame.next_record() is None
        assert frame.drain() == b"data: b"
        assert len(frame) == 0

    def test_separator_split_across_feeds(self) -> None:
        frame = RawFrame()
        for piece in (b"data: a\r", b"\n", b"\r", b"\n"):
            assert frame.next_record() is None
            frame.feed(piece)

        assert frame.next_record() == b"data: a"

    def test_earliest_separator_wins(self) -> None:
        frame = RawFrame()
        frame.feed(b"data: a\n\ndata: b\r\n\r\n")

        assert frame.next_record() == b"data: a"
        assert frame.next_record() == b"data: b"


class TestExtractData:
    def test_joins_multiple_data_lines(self) -> None:
        assert extract_data("data: one\ndata: two") == "one\ntwo"

    def test_ignores_other_fields(self) -> None:
        assert extract_data("event: message\nid: 3\ndata: x") == "x"

    def test_comment_only_record_has_no_data(self) -> None:
        assert extract_data(": ping") is None


class TestStreamDecoder:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("size", [1, 7, 4096, len(BODY)])
    async def test_segmentation_does_not_change_records(self, size: int) -> None:
        """Records decode identically however the body is split."""
        decoder = StreamDecoder(Source(_split(BODY, size)), ChatCompletionChunk)

        records = await _collect(decoder)

        assert [r.unwrap().text for r in records] == ["héllo 🌍", " wörld", "!"]
        assert all(r.ok for r in records)

    @pytest.mark.asyncio
    async def test_malformed_record_does_not_end_stream(self) -> None:
        metrics = MagicMock()
        body = (
            f"data: {_chunk('a')}\n\n"
            "data: {not json}\n\n"
            f"data: {_chunk('b')}\n\n"
        ).encode()
        decoder = StreamDecoder(
            Source([body]), ChatCompletionChunk, metrics_hook=metrics
        )

        records = await _collect(decoder)

        assert len(records) == 3
        assert records[0].unwrap().text == "a"
        assert isinstance(records[1].error, DecodeError)
        assert records[1].raw == "{not json}"
        assert records[2].unwrap().text == "b"
        metrics.increment.assert_any_call(names.STREAM_DECODE_ERRORS_TOTAL)

    @pytest.mark.asyncio
    async def test_error_record_raises_on_unwrap(self) -> None:
        decoder = StreamDecoder(Source([b"data: []\n\n"]), ChatCompletionChunk)

        records = await _collect(decoder)

        with pytest.raises(DecodeError):
            records[0].unwrap()

    @pytest.mark.asyncio
    async def test_error_payload_becomes_api_error(self) -> None:
        body = b'data: {"error": {"message": "overloaded", "type": "server_error"}}\n\n'
        decoder = StreamDecoder(Source([body]), ChatCompletionChunk)

        records = await _collect(decoder)

        error = records[0].error
        assert isinstance(error, ApiError)
        assert error.message == "overloaded"
        assert error.error_type == "server_error"

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_an_error_record(self) -> None:
        body = b"data: \xff\xfe\n\n" + f"data: {_chunk('ok')}\n\n".encode()
        decoder = StreamDecoder(Source([body]), ChatCompletionChunk)

        records = await _collect(decoder)

        assert isinstance(records[0].error, DecodeError)
        assert records[1].unwrap().text == "ok"

    @pytest.mark.asyncio
    async def test_done_sentinel_stops_reading(self) -> None:
        source = Source(
            [
                f"data: {_chunk('a')}\n\ndata: [DONE]\n\n".encode(),
                f"data: {_chunk('never')}\n\n".encode(),
            ]
        )
        decoder = StreamDecoder(source, ChatCompletionChunk)

        records = await _collect(decoder)

        assert [r.unwrap().text for r in records] == ["a"]
        assert source.reads == 1
        assert source.closed

    @pytest.mark.asyncio
    async def test_trailing_record_without_separator(self) -> None:
        source = Source(
            [f"data: {_chunk('a')}\n\n".encode(), f"data: {_chunk('z')}\n".encode()]
        )
        decoder = StreamDecoder(source, ChatCompletionChunk)

        records = await _collect(decoder)

        assert [r.unwrap().text for r in records] == ["a", "z"]
        assert source.closed

    @pytest.mark.asyncio
    async def test_multiline_data_is_joined(self) -> None:
        payload = json.loads(_chunk("joined"))
        head = {k: payload[k] for k in ("id", "object", "created")}
        tail = {k: payload[k] for k in ("model", "choices")}
        first = json.dumps(head)[:-1] + ","
        second = json.dumps(tail)[1:]
        body = f"data: {first}\ndata: {second}\n\n".encode()
        decoder = StreamDecoder(Source([body]), ChatCompletionChunk)

        records = await _collect(decoder)

        assert records[0].unwrap().text == "joined"

    @pytest.mark.asyncio
    async def test_transport_failure_mid_stream_is_raised(self) -> None:
        source = Source(
            [f"data: {_chunk('a')}\n\n".encode()],
            fail_with=TransportError("connection reset"),
        )
        on_close = AsyncMock()
        decoder = StreamDecoder(source, ChatCompletionChunk, on_close=on_close)

        first = await decoder.__anext__()
        with pytest.raises(TransportError):
            await decoder.__anext__()

        assert first.unwrap().text == "a"
        assert source.closed
        on_close.assert_awaited_once()
        with pytest.raises(StopAsyncIteration):
            await decoder.__anext__()

    @pytest.mark.asyncio
    async def test_early_close_releases_source(self) -> None:
        source = Source(_split(BODY, 16))
        on_close = AsyncMock()
        decoder = StreamDecoder(source, ChatCompletionChunk, on_close=on_close)

        first = await decoder.__anext__()
        await decoder.aclose()
        await decoder.aclose()

        assert first.unwrap().text == "héllo 🌍"
        assert source.closed
        on_close.assert_awaited_once()
        with pytest.raises(StopAsyncIteration):
            await decoder.__anext__()

    @pytest.mark.asyncio
    async def test_context_manager_closes(self) -> None:
        source = Source([BODY])

        async with StreamDecoder(source, ChatCompletionChunk) as decoder:
            await decoder.__anext__()

        assert source.closed

    @pytest.mark.asyncio
    async def test_counts_decoded_records(self) -> None:
        metrics = MagicMock()
        decoder = StreamDecoder(
            Source([BODY]), ChatCompletionChunk, metrics_hook=metrics
        )

        await _collect(decoder)

        assert metrics.increment.call_count == 3
        metrics.increment.assert_called_with(names.STREAM_RECORDS_TOTAL)
