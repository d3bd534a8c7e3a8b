# tests/unit/api/test_files.py

from pathlib import Path

import httpx
import pytest

from groqai.api.files import validate_jsonl

FILE = {
    "id": "file_01",
    "object": "file",
    "bytes": 42,
    "created_at": 1700000000,
    "filename": "batch.jsonl",
    "purpose": "batch",
}

LINES = (
    b'{"custom_id": "1", "method": "POST"}\n\n'
    b'{"custom_id": "2", "method": "POST"}\n'
)


class TestValidateJsonl:
    def test_accepts_blank_lines(self) -> None:
        validate_jsonl(LINES)

    def test_reports_line_number(self) -> None:
        with pytest.raises(ValueError, match="batch.jsonl at line 2"):
            validate_jsonl(b'{"a": 1}\n{"a": \n', "batch.jsonl")


class TestFilesAPI:
    @pytest.mark.asyncio
    async def test_upload_path(self, make_client, tmp_path: Path) -> None:
        path = tmp_path / "batch.jsonl"
        path.write_bytes(LINES)
        client, recorder = make_client(lambda r: httpx.Response(200, json=FILE))

        uploaded = await client.files.create(path)

        assert uploaded.id == "file_01"
        body = recorder.last.content
        assert recorder.last.url.path.endswith("/files")
        assert b'filename="batch.jsonl"' in body
        assert b"application/jsonl" in body
        assert b'name="purpose"' in body

    @pytest.mark.asyncio
    async def test_upload_bytes(self, make_client) -> None:
        client, recorder = make_client(lambda r: httpx.Response(200, json=FILE))

        await client.files.create(LINES, filename="mine.jsonl")

        assert b'filename="mine.jsonl"' in recorder.last.content

    @pytest.mark.asyncio
    async def test_rejects_wrong_extension(self, make_client, tmp_path: Path) -> None:
        path = tmp_path / "batch.json"
        path.write_bytes(LINES)
        client, recorder = make_client(lambda r: httpx.Response(200, json=FILE))

        with pytest.raises(ValueError, match=".jsonl"):
            await client.files.create(path)

        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_rejects_invalid_content(self, make_client) -> None:
        client, recorder = make_client(lambda r: httpx.Response(200, json=FILE))

        with pytest.raises(ValueError, match="line 1"):
            await client.files.create(b"not json\n")

        assert recorder.requests == []

    @pytest.mark.asyncio
    async def test_list_retrieve_delete(self, make_client) -> None:
        def reply(request: httpx.Request) -> httpx.Response:
            if request.method == "DELETE":
                return httpx.Response(200, json={"id": "file_01", "deleted": True})
            if request.url.path.endswith("/files"):
                return httpx.Response(200, json={"object": "list", "data": [FILE]})
            return httpx.Response(200, json=FILE)

        client, recorder = make_client(reply)

        listed = await client.files.list()
        retrieved = await client.files.retrieve("file_01")
        deleted = await client.files.delete("file_01")

        assert [f.id for f in listed.data] == ["file_01"]
        assert retrieved.filename == "batch.jsonl"
        assert deleted.deleted
        assert recorder.last.url.path.endswith("/files/file_01")
