# src/groqai/api/files.py

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from groqai.transport.dispatcher import RequestSpec
from groqai.types import FileDeletion, FileList, FileObject

if TYPE_CHECKING:
    from groqai.client import GroqClient

logger = logging.getLogger(__name__)

JSONL_CONTENT_TYPE = "application/jsonl"


def validate_jsonl(content: bytes, source: str = "<bytes>") -> None:
    """Raise ``ValueError`` unless every non-blank line is a JSON document."""
    for number, line in enumerate(content.decode("utf-8").splitlines(), start=1):
        if not line.strip():
            continue
        try:
            json.loads(line)
        except ValueError as exc:
            raise ValueError(
                f"Invalid JSONL in {source} at line {number}: {exc}"
            ) from exc


class FilesAPI:
    """Upload and manage files used by batch jobs."""

    def __init__(self, client: "GroqClient") -> None:
        self._client = client

    async def create(
        self,
        file: str | Path | bytes,
        *,
        purpose: str = "batch",
        filename: str | None = None,
    ) -> FileObject:
        """Upload a JSONL file given as a path or as raw bytes."""
        if isinstance(file, bytes):
            content = file
            filename = filename or "upload.jsonl"
        else:
            path = Path(file)
            if path.suffix != ".jsonl":
                raise ValueError(f"File must have .jsonl extension: {path}")
            content = path.read_bytes()
            filename = filename or path.name

        validate_jsonl(content, filename)
        logger.info(
            "Uploading %s (%d bytes, purpose=%s)", filename, len(content), purpose
        )
        spec = RequestSpec(
            "POST",
            "files",
            form={"purpose": purpose},
            files={"file": (filename, content, JSONL_CONTENT_TYPE)},
        )
        return await self._client.request(spec, FileObject)

    async def list(self) -> FileList:
        return await self._client.request(RequestSpec("GET", "files"), FileList)

    async def retrieve(self, file_id: str) -> FileObject:
        spec = RequestSpec("GET", f"files/{file_id}")
        return await self._client.request(spec, FileObject)

    async def delete(self, file_id: str) -> FileDeletion:
        return await self._client.request(
            RequestSpec("DELETE", f"files/{file_id}"), FileDeletion
        )
