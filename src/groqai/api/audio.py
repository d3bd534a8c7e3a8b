from typing import TYPE_CHECKING

from groqai.transport.dispatcher import RequestSpec
from groqai.types import (
    Transcription,
    TranscriptionRequest,
    Translation,
    TranslationRequest,
)

if TYPE_CHECKING:
    from groqai.client import GroqClient


def _multipart(path: str, request: TranslationRequest) -> RequestSpec:
    if (request.file is None) == (request.url is None):
        raise ValueError("Provide exactly one of 'file' or 'url'")

    form: dict[str, str | list[str]] = {}
    for key, value in request.to_payload().items():
        if isinstance(value, list):
            # Repeated form field, e.g. timestamp_granularities[]=word
            form[f"{key}[]"] = [str(v) for v in value]
        else:
            form[key] = str(value)

    files = None
    if request.file is not None:
        files = {"file": (request.filename, request.file, "application/octet-stream")}
    return RequestSpec("POST", path, form=form, files=files)


class AudioAPI:
    def __init__(self, client: "GroqClient") -> None:
        self._client = client

    async def transcribe(self, request: TranscriptionRequest) -> Transcription:
        spec = _multipart("audio/transcriptions", request)
        return await self._client.request(spec, Transcription)

    async def translate(self, request: TranslationRequest) -> Translation:
        spec = _multipart("audio/translations", request)
        return await self._client.request(spec, Translation)
