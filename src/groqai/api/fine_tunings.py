import logging
from typing import TYPE_CHECKING

from groqai.transport.dispatcher import RequestSpec
from groqai.types import FineTuning, FineTuningCreateRequest, FineTuningList

if TYPE_CHECKING:
    from groqai.client import GroqClient

logger = logging.getLogger(__name__)

JOBS_PATH = "fine_tuning/jobs"


class FineTuningsAPI:
    """Fine-tuning jobs: start one from an uploaded training file, then poll it."""

    def __init__(self, client: "GroqClient") -> None:
        self._client = client

    async def create(self, request: FineTuningCreateRequest) -> FineTuning:
        logger.info(
            "Creating fine-tuning job %s from %s (base=%s)",
            request.name,
            request.input_file_id,
            request.base_model,
        )
        spec = RequestSpec("POST", JOBS_PATH, json_body=request.to_payload())
        return await self._client.request(spec, FineTuning)

    async def retrieve(self, job_id: str) -> FineTuning:
        spec = RequestSpec("GET", f"{JOBS_PATH}/{job_id}")
        return await self._client.request(spec, FineTuning)

    async def list(
        self, after: str | None = None, limit: int | None = None
    ) -> FineTuningList:
        params = {}
        if after is not None:
            params["after"] = after
        if limit is not None:
            params["limit"] = str(limit)
        spec = RequestSpec("GET", JOBS_PATH, params=params or None)
        return await self._client.request(spec, FineTuningList)

    async def cancel(self, job_id: str) -> FineTuning:
        spec = RequestSpec("POST", f"{JOBS_PATH}/{job_id}/cancel", json_body={})
        return await self._client.request(spec, FineTuning)
