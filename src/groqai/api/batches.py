from typing import TYPE_CHECKING

from groqai.transport.dispatcher import RequestSpec
from groqai.types import Batch, BatchCreateRequest, BatchList

if TYPE_CHECKING:
    from groqai.client import GroqClient


class BatchesAPI:
    def __init__(self, client: "GroqClient") -> None:
        self._client = client

    async def create(self, request: BatchCreateRequest) -> Batch:
        spec = RequestSpec("POST", "batches", json_body=request.to_payload())
        return await self._client.request(spec, Batch)

    async def retrieve(self, batch_id: str) -> Batch:
        spec = RequestSpec("GET", f"batches/{batch_id}")
        return await self._client.request(spec, Batch)

    async def list(
        self, after: str | None = None, limit: int | None = None
    ) -> BatchList:
        params = {}
        if after is not None:
            params["after"] = after
        if limit is not None:
            params["limit"] = str(limit)
        spec = RequestSpec("GET", "batches", params=params or None)
        return await self._client.request(spec, BatchList)

    async def cancel(self, batch_id: str) -> Batch:
        spec = RequestSpec("POST", f"batches/{batch_id}/cancel", json_body={})
        return await self._client.request(spec, Batch)
