from typing import TYPE_CHECKING

from groqai.transport.dispatcher import RequestSpec
from groqai.types import Model, ModelList

if TYPE_CHECKING:
    from groqai.client import GroqClient


class ModelsAPI:
    def __init__(self, client: "GroqClient") -> None:
        self._client = client

    async def list(self) -> ModelList:
        return await self._client.request(RequestSpec("GET", "models"), ModelList)

    async def retrieve(self, model_id: str) -> Model:
        spec = RequestSpec("GET", f"models/{model_id}")
        return await self._client.request(spec, Model)
