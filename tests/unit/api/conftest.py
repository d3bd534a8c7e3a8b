# tests/unit/api/conftest.py

import json
from collections.abc import Callable
from unittest.mock import MagicMock

import httpx
import pytest

from groqai.client import GroqClient

Handler = Callable[[httpx.Request], httpx.Response]


class Recorder:
    """Collects requests and answers each with ``reply``."""

    def __init__(self, reply: Handler) -> None:
        self._reply = reply
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._reply(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> dict:
        return json.loads(self.last.content)


@pytest.fixture
def make_client(config, clock) -> Callable[[Handler], tuple[GroqClient, Recorder]]:
    def factory(reply: Handler, metrics=None) -> tuple[GroqClient, Recorder]:
        recorder = Recorder(reply)
        client = GroqClient(
            config,
            transport=httpx.MockTransport(recorder),
            clock=clock,
            metrics_hook=metrics or MagicMock(),
        )
        return client, recorder

    return factory
