# src/groqai/transport/__init__.py

"""Resilient transport for the Groq API.

Every request goes through the same path:

- ``Dispatcher``: one authenticated exchange, buffered or streaming
- ``RateLimitTracker``: advisory quota state from response headers
- ``RetryPolicy``: retry or give up, and how long to wait
- ``ResilientExecutor``: admission wait plus the retry loop
- ``StreamDecoder``: server-sent events into typed records
"""

from .clock import Clock, SystemClock
from .config import ClientConfig
from .dispatcher import BufferedResponse, Dispatcher, RequestSpec, StreamingResponse
from .executor import ResilientExecutor
from .rate_limit import RateLimitState, RateLimitTracker
from .retry import GiveUp, RetryAfter, RetryDecision, RetryPolicy
from .streaming import StreamDecoder, StreamRecord

__all__ = [
    "BufferedResponse",
    "ClientConfig",
    "Clock",
    "Dispatcher",
    "GiveUp",
    "RateLimitState",
    "RateLimitTracker",
    "RequestSpec",
    "ResilientExecutor",
    "RetryAfter",
    "RetryDecision",
    "RetryPolicy",
    "StreamDecoder",
    "StreamRecord",
    "StreamingResponse",
    "SystemClock",
]
