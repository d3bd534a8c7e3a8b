# Client
from .client import GroqClient

# Errors
from .errors import (
    ApiError,
    ApiErrorDetails,
    DecodeError,
    GroqError,
    InvalidCredentialError,
    RateLimitError,
    TransportError,
)

# Observability
from .observability import InMemoryMetricsHook, MetricsHook, NoOpMetricsHook

# Transport
from .transport import ClientConfig, RequestSpec, StreamDecoder, StreamRecord

# Types
from .types import (
    BatchCreateRequest,
    ChatCompletionChunk,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ChatMessage,
    FineTuningCreateRequest,
    Role,
    Tool,
    TranscriptionRequest,
    TranslationRequest,
)

__all__ = [
    # Client
    "GroqClient",
    "ClientConfig",
    # Errors
    "ApiError",
    "ApiErrorDetails",
    "DecodeError",
    "GroqError",
    "InvalidCredentialError",
    "RateLimitError",
    "TransportError",
    # Observability
    "InMemoryMetricsHook",
    "MetricsHook",
    "NoOpMetricsHook",
    # Transport
    "RequestSpec",
    "StreamDecoder",
    "StreamRecord",
    # Types
    "BatchCreateRequest",
    "ChatCompletionChunk",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    "ChatMessage",
    "FineTuningCreateRequest",
    "Role",
    "Tool",
    "TranscriptionRequest",
    "TranslationRequest",
]
