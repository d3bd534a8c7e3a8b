# src/groqai/types.py

"""Request and response shapes for the Groq API.

Response models accept unknown fields so newer server versions keep decoding.
Request models serialize with ``to_payload()``, which drops unset options.
"""

from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """Message role in a conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class _Request(BaseModel):
    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class _Response(BaseModel):
    model_config = ConfigDict(extra="allow")


# ============================================================================
# Chat messages
# ============================================================================


class ImageUrl(BaseModel):
    url: str
    detail: str | None = None


class TextPart(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ImagePart(BaseModel):
    type: Literal["image_url"] = "image_url"
    image_url: ImageUrl


MessagePart = TextPart | ImagePart


class FunctionCall(BaseModel):
    name: str
    arguments: str


class ToolCall(BaseModel):
    id: str
    type: str = "function"
    function: FunctionCall


class ChatMessage(BaseModel):
    """A single message in the conversation."""

    role: Role
    content: str | list[MessagePart] | None = None
    name: str | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None  # Required when role=TOOL

    @classmethod
    def text(cls, role: Role, content: str) -> "ChatMessage":
        return cls(role=role, content=content)

    @classmethod
    def tool_response(cls, tool_call_id: str, content: str) -> "ChatMessage":
        return cls(role=Role.TOOL, content=content, tool_call_id=tool_call_id)


# ============================================================================
# Chat completions
# ============================================================================


class FunctionDef(BaseModel):
    name: str
    description: str | None = None
    parameters: dict[str, Any] = Field(default_factory=dict)


class Tool(BaseModel):
    type: str = "function"
    function: FunctionDef


class ResponseFormat(BaseModel):
    type: str
    json_schema: dict[str, Any] | None = None


class StreamOptions(BaseModel):
    include_usage: bool | None = None


class ChatCompletionRequest(_Request):
    messages: list[ChatMessage]
    model: str
    temperature: float | None = None
    top_p: float | None = None
    max_completion_tokens: int | None = None
    tools: list[Tool] | None = None
    tool_choice: str | dict[str, Any] | None = None
    parallel_tool_calls: bool | None = None
    response_format: ResponseFormat | None = None
    stop: str | list[str] | None = None
    seed: int | None = None
    n: int | None = None
    frequency_penalty: float | None = None
    presence_penalty: float | None = None
    logprobs: bool | None = None
    top_logprobs: int | None = None
    logit_bias: dict[str, float] | None = None
    reasoning_effort: str | None = None
    service_tier: str | None = None
    user: str | None = None
    stream: bool | None = None
    stream_options: StreamOptions | None = None


class Usage(_Response):
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class Choice(_Response):
    index: int
    message: ChatMessage
    finish_reason: str | None = None


class ChatCompletionResponse(_Response):
    id: str
    object: str
    created: int
    model: str
    choices: list[Choice]
    usage: Usage | None = None
    system_fingerprint: str | None = None


class MessageDelta(_Response):
    role: Role | None = None
    content: str | None = None
    tool_calls: list[dict[str, Any]] | None = None


class ChoiceChunk(_Response):
    index: int
    delta: MessageDelta
    finish_reason: str | None = None


class ChatCompletionChunk(_Response):
    id: str
    object: str
    created: int
    model: str
    choices: list[ChoiceChunk]
    system_fingerprint: str | None = None

    @property
    def text(self) -> str:
        """Concatenated delta content of all choices in this chunk."""
        return "".join(c.delta.content or "" for c in self.choices)


# ============================================================================
# Models
# ============================================================================


class Model(_Response):
    id: str
    object: str = "model"
    created: int | None = None
    owned_by: str | None = None
    active: bool | None = None
    context_window: int | None = None


class ModelList(_Response):
    object: str = "list"
    data: list[Model]


# ============================================================================
# Files
# ============================================================================


class FileObject(_Response):
    id: str
    object: str = "file"
    bytes: int
    created_at: int
    filename: str
    purpose: str


class FileList(_Response):
    object: str = "list"
    data: list[FileObject]


class FileDeletion(_Response):
    id: str
    object: str = "file"
    deleted: bool


# ============================================================================
# Batches
# ============================================================================


class BatchCreateRequest(_Request):
    input_file_id: str
    endpoint: str = "/v1/chat/completions"
    completion_window: str = "24h"
    metadata: dict[str, Any] | None = None


class BatchRequestCounts(_Response):
    total: int = 0
    completed: int = 0
    failed: int = 0


class Batch(_Response):
    id: str
    object: str = "batch"
    endpoint: str
    input_file_id: str
    completion_window: str
    status: str
    created_at: int
    output_file_id: str | None = None
    error_file_id: str | None = None
    errors: Any = None
    expires_at: int | None = None
    completed_at: int | None = None
    failed_at: int | None = None
    cancelled_at: int | None = None
    request_counts: BatchRequestCounts | None = None
    metadata: dict[str, Any] | None = None


class BatchList(_Response):
    object: str = "list"
    data: list[Batch]
    first_id: str | None = None
    last_id: str | None = None
    has_more: bool = False


# ============================================================================
# Fine-tuning
# ============================================================================


class FineTuningCreateRequest(_Request):
    base_model: str
    input_file_id: str
    name: str
    type: str = "supervised"


class FineTuning(_Response):
    id: str
    object: str = "fine_tuning.job"
    name: str | None = None
    base_model: str
    type: str | None = None
    input_file_id: str
    created_at: int
    status: str
    fine_tuned_model: str | None = None
    training_progress: Any = None
    error: Any = None


class FineTuningList(_Response):
    object: str = "list"
    data: list[FineTuning]
    has_more: bool = False


# ============================================================================
# Audio
# ============================================================================


class TranslationRequest(_Request):
    """Audio is given either as ``file`` (bytes, with ``filename``) or as ``url``."""

    model: str = "whisper-large-v3"
    file: bytes | None = Field(default=None, exclude=True)
    filename: str = Field(default="audio.mp3", exclude=True)
    url: str | None = None
    prompt: str | None = None
    response_format: str | None = None
    temperature: float | None = None

    @classmethod
    def from_path(cls, path: str | Path, **kwargs: Any):
        """Build a request that uploads the audio file at ``path``."""
        path = Path(path)
        return cls(file=path.read_bytes(), filename=path.name, **kwargs)


class TranscriptionRequest(TranslationRequest):
    language: str | None = None
    timestamp_granularities: list[str] | None = None


class Transcription(_Response):
    text: str


class Translation(_Response):
    text: str
