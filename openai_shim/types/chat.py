"""Types for the two chat-completion wire formats the shim speaks.

Types are separated into:
- Vendor types: the OpenAI-compatible shapes presented to clients
- Native types: the backend's own chat request/response shapes

Wire shapes are ``TypedDict``s; values the shim decodes and validates itself
are frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from typing_extensions import TypedDict


# =============================================================================
# Vendor (OpenAI-compatible) Types
# =============================================================================


class ChatMessage(TypedDict):
    """A message in a chat conversation.

    Attributes:
        role: Role of the message sender ("system", "user", "assistant").
        content: Text content of the message.
    """
    role: str
    content: str


class CompletionChoice(TypedDict):
    """The single choice of a non-streaming completion.

    Attributes:
        index: Always 0.
        message: The complete assistant message.
        finish_reason: "stop" once the backend reports completion, else None.
    """
    index: int
    message: ChatMessage
    finish_reason: Optional[str]


class ChunkChoice(TypedDict):
    """The single choice of a streamed chunk."""
    index: int
    delta: ChatMessage
    finish_reason: Optional[str]


class Usage(TypedDict):
    """Token accounting for a completion."""
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


class ChatCompletion(TypedDict):
    """A non-streaming chat completion (object "chat.completion")."""
    id: str
    object: str
    created: int
    model: str
    system_fingerprint: str
    choices: list[CompletionChoice]
    usage: Usage


class ChatCompletionChunk(TypedDict):
    """One streamed chat completion fragment (object "chat.completion.chunk")."""
    id: str
    object: str
    created: int
    model: str
    system_fingerprint: str
    choices: list[ChunkChoice]


class ErrorDetail(TypedDict):
    message: str
    type: str
    param: Any
    code: Optional[str]


class ErrorResponse(TypedDict):
    error: ErrorDetail


@dataclass(frozen=True)
class SingleStop:
    """A ``stop`` field supplied as one string."""
    value: str


@dataclass(frozen=True)
class ManyStops:
    """A ``stop`` field supplied as a list; only string entries are kept."""
    values: tuple[str, ...] = ()


# Absent stop is represented by None
Stop = Union[None, SingleStop, ManyStops]


@dataclass(frozen=True)
class ResponseFormat:
    type: str = ""


@dataclass(frozen=True)
class VendorChatRequest:
    """A decoded and structurally validated vendor chat request."""

    model: str = ""
    messages: tuple[ChatMessage, ...] = ()
    stream: bool = False
    max_tokens: Optional[int] = None
    seed: Optional[int] = None
    stop: Stop = None
    temperature: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    top_p: Optional[float] = None
    response_format: Optional[ResponseFormat] = None


# =============================================================================
# Native (backend) Types
# =============================================================================


class NativeMessage(TypedDict):
    role: str
    content: str


class NativeChatRequest(TypedDict):
    """The backend's chat request body.

    Attributes:
        model: Model name, copied from the vendor request.
        messages: Conversation, copied from the vendor request.
        format: "json" to constrain output to JSON, "" for unconstrained.
        options: Free-form sampling options (stop, seed, temperature, ...).
        stream: Whether the backend should stream NDJSON fragments.
    """
    model: str
    messages: list[NativeMessage]
    format: str
    options: dict[str, Any]
    stream: bool


@dataclass(frozen=True)
class NativeChatResponse:
    """One response object (or streamed fragment) written by the backend."""

    model: str
    created_at: datetime
    message: NativeMessage
    done: bool = False
    prompt_eval_count: int = 0
    eval_count: int = 0


@dataclass(frozen=True)
class NativeStatusError:
    """An error payload written by the backend on a non-OK status."""

    error: str = ""
    status: str = ""

    def __str__(self) -> str:
        if self.status and self.error:
            return f"{self.status}: {self.error}"
        if self.status:
            return self.status
        if self.error:
            return self.error
        return "something went wrong, please see the backend server logs"
