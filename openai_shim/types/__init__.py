"""Type definitions for the shim."""

from .chat import (
    ChatCompletion,
    ChatCompletionChunk,
    ChatMessage,
    ChunkChoice,
    CompletionChoice,
    ErrorDetail,
    ErrorResponse,
    ManyStops,
    NativeChatRequest,
    NativeChatResponse,
    NativeMessage,
    NativeStatusError,
    ResponseFormat,
    SingleStop,
    Stop,
    Usage,
    VendorChatRequest,
)

__all__ = [
    "ChatCompletion",
    "ChatCompletionChunk",
    "ChatMessage",
    "ChunkChoice",
    "CompletionChoice",
    "ErrorDetail",
    "ErrorResponse",
    "ManyStops",
    "NativeChatRequest",
    "NativeChatResponse",
    "NativeMessage",
    "NativeStatusError",
    "ResponseFormat",
    "SingleStop",
    "Stop",
    "Usage",
    "VendorChatRequest",
]
