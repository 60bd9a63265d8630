"""Core module initialization."""

from .backend import BackendResponse, NativeChatBackend, format_httpx_error
from .exceptions import (
    BackendUnavailableError,
    ClientDisconnectedError,
    ConfigurationError,
    InvalidRequestError,
    ShimError,
)
from .ids import ResponseIdGenerator
from .sse import (
    EVENT_STREAM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    SSE_DONE_FRAME,
    encode_json,
    format_sse_data,
)
from .writer import ChannelWriter, ResponseWriter

__all__ = [
    "BackendResponse",
    "BackendUnavailableError",
    "ChannelWriter",
    "ClientDisconnectedError",
    "ConfigurationError",
    "EVENT_STREAM_CONTENT_TYPE",
    "InvalidRequestError",
    "JSON_CONTENT_TYPE",
    "NativeChatBackend",
    "ResponseIdGenerator",
    "ResponseWriter",
    "SSE_DONE_FRAME",
    "ShimError",
    "encode_json",
    "format_sse_data",
]
