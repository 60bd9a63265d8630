"""OpenAI Chat Completions compatibility layer.

Translates OpenAI-format chat requests into the backend's native chat
requests, and relays the backend's native responses back as OpenAI
completions, chunks and error envelopes.
"""

from .errors import error_type_for_status, new_error, openai_error_response
from .relay import (
    ChatCompletionRelay,
    parse_chat_response,
    parse_status_error,
    to_chunk,
    to_completion,
)
from .translator import decode_chat_request, encode_native_request, from_request

__all__ = [
    "ChatCompletionRelay",
    "decode_chat_request",
    "encode_native_request",
    "error_type_for_status",
    "from_request",
    "new_error",
    "openai_error_response",
    "parse_chat_response",
    "parse_status_error",
    "to_chunk",
    "to_completion",
]
