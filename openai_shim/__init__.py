"""openai-shim - OpenAI Chat Completions front end for a native chat backend

Accepts OpenAI-format chat requests, rewrites them into the backend's native
chat request shape, forwards them, and rewrites the backend's responses
(including its streamed fragments) back into OpenAI completions, SSE chunks
and error envelopes.

Example:
    >>> from openai_shim import create_app
    >>> import uvicorn
    >>> uvicorn.run(create_app(), host="127.0.0.1", port=8000)
"""

from .config_loader import load_config
from .core import ChannelWriter, NativeChatBackend, ResponseIdGenerator, ResponseWriter
from .logging import logger, setup_logging
from .main import create_app
from .openai import ChatCompletionRelay, decode_chat_request, from_request
from .settings import ShimSettings, load_settings

__all__ = [
    "ChannelWriter",
    "ChatCompletionRelay",
    "NativeChatBackend",
    "ResponseIdGenerator",
    "ResponseWriter",
    "ShimSettings",
    "create_app",
    "decode_chat_request",
    "from_request",
    "load_config",
    "load_settings",
    "logger",
    "setup_logging",
]
