"""API module for the shim."""

from .routes import chat_completions, native_chat

__all__ = [
    "chat_completions",
    "native_chat",
]
