"""API routes for the shim."""

from .chat import chat_completions, native_chat

__all__ = [
    "chat_completions",
    "native_chat",
]
