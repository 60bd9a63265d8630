"""Output channels the backend handler writes its response into.

A ``ResponseWriter`` is the narrow view of an HTTP response the chat handler
is given: a status code, mutable headers and a ``write`` method returning
the number of bytes accepted. ``ChannelWriter`` is the pass-through variant;
the translating variant lives in ``openai_shim.openai.relay``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import MutableMapping, Optional

from .exceptions import ClientDisconnectedError


class ResponseWriter(ABC):
    """Write side of one HTTP response."""

    @property
    @abstractmethod
    def status_code(self) -> int:
        ...

    @property
    @abstractmethod
    def headers(self) -> MutableMapping[str, str]:
        ...

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write raw bytes, returning how many bytes were accepted."""


class ChannelWriter(ResponseWriter):
    """Buffers written bytes until the HTTP layer drains them to the client.

    A client that goes away mid-stream cancels the response body generator.
    Its cleanup closes the channel, so any write attempted after that raises
    ``ClientDisconnectedError``.
    """

    def __init__(self, status_code: int = 200, content_type: Optional[str] = None) -> None:
        self._status_code = status_code
        self._headers: dict[str, str] = {}
        if content_type:
            self._headers["content-type"] = content_type
        self._pending: list[bytes] = []
        self._closed = False
        self.bytes_written = 0

    @property
    def status_code(self) -> int:
        return self._status_code

    @property
    def headers(self) -> MutableMapping[str, str]:
        return self._headers

    @property
    def content_type(self) -> Optional[str]:
        return self._headers.get("content-type")

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, data: bytes) -> int:
        if self._closed:
            raise ClientDisconnectedError()
        if data:
            self._pending.append(bytes(data))
            self.bytes_written += len(data)
        return len(data)

    def drain(self) -> list[bytes]:
        """Return and forget everything written since the last drain."""
        pending, self._pending = self._pending, []
        return pending

    def close(self) -> None:
        self._closed = True
