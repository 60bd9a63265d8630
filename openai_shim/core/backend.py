"""Client for the native chat backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import httpx

from .exceptions import BackendUnavailableError

logger = logging.getLogger("openai-shim")


def format_httpx_error(exc: httpx.HTTPError, url: Optional[str] = None) -> str:
    """Produce a detailed, user-facing description of an httpx error."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)

    try:
        request = exc.request
    except RuntimeError:
        request = None
    if request is not None:
        parts.append(f"request={request.method} {request.url}")
    elif url:
        parts.append(f"url={url}")

    return "; ".join(parts)


class BackendResponse:
    """An open backend response, read as the sequence of writes the backend made."""

    def __init__(self, response: httpx.Response, stream: bool) -> None:
        self._response = response
        self.stream = stream

    @property
    def status_code(self) -> int:
        return self._response.status_code

    @property
    def content_type(self) -> Optional[str]:
        return self._response.headers.get("content-type")

    async def iter_writes(self) -> AsyncIterator[bytes]:
        """Yield the backend's response in the units it was written.

        Errors and non-streaming replies are a single JSON document. Streamed
        replies are newline-delimited JSON, one fragment per line.
        """
        if self.status_code != 200 or not self.stream:
            data = await self._response.aread()
            if data:
                yield data
            return

        async for line in self._response.aiter_lines():
            if not line.strip():
                continue
            yield f"{line}\n".encode("utf-8")

    async def aclose(self) -> None:
        await self._response.aclose()


@dataclass
class NativeChatBackend:
    """Posts native chat requests to the backend over a shared HTTP client."""

    chat_url: str
    client: httpx.AsyncClient

    async def send_chat(self, body: bytes, *, stream: bool) -> BackendResponse:
        """Send a native chat request and return the still-open response.

        Raises:
            BackendUnavailableError: If the request could not be sent.
        """
        request = self.client.build_request(
            "POST",
            self.chat_url,
            headers={"Content-Type": "application/json"},
            content=body,
        )
        logger.debug(f"Sending chat request to {self.chat_url}, {len(body)} bytes, stream={stream}")
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as exc:
            detail = format_httpx_error(exc, self.chat_url)
            logger.warning(f"Backend connection failed: {detail}")
            raise BackendUnavailableError(detail) from exc

        logger.debug(f"Backend responded with status {response.status_code}")
        return BackendResponse(response, stream)
