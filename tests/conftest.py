"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Generator, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from openai_shim.main import create_app
from openai_shim.settings import ShimSettings

BACKEND_URL = "http://backend.local"
FIXED_RESPONSE_ID = "chatcmpl-42"
FIXED_NOW = 1700000000.0


def ndjson(*objects: dict[str, Any]) -> bytes:
    """Encode objects the way the native backend streams them."""
    return b"".join(json.dumps(obj).encode("utf-8") + b"\n" for obj in objects)


def native_fragment(
    content: str,
    *,
    done: bool = False,
    model: str = "llama3",
    created_at: str = "2024-01-01T00:00:00.123456789Z",
    prompt_eval_count: Optional[int] = None,
    eval_count: Optional[int] = None,
) -> dict[str, Any]:
    """Build one native chat response object."""
    fragment: dict[str, Any] = {
        "model": model,
        "created_at": created_at,
        "message": {"role": "assistant", "content": content},
        "done": done,
    }
    if prompt_eval_count is not None:
        fragment["prompt_eval_count"] = prompt_eval_count
    if eval_count is not None:
        fragment["eval_count"] = eval_count
    return fragment


@dataclass
class FakeBackend:
    """A scripted native backend served through httpx.MockTransport.

    Set ``status_code``/``body`` before the request, or ``error`` to make the
    transport raise instead of answering. Received JSON bodies are recorded.
    """

    status_code: int = 200
    body: bytes = b""
    content_type: str = "application/x-ndjson"
    error: Optional[Callable[[httpx.Request], Exception]] = None
    requests: list[Any] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        try:
            self.requests.append(json.loads(request.content))
        except ValueError:
            self.requests.append(request.content)
        if self.error is not None:
            raise self.error(request)
        return httpx.Response(
            self.status_code,
            content=self.body,
            headers={"content-type": self.content_type},
        )

    def reply_json(self, payload: Any, status_code: int = 200) -> None:
        self.status_code = status_code
        self.body = json.dumps(payload).encode("utf-8")
        self.content_type = "application/json; charset=utf-8"

    def reply_stream(self, *fragments: dict[str, Any]) -> None:
        self.status_code = 200
        self.body = ndjson(*fragments)
        self.content_type = "application/x-ndjson"


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def client(fake_backend: FakeBackend) -> Generator[TestClient, None, None]:
    """TestClient for a shim wired to the fake backend with a fixed id and clock."""
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_backend.handler))
    app = create_app(
        ShimSettings(backend_url=BACKEND_URL),
        client=http_client,
        id_generator=lambda: FIXED_RESPONSE_ID,
        clock=lambda: FIXED_NOW,
    )
    with TestClient(app) as test_client:
        yield test_client


def parse_sse_frames(text: str) -> list[str]:
    """Split an SSE body into the payloads of its ``data:`` frames."""
    frames = []
    for block in text.split("\n\n"):
        if not block:
            continue
        assert block.startswith("data: "), block
        frames.append(block[len("data: "):])
    return frames
