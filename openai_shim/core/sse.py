"""SSE (Server-Sent Events) framing helpers."""

import json
from typing import Any, Mapping

SSE_DONE_FRAME = b"data: [DONE]\n\n"
EVENT_STREAM_CONTENT_TYPE = "text/event-stream"
JSON_CONTENT_TYPE = "application/json"


def encode_json(payload: Mapping[str, Any]) -> bytes:
    """Compact JSON encoding used for every payload the shim emits.

    Raises:
        ValueError: For non-finite floats, which are not valid JSON.
        TypeError: For values that are not JSON serialisable.
    """
    return json.dumps(
        payload, ensure_ascii=False, separators=(",", ":"), allow_nan=False
    ).encode("utf-8")


def format_sse_data(data: bytes) -> bytes:
    """Wrap an already-encoded payload into one ``data:`` frame."""
    return b"data: " + data + b"\n\n"
