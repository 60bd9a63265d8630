"""Native chat response -> OpenAI Chat Completions response relay.

The relay is a ``ResponseWriter`` wrapped around the real output channel. The
backend handler writes native payloads into it exactly as it would into the
channel, and every write is re-encoded before it is passed on:

Non-OK status:
    {"error": "model 'x' not found"}
    -> {"error": {"message": "model 'x' not found", "type": "api_error", ...}}

Non-streaming:
    {"model": "m", "created_at": "...", "message": {...}, "done": true, ...}
    -> {"id": "chatcmpl-1", "object": "chat.completion", ...}

Streaming, one SSE frame per fragment:
    {"model": "m", "message": {"content": "Hel"}, "done": false}
    -> data: {"id": "chatcmpl-1", "object": "chat.completion.chunk", ...}

    {"model": "m", "message": {"content": ""}, "done": true}
    -> data: {..., "choices": [{..., "finish_reason": "stop"}]}
       data: [DONE]
"""

from __future__ import annotations

import json
import logging
import re
import time
from datetime import datetime, timezone
from typing import Any, Callable, MutableMapping, Optional

from ..core.sse import (
    EVENT_STREAM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    SSE_DONE_FRAME,
    encode_json,
    format_sse_data,
)
from ..core.writer import ResponseWriter
from ..types.chat import (
    ChatCompletion,
    ChatCompletionChunk,
    NativeChatResponse,
    NativeStatusError,
)
from .errors import new_error

logger = logging.getLogger("openai-shim")

SYSTEM_FINGERPRINT = "fp_ollama"
COMPLETION_OBJECT = "chat.completion"
CHUNK_OBJECT = "chat.completion.chunk"

# RFC 3339 fractional seconds, any number of digits
_FRACTION_PATTERN = re.compile(r"\.(\d+)")


def _microseconds(match: re.Match[str]) -> str:
    # fromisoformat before 3.11 only takes 3 or 6 digits
    return "." + match.group(1)[:6].ljust(6, "0")


def _parse_timestamp(value: str) -> Optional[datetime]:
    text = _FRACTION_PATTERN.sub(_microseconds, value.strip(), count=1)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _load_object(data: bytes) -> Optional[dict[str, Any]]:
    try:
        parsed = json.loads(data)
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    return parsed


def _count(value: Any) -> Optional[int]:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def parse_chat_response(data: bytes) -> Optional[NativeChatResponse]:
    """Parse one backend write as a native chat response.

    Returns None when the payload is not a chat response, which callers treat
    as a payload to pass through untouched.
    """
    obj = _load_object(data)
    if obj is None:
        return None

    model = obj.get("model")
    created_at = obj.get("created_at")
    message = obj.get("message")
    if not isinstance(model, str) or not isinstance(created_at, str):
        return None
    if message is None:
        message = {}
    if not isinstance(message, dict):
        return None

    created = _parse_timestamp(created_at)
    if created is None:
        return None

    role = message.get("role") or ""
    content = message.get("content") or ""
    if not isinstance(role, str) or not isinstance(content, str):
        return None

    done = obj.get("done", False)
    if done is None:
        done = False
    if not isinstance(done, bool):
        return None

    prompt_eval_count = _count(obj.get("prompt_eval_count"))
    eval_count = _count(obj.get("eval_count"))
    if prompt_eval_count is None or eval_count is None:
        return None

    return NativeChatResponse(
        model=model,
        created_at=created,
        message={"role": role, "content": content},
        done=done,
        prompt_eval_count=prompt_eval_count,
        eval_count=eval_count,
    )


def parse_status_error(data: bytes) -> Optional[NativeStatusError]:
    """Parse one backend write as a native error payload."""
    obj = _load_object(data)
    if obj is None:
        return None

    error = obj.get("error") or ""
    status = obj.get("status") or ""
    if not isinstance(error, str) or not isinstance(status, str):
        return None
    return NativeStatusError(error=error, status=status)


def _finish_reason(done: bool) -> Optional[str]:
    return "stop" if done else None


def to_completion(response_id: str, response: NativeChatResponse) -> ChatCompletion:
    """Build a non-streaming completion from a native response."""
    return {
        "id": response_id,
        "object": COMPLETION_OBJECT,
        "created": int(response.created_at.timestamp()),
        "model": response.model,
        "system_fingerprint": SYSTEM_FINGERPRINT,
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": response.message["role"],
                    "content": response.message["content"],
                },
                "finish_reason": _finish_reason(response.done),
            }
        ],
        # TODO: the backend reports 0 prompt tokens when the prompt was served
        # from its cache; the vendor format expects the real count.
        "usage": {
            "prompt_tokens": response.prompt_eval_count,
            "completion_tokens": response.eval_count,
            "total_tokens": response.prompt_eval_count + response.eval_count,
        },
    }


def to_chunk(response_id: str, response: NativeChatResponse, created: int) -> ChatCompletionChunk:
    """Build one streamed chunk from a native response fragment."""
    return {
        "id": response_id,
        "object": CHUNK_OBJECT,
        "created": created,
        "model": response.model,
        "system_fingerprint": SYSTEM_FINGERPRINT,
        "choices": [
            {
                "index": 0,
                "delta": {"role": "assistant", "content": response.message["content"]},
                "finish_reason": _finish_reason(response.done),
            }
        ],
    }


class ChatCompletionRelay(ResponseWriter):
    """Re-encodes native chat writes into OpenAI-shaped writes.

    One relay serves one request. It holds the request's streaming flag and
    the response id shared by every chunk, and passes each translated write
    straight to the wrapped writer before returning.
    """

    def __init__(
        self,
        writer: ResponseWriter,
        *,
        stream: bool,
        response_id: str,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the relay.

        Args:
            writer: The output channel translated bytes are written to.
            stream: Whether the client asked for a streamed response.
            response_id: The id reported in the completion or in every chunk.
            clock: Source of the current Unix time for chunk timestamps.
        """
        self._writer = writer
        self.stream = stream
        self.response_id = response_id
        self._clock = clock

    @property
    def status_code(self) -> int:
        return self._writer.status_code

    @property
    def headers(self) -> MutableMapping[str, str]:
        return self._writer.headers

    def write(self, data: bytes) -> int:
        if self._writer.status_code != 200:
            return self._write_error(data)

        chat_response = parse_chat_response(data)
        if chat_response is None:
            logger.debug(f"{self.response_id}: passing through unrecognised payload ({len(data)} bytes)")
            return self._writer.write(data)

        if not self.stream:
            return self._write_completion(data, chat_response)
        return self._write_chunk(data, chat_response)

    def _write_error(self, data: bytes) -> int:
        status_error = parse_status_error(data)
        if status_error is None:
            # Unparseable error bodies are dropped; report them as written
            logger.debug(
                f"{self.response_id}: dropping unparseable error payload "
                f"(status={self._writer.status_code}, {len(data)} bytes)"
            )
            return len(data)

        try:
            body = encode_json(new_error(500, str(status_error)))
        except (TypeError, ValueError):
            return len(data)

        self._writer.headers["content-type"] = JSON_CONTENT_TYPE
        return self._writer.write(body)

    def _write_completion(self, data: bytes, chat_response: NativeChatResponse) -> int:
        try:
            body = encode_json(to_completion(self.response_id, chat_response))
        except (TypeError, ValueError):
            return len(data)

        self._writer.headers["content-type"] = JSON_CONTENT_TYPE
        return self._writer.write(body)

    def _write_chunk(self, data: bytes, chat_response: NativeChatResponse) -> int:
        chunk = to_chunk(self.response_id, chat_response, int(self._clock()))
        try:
            frame = format_sse_data(encode_json(chunk))
        except (TypeError, ValueError):
            return len(data)

        self._writer.headers["content-type"] = EVENT_STREAM_CONTENT_TYPE
        self._writer.write(frame)

        if chat_response.done:
            return self._writer.write(SSE_DONE_FRAME)
        return len(data)
