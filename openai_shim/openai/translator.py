"""OpenAI Chat Completions -> native chat request translation.

Key mappings:
- messages, model and stream copy through unchanged
- stop (string or list) -> options.stop (list of strings)
- max_tokens -> options.num_predict
- seed -> options.seed, forcing options.temperature to 0.0
- frequency_penalty / presence_penalty -> rescaled from [-2, 2] to [0, 1]
- response_format {"type": "json_object"} -> format "json"

Reference:
- OpenAI Chat Completions: https://platform.openai.com/docs/api-reference/chat
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..core.exceptions import InvalidRequestError
from ..core.sse import encode_json
from ..types.chat import (
    ChatMessage,
    ManyStops,
    NativeChatRequest,
    ResponseFormat,
    SingleStop,
    Stop,
    VendorChatRequest,
)

logger = logging.getLogger("openai-shim")


def _type_error(param: str, expected: str, value: Any) -> InvalidRequestError:
    return InvalidRequestError(
        f"{value!r} is not of type '{expected}' - '{param}'", param=param
    )


def _optional_int(payload: Mapping[str, Any], param: str) -> Optional[int]:
    value = payload.get(param)
    if value is None:
        return None
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, int):
        raise _type_error(param, "integer", value)
    return value


def _optional_float(payload: Mapping[str, Any], param: str) -> Optional[float]:
    value = payload.get(param)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise _type_error(param, "number", value)
    return float(value)


def _decode_messages(raw: Any) -> tuple[ChatMessage, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise _type_error("messages", "array", raw)

    messages: list[ChatMessage] = []
    for index, item in enumerate(raw):
        if not isinstance(item, Mapping):
            raise _type_error(f"messages.{index}", "object", item)
        role = item.get("role")
        content = item.get("content")
        role = "" if role is None else role
        content = "" if content is None else content
        if not isinstance(role, str):
            raise _type_error(f"messages.{index}.role", "string", role)
        if not isinstance(content, str):
            raise _type_error(f"messages.{index}.content", "string", content)
        messages.append({"role": role, "content": content})
    return tuple(messages)


def _decode_stop(raw: Any) -> Stop:
    if isinstance(raw, str):
        return SingleStop(raw)
    if isinstance(raw, list):
        return ManyStops(tuple(item for item in raw if isinstance(item, str)))
    if raw is not None:
        logger.debug(f"Ignoring stop value of unsupported type {type(raw).__name__}")
    return None


def _decode_response_format(raw: Any) -> Optional[ResponseFormat]:
    if raw is None:
        return None
    if not isinstance(raw, Mapping):
        raise _type_error("response_format", "object", raw)
    format_type = raw.get("type", "")
    if format_type is None:
        format_type = ""
    if not isinstance(format_type, str):
        raise _type_error("response_format.type", "string", format_type)
    return ResponseFormat(type=format_type)


def decode_chat_request(payload: Any) -> VendorChatRequest:
    """Validate a parsed JSON body and decode it into a VendorChatRequest.

    Args:
        payload: The parsed request body.

    Returns:
        The decoded request. ``messages`` may be empty; rejecting that is left
        to the caller.

    Raises:
        InvalidRequestError: If a field has the wrong JSON type.
    """
    if not isinstance(payload, Mapping):
        raise InvalidRequestError("Request body must be a JSON object")

    model = payload.get("model")
    if model is None:
        model = ""
    if not isinstance(model, str):
        raise _type_error("model", "string", model)

    stream = payload.get("stream")
    if stream is None:
        stream = False
    if not isinstance(stream, bool):
        raise _type_error("stream", "boolean", stream)

    return VendorChatRequest(
        model=model,
        messages=_decode_messages(payload.get("messages")),
        stream=stream,
        max_tokens=_optional_int(payload, "max_tokens"),
        seed=_optional_int(payload, "seed"),
        stop=_decode_stop(payload.get("stop")),
        temperature=_optional_float(payload, "temperature"),
        frequency_penalty=_optional_float(payload, "frequency_penalty"),
        presence_penalty=_optional_float(payload, "presence_penalty"),
        top_p=_optional_float(payload, "top_p"),
        response_format=_decode_response_format(payload.get("response_format")),
    )


def _rescale_penalty(value: float) -> float:
    """Map a penalty from the [-2, 2] vendor range onto the [0, 1] native range."""
    return (value + 2.0) / 4.0


def from_request(request: VendorChatRequest) -> NativeChatRequest:
    """Translate a decoded vendor chat request into a native chat request."""
    options: dict[str, Any] = {}

    if isinstance(request.stop, SingleStop):
        options["stop"] = [request.stop.value]
    elif isinstance(request.stop, ManyStops):
        options["stop"] = list(request.stop.values)

    if request.max_tokens is not None:
        options["num_predict"] = request.max_tokens

    if request.temperature is not None:
        options["temperature"] = request.temperature

    if request.seed is not None:
        options["seed"] = request.seed
        # temperature=0 is required for reproducible outputs
        options["temperature"] = 0.0

    if request.frequency_penalty is not None:
        options["frequency_penalty"] = _rescale_penalty(request.frequency_penalty)

    if request.presence_penalty is not None:
        options["presence_penalty"] = _rescale_penalty(request.presence_penalty)

    if request.top_p is not None:
        options["top_p"] = request.top_p

    output_format = ""
    if request.response_format is not None and request.response_format.type == "json_object":
        output_format = "json"

    return {
        "model": request.model,
        "messages": [
            {"role": message["role"], "content": message["content"]}
            for message in request.messages
        ],
        "format": output_format,
        "options": options,
        "stream": request.stream,
    }


def encode_native_request(request: NativeChatRequest) -> bytes:
    """Serialise a native chat request body.

    Raises:
        ValueError: If an option holds a non-finite float.
    """
    return encode_json(request)
