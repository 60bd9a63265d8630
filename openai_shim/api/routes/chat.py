"""Chat endpoints: the OpenAI-compatible surface and the native pass-through."""

import json
import logging
import time
import uuid
from typing import AsyncIterator

import httpx
from fastapi import Request, Response
from fastapi.responses import StreamingResponse
from starlette.requests import ClientDisconnect

from ...core.backend import BackendResponse, NativeChatBackend
from ...core.exceptions import BackendUnavailableError, InvalidRequestError
from ...core.writer import ChannelWriter, ResponseWriter
from ...openai import (
    ChatCompletionRelay,
    decode_chat_request,
    encode_native_request,
    from_request,
    openai_error_response,
)

logger = logging.getLogger("openai-shim")


async def _relay_backend_response(
    upstream: BackendResponse,
    channel: ChannelWriter,
    writer: ResponseWriter,
    *,
    req_id: str,
    start_time: float,
) -> Response:
    """Feed every backend write through ``writer`` and serve what lands in ``channel``.

    The first write is relayed before the response starts so that the status
    code and content type it settles are the ones sent to the client.
    """
    writes = upstream.iter_writes()
    try:
        first = await writes.__anext__()
    except StopAsyncIteration:
        first = None
    except httpx.HTTPError as exc:
        logger.error(f"[{req_id}] Failed reading backend response: {exc}")
        await writes.aclose()
        await upstream.aclose()
        return openai_error_response(502, f"failed reading backend response: {exc}")

    if first is not None:
        writer.write(first)

    if not (upstream.stream and upstream.status_code == 200):
        try:
            async for data in writes:
                writer.write(data)
        finally:
            channel.close()
            await writes.aclose()
            await upstream.aclose()
        elapsed = time.perf_counter() - start_time
        logger.info(
            f"[{req_id}] Completed response, status={channel.status_code}, "
            f"{channel.bytes_written} bytes, took {elapsed:.3f}s"
        )
        return Response(
            content=b"".join(channel.drain()),
            status_code=channel.status_code,
            headers=dict(channel.headers),
        )

    async def stream_body() -> AsyncIterator[bytes]:
        try:
            for chunk in channel.drain():
                yield chunk
            async for data in writes:
                writer.write(data)
                for chunk in channel.drain():
                    yield chunk
        except httpx.HTTPError as exc:
            logger.error(f"[{req_id}] Backend stream failed: {exc}")
        finally:
            channel.close()
            await writes.aclose()
            await upstream.aclose()
            elapsed = time.perf_counter() - start_time
            logger.info(
                f"[{req_id}] Completed streaming response, "
                f"{channel.bytes_written} bytes, took {elapsed:.3f}s"
            )

    logger.info(f"[{req_id}] Starting streaming response")
    return StreamingResponse(
        stream_body(),
        status_code=channel.status_code,
        headers=dict(channel.headers),
    )


async def chat_completions(request: Request) -> Response:
    """POST /v1/chat/completions - OpenAI Chat Completions compatible endpoint."""
    req_id = uuid.uuid4().hex[:8]
    start_time = time.perf_counter()
    client_host = request.client.host if request.client else "unknown"

    try:
        body = await request.body()
    except ClientDisconnect:
        logger.warning(f"[{req_id}] Client {client_host} disconnected while sending the body")
        return Response(status_code=499)  # Client Closed Request

    logger.info(f"[{req_id}] Chat completion request from {client_host}, {len(body)} bytes")

    try:
        payload = json.loads(body)
    except ValueError as exc:
        logger.info(f"[{req_id}] Rejecting malformed JSON: {exc}")
        return openai_error_response(400, str(exc))

    try:
        chat_request = decode_chat_request(payload)
    except InvalidRequestError as exc:
        logger.info(f"[{req_id}] Rejecting invalid request: {exc.message}")
        return openai_error_response(400, exc.message)

    if not chat_request.messages:
        return openai_error_response(400, "[] is too short - 'messages'")

    native_request = from_request(chat_request)
    try:
        native_body = encode_native_request(native_request)
    except (TypeError, ValueError) as exc:
        logger.error(f"[{req_id}] Failed to encode translated request: {exc}")
        return openai_error_response(500, str(exc))

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            f"[{req_id}] Translated to native format: model={native_request['model']}, "
            f"messages_count={len(native_request['messages'])}, "
            f"options={sorted(native_request['options'])}, "
            f"format={native_request['format']!r}, stream={native_request['stream']}"
        )

    backend: NativeChatBackend = request.app.state.backend
    try:
        upstream = await backend.send_chat(native_body, stream=chat_request.stream)
    except BackendUnavailableError as exc:
        return openai_error_response(502, exc.message)

    channel = ChannelWriter(upstream.status_code, upstream.content_type)
    relay = ChatCompletionRelay(
        channel,
        stream=chat_request.stream,
        response_id=request.app.state.id_generator(),
        clock=request.app.state.clock,
    )
    return await _relay_backend_response(
        upstream, channel, relay, req_id=req_id, start_time=start_time
    )


async def native_chat(request: Request) -> Response:
    """POST /api/chat - forwards native chat requests to the backend unchanged."""
    req_id = uuid.uuid4().hex[:8]
    start_time = time.perf_counter()

    try:
        body = await request.body()
    except ClientDisconnect:
        logger.warning(f"[{req_id}] Client disconnected while sending the body")
        return Response(status_code=499)

    # The backend streams unless told otherwise
    stream = True
    try:
        payload = json.loads(body)
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("stream") is False:
        stream = False

    logger.info(f"[{req_id}] Native chat request, {len(body)} bytes, stream={stream}")

    backend: NativeChatBackend = request.app.state.backend
    try:
        upstream = await backend.send_chat(body, stream=stream)
    except BackendUnavailableError as exc:
        return Response(
            content=json.dumps({"error": exc.message}),
            status_code=502,
            media_type="application/json",
        )

    channel = ChannelWriter(upstream.status_code, upstream.content_type)
    return await _relay_backend_response(
        upstream, channel, channel, req_id=req_id, start_time=start_time
    )
