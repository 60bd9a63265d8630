"""Main FastAPI application for the OpenAI compatibility shim."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

import httpx
from fastapi import FastAPI

from .api.routes import chat_completions, native_chat
from .core.backend import NativeChatBackend
from .core.ids import ResponseIdGenerator
from .settings import ShimSettings, load_settings

logger = logging.getLogger("openai-shim")


def create_app(
    settings: Optional[ShimSettings] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    id_generator: Optional[Callable[[], str]] = None,
    clock: Optional[Callable[[], float]] = None,
) -> FastAPI:
    """Build the shim application.

    Args:
        settings: Runtime settings. Loaded from the config file when omitted.
        client: HTTP client used to reach the backend. When omitted one is
            created from the settings and closed on shutdown.
        id_generator: Produces the response id of each chat completion.
        clock: Current Unix time, used for streamed chunk timestamps.

    Returns:
        The configured FastAPI application instance.
    """
    if settings is None:
        settings = load_settings()

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient(timeout=httpx.Timeout(settings.timeout_seconds))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("OpenAI shim starting up...")
        logger.info("Configured bind address %s:%s", settings.host, settings.port)
        logger.info("Forwarding chat requests to %s", settings.chat_url)
        try:
            yield
        finally:
            if owns_client:
                await client.aclose()
            logger.info("OpenAI shim shut down")

    app = FastAPI(title="OpenAI Shim", lifespan=lifespan)
    app.state.settings = settings
    app.state.backend = NativeChatBackend(chat_url=settings.chat_url, client=client)
    app.state.id_generator = id_generator or ResponseIdGenerator()
    app.state.clock = clock or time.time

    app.post("/v1/chat/completions")(chat_completions)
    app.post("/api/chat")(native_chat)

    return app


__all__ = ["create_app"]
