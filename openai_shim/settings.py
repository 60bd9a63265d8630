"""Runtime settings resolved from the config file and environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .config_loader import load_config

logger = logging.getLogger("openai-shim")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_BACKEND_URL = "http://127.0.0.1:11434"
DEFAULT_CHAT_PATH = "/api/chat"
DEFAULT_TIMEOUT = 300.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class ShimSettings:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    backend_url: str = DEFAULT_BACKEND_URL
    chat_path: str = DEFAULT_CHAT_PATH
    timeout_seconds: Optional[float] = DEFAULT_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def chat_url(self) -> str:
        base = self.backend_url.rstrip("/")
        path = self.chat_path if self.chat_path.startswith("/") else f"/{self.chat_path}"
        return f"{base}{path}"


def _get(cfg: Mapping[str, Any], *keys: str):
    cur: Any = cfg
    for key in keys:
        if not isinstance(cur, Mapping):
            return None
        cur = cur.get(key)
    return cur


def _to_int(value) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer setting value %r", value)
        return None


def _to_str(value) -> Optional[str]:
    if value is None:
        return None
    return str(value)


def _to_float(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-numeric setting value %r", value)
        return None


def settings_from_config(cfg: Mapping[str, Any]) -> ShimSettings:
    """Build settings from a parsed config mapping plus environment overrides."""
    host = _to_str(_get(cfg, "server", "host")) or DEFAULT_HOST
    port = _to_int(_get(cfg, "server", "port")) or DEFAULT_PORT
    backend_url = _to_str(_get(cfg, "backend", "base_url")) or DEFAULT_BACKEND_URL
    chat_path = _to_str(_get(cfg, "backend", "chat_path")) or DEFAULT_CHAT_PATH
    timeout_seconds = _to_float(_get(cfg, "backend", "timeout_seconds"))
    if timeout_seconds is None:
        timeout_seconds = DEFAULT_TIMEOUT
    log_level = _to_str(_get(cfg, "logging", "level")) or DEFAULT_LOG_LEVEL

    # Env overrides
    host = os.getenv("OPENAI_SHIM_HOST", host)
    port = _to_int(os.getenv("OPENAI_SHIM_PORT")) or port
    backend_url = os.getenv("OPENAI_SHIM_BACKEND_URL", backend_url)
    timeout_env = _to_float(os.getenv("OPENAI_SHIM_TIMEOUT"))
    if timeout_env is not None:
        timeout_seconds = timeout_env
    log_level = os.getenv("OPENAI_SHIM_LOG_LEVEL", log_level)

    return ShimSettings(
        host=host,
        port=port,
        backend_url=backend_url,
        chat_path=chat_path,
        # Zero or negative disables the timeout
        timeout_seconds=timeout_seconds if timeout_seconds > 0 else None,
        log_level=log_level.upper(),
    )


def load_settings(path: str | None = None) -> ShimSettings:
    """Load settings, falling back to defaults when the config file is missing."""
    cfg: dict = {}
    try:
        cfg = load_config(path)
    except RuntimeError as exc:
        logger.warning("Failed to load config; using defaults. (%s)", exc)
    return settings_from_config(cfg)
