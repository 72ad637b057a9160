"""
Request Context and Logging State.

The request id lives in a ContextVar so that log lines emitted while
handling one HTTP request carry the same id, including code running in
FastAPI's threadpool. Level and configuration state are process-wide.

Environment Variables:
    - TTS_WEB_LOG_LEVEL: Log level (1-4 or name)
    - TTS_WEB_LOG_DIR: Directory for the JSONL log file
    - TTS_WEB_JSONL_FILE: JSONL file name (default tts-web.jsonl)
    - TTS_WEB_LOG_ROTATE_BYTES: Max file size before rotation
    - TTS_WEB_LOG_ROTATE_BACKUP: Number of rotated files kept
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

from .levels import LogLevel

# "-" outside request context
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Set the request id for log lines in the current context."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def _env_int(name: str, cfg: Dict[str, Any], key: str) -> None:
    raw = os.getenv(name)
    if not raw:
        return
    try:
        cfg[key] = int(raw)
    except ValueError:
        # Keep the file/default value for malformed numbers
        return


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging configuration.

    Priority (highest first): environment variables, the ``logging``
    section of the settings file, defaults.
    """
    from tts_web.core.config import load_settings

    settings = load_settings(missing_ok=True)
    cfg: Dict[str, Any] = dict(settings.raw.get("logging", {}) or {})

    if os.getenv("TTS_WEB_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_WEB_LOG_LEVEL"]
    if os.getenv("TTS_WEB_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_WEB_LOG_DIR"]
    if os.getenv("TTS_WEB_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_WEB_JSONL_FILE"]
    _env_int("TTS_WEB_LOG_ROTATE_BYTES", cfg, "rotate_max_bytes")
    _env_int("TTS_WEB_LOG_ROTATE_BACKUP", cfg, "rotate_backup_count")

    return cfg
