"""
FastAPI Application Entry Point.

Creates the tts-web application: structured logging, HTTP routes, and a
static mount serving saved audio files under /audio.

Usage:
    # Run with uvicorn
    uvicorn tts_web.main:app --host 0.0.0.0 --port 3000

    # Or through the CLI (port from PORT or settings.yaml)
    tts-web --serve
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from tts_web.api.dependencies import get_app_config
from tts_web.api.routes import AUDIO_URL_PREFIX, router
from tts_web.core.config import AppConfig
from tts_web.core.logging import configure_logging, get_logger, info

_LOG = get_logger("tts-web.main")


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Configuration to use instead of the cached one from
            settings.yaml and the environment. Routes receive it through
            dependency overrides.

    Returns:
        FastAPI: Configured application instance.
    """
    configure_logging()

    app = FastAPI(title="tts-web")

    if config is not None:
        app.dependency_overrides[get_app_config] = lambda: config
    else:
        config = get_app_config()

    # The form handler writes here; StaticFiles needs the directory to exist
    output_dir = Path(config.synthesis.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    app.mount(AUDIO_URL_PREFIX, StaticFiles(directory=str(output_dir)), name="audio")

    app.include_router(router)

    return app


def run(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Serve the application with uvicorn (blocking)."""
    config = get_app_config()
    host = host or config.server.host
    port = port or config.server.port
    info(_LOG, "server_start", host=host, port=port)
    uvicorn.run(app, host=host, port=port)


# Global application instance for ASGI servers
app = create_app()
