"""
FastAPI Dependency Injection Providers.

Dependency chain:
    get_settings()              - settings.yaml + environment, cached
    └── get_app_config()        - validated AppConfig, cached
        └── get_speech_synthesizer() - process-wide SpeechSynthesizer

The environment is read once, here, at first use. Route handlers receive
everything through Depends(), which is also the seam tests override:

    app.dependency_overrides[get_speech_synthesizer] = lambda: fake
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import Depends

from tts_web.core.config import AppConfig, Settings, load_settings
from tts_web.services.synthesizer import SpeechSynthesizer, get_synthesizer


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    A missing settings file is not an error: defaults plus environment
    overrides are used.
    """
    return load_settings(missing_ok=True)


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    """Validated configuration. Raises ConfigValidationError on bad values."""
    return get_settings().get_app_config()


def get_speech_synthesizer(config: AppConfig = Depends(get_app_config)) -> SpeechSynthesizer:
    """
    Get the singleton SpeechSynthesizer built from the app config.

    Takes the config through Depends so an override of get_app_config
    (create_app(config)) also reaches the synthesizer.
    """
    return get_synthesizer(config)
