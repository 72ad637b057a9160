"""
Configuration Management for tts-web.

Configuration Hierarchy (highest priority first):
    1. Environment variables (OPENAI_API_KEY, PORT, ...)
    2. YAML config file (config/settings.yaml, or $TTS_WEB_SETTINGS)
    3. Defaults class values

The environment is read once, by load_settings() at process startup. The
resulting values are passed explicitly to the components that need them;
nothing below the config layer looks at os.environ for these settings.

Example settings.yaml:
    server:
      host: 0.0.0.0
      port: 3000

    openai:
      timeout_s: 60

    synthesis:
      output_dir: ./public/audio
      file_name: tts-output
      suffix_type: uuid

    logging:
      level: 2  # NORMAL
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional
import os
import yaml

from tts_web.speech.options import (
    ALLOWED_FORMATS,
    ALLOWED_MODELS,
    ALLOWED_SUFFIX_TYPES,
    ALLOWED_VOICES,
)


class ConfigValidationError(Exception):
    """Raised when a configuration value is out of bounds or not allowed."""
    pass


class Defaults:
    """Centralized default configuration values."""

    # ─────────────────────────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────────────────────────
    SERVER_HOST = "0.0.0.0"
    SERVER_PORT = 3000

    # ─────────────────────────────────────────────────────────────────────────
    # OpenAI client
    # ─────────────────────────────────────────────────────────────────────────
    OPENAI_TIMEOUT_S = 60.0

    # ─────────────────────────────────────────────────────────────────────────
    # Form handler synthesis defaults
    # ─────────────────────────────────────────────────────────────────────────
    SYNTHESIS_OUTPUT_DIR = "./public/audio"  # Served under /audio
    SYNTHESIS_FILE_NAME = "tts-output"
    SYNTHESIS_MODEL = "tts-1"
    SYNTHESIS_VOICE = "nova"
    SYNTHESIS_FORMAT = "mp3"
    SYNTHESIS_SUFFIX_TYPE = "uuid"

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 80
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG


@dataclass
class ServerConfig:
    """HTTP listener settings."""
    host: str = Defaults.SERVER_HOST
    port: int = Defaults.SERVER_PORT


@dataclass
class OpenAIConfig:
    """
    Speech API client settings.

    api_key is the process-wide fallback used when a request carries no key.
    """
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    timeout_s: float = Defaults.OPENAI_TIMEOUT_S


@dataclass
class SynthesisConfig:
    """Parameters the form handler does not take from the user."""
    output_dir: str = Defaults.SYNTHESIS_OUTPUT_DIR
    file_name: str = Defaults.SYNTHESIS_FILE_NAME
    model: str = Defaults.SYNTHESIS_MODEL
    voice: str = Defaults.SYNTHESIS_VOICE
    response_format: str = Defaults.SYNTHESIS_FORMAT
    suffix_type: str = Defaults.SYNTHESIS_SUFFIX_TYPE


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, failures only
        2 = NORMAL: Request lifecycle (default)
        3 = VERBOSE: Per-stage timing
        4 = DEBUG: Resolved paths, client calls
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class AppConfig:
    """
    Validated application configuration.

    Usage:
        settings = load_settings("config/settings.yaml")
        config = AppConfig.from_settings(settings)
        print(config.server.port)
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "AppConfig":
        """
        Create AppConfig from Settings with validation.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        # ─────────────────────────────────────────────────────────────────────
        # Server
        # ─────────────────────────────────────────────────────────────────────
        server_raw = raw.get("server", {}) or {}
        server = ServerConfig(
            host=str(server_raw.get("host", Defaults.SERVER_HOST)),
            port=cls._as_int("server.port", server_raw.get("port", Defaults.SERVER_PORT)),
        )
        cls._validate_range("server.port", server.port, 1, 65535)

        # ─────────────────────────────────────────────────────────────────────
        # OpenAI
        # ─────────────────────────────────────────────────────────────────────
        openai_raw = raw.get("openai", {}) or {}
        openai_cfg = OpenAIConfig(
            api_key=openai_raw.get("api_key") or None,
            base_url=openai_raw.get("base_url") or None,
            timeout_s=float(openai_raw.get("timeout_s", Defaults.OPENAI_TIMEOUT_S)),
        )
        cls._validate_positive("openai.timeout_s", openai_cfg.timeout_s)

        # ─────────────────────────────────────────────────────────────────────
        # Synthesis defaults
        # ─────────────────────────────────────────────────────────────────────
        synthesis_raw = raw.get("synthesis", {}) or {}
        synthesis = SynthesisConfig(
            output_dir=str(synthesis_raw.get("output_dir", Defaults.SYNTHESIS_OUTPUT_DIR)),
            file_name=str(synthesis_raw.get("file_name", Defaults.SYNTHESIS_FILE_NAME)),
            model=str(synthesis_raw.get("model", Defaults.SYNTHESIS_MODEL)),
            voice=str(synthesis_raw.get("voice", Defaults.SYNTHESIS_VOICE)),
            response_format=str(synthesis_raw.get("response_format", Defaults.SYNTHESIS_FORMAT)),
            suffix_type=str(synthesis_raw.get("suffix_type", Defaults.SYNTHESIS_SUFFIX_TYPE)),
        )
        cls._validate_choice("synthesis.model", synthesis.model, ALLOWED_MODELS)
        cls._validate_choice("synthesis.voice", synthesis.voice, ALLOWED_VOICES)
        cls._validate_choice("synthesis.response_format", synthesis.response_format, ALLOWED_FORMATS)
        cls._validate_choice("synthesis.suffix_type", synthesis.suffix_type, ALLOWED_SUFFIX_TYPES)

        # ─────────────────────────────────────────────────────────────────────
        # Logging
        # ─────────────────────────────────────────────────────────────────────
        logging_raw = raw.get("logging", {}) or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = int(log_level_raw)

        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
            level=log_level,
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        return cls(
            server=server,
            openai=openai_cfg,
            synthesis=synthesis,
            logging=logging_cfg,
        )

    @staticmethod
    def _as_int(name: str, value: Any) -> int:
        """Coerce to int, reporting the setting name on failure."""
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigValidationError(f"{name} must be an integer, got {value!r}")

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        """Validate that a value is positive (> 0)."""
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        """Validate that a value is non-negative (>= 0)."""
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        """Validate that a value is within a range [min_val, max_val]."""
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")

    @staticmethod
    def _validate_choice(name: str, value: str, allowed: tuple[str, ...]) -> None:
        """Validate that a value is one of the allowed options."""
        if value not in allowed:
            raise ConfigValidationError(f"{name} must be one of {', '.join(allowed)}, got {value!r}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML and the environment.

    Attributes:
        raw: Dictionary of raw configuration values.
    """
    raw: Dict[str, Any]

    def get_app_config(self) -> AppConfig:
        """
        Get validated AppConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return AppConfig.from_settings(self)


# Environment variable -> (section, key)
_ENV_OVERRIDES = {
    "OPENAI_API_KEY": ("openai", "api_key"),
    "OPENAI_BASE_URL": ("openai", "base_url"),
    "HOST": ("server", "host"),
    "PORT": ("server", "port"),
    "TTS_WEB_OUTPUT_DIR": ("synthesis", "output_dir"),
}


def default_settings_path() -> str:
    """Settings file path ($TTS_WEB_SETTINGS or config/settings.yaml)."""
    return os.getenv("TTS_WEB_SETTINGS", "config/settings.yaml")


def load_settings(path: Optional[str] = None, missing_ok: bool = False) -> Settings:
    """
    Load settings from a YAML configuration file.

    Environment variable overrides:
        - OPENAI_API_KEY: openai.api_key
        - OPENAI_BASE_URL: openai.base_url
        - HOST / PORT: server.host / server.port
        - TTS_WEB_OUTPUT_DIR: synthesis.output_dir

    Args:
        path: Path to the YAML configuration file (default_settings_path()
            when omitted).
        missing_ok: Use an empty config instead of failing when the file
            does not exist.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If the settings file doesn't exist and
            missing_ok is False.
    """
    p = Path(path or default_settings_path())
    raw: Dict[str, Any] = {}
    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif not missing_ok:
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    # Apply environment variable overrides
    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            if not isinstance(raw.get(section), dict):
                raw[section] = {}
            raw[section][key] = value

    return Settings(raw=raw)
