"""
SpeechSynthesizer - Validate, Synthesize, Save.

This module provides the synthesis adapter used by the form handler, the
JSON API and the CLI. A call is a single stateless transaction:

    Request → Validate → Build path → Remote synthesis → Write file → Result

Validation order (first violation wins):
    1. text present          → InputError MISSING_TEXT
    2. text ≤ 4096 chars     → InputError TEXT_TOO_LONG
    3. voice allowed         → InputError INVALID_VOICE
    4. model allowed         → InputError INVALID_MODEL
    5. format allowed        → InputError INVALID_FORMAT
    6. bare file name        → InputError INVALID_FILE_NAME
    7. directory exists      → FilesystemError MISSING_DIRECTORY
    8. directory writable    → FilesystemError PERMISSION_DENIED
    9. API key available     → ConfigError MISSING_API_KEY
   10. suffix type allowed   → InputError INVALID_SUFFIX

Remote/Write Failures:
    SpeechHTTPError        → RemoteError (400/401/429/500/other)
    SpeechConnectionError  → RemoteError NETWORK_UNREACHABLE
    PermissionError        → FilesystemError WRITE_DENIED
    anything else          → UnknownError

The API key is supplied at construction time; the synthesizer never reads
the environment.

Example:
    >>> synth = SpeechSynthesizer(api_key="sk-...")
    >>> result = synth.synthesize(SynthesisRequest(
    ...     text="Hello world", dest_dir="./public/audio",
    ...     file_name="tts-output", suffix_type="none"))
    >>> result.file_path
    '/srv/app/public/audio/tts-output.mp3'
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from tts_web.core.config import AppConfig
from tts_web.core.logging import debug, fail, get_logger, info, success, verbose, warn
from tts_web.core.metrics import metrics
from tts_web.services.errors import (
    ErrorCode,
    FilesystemError,
    RemoteError,
    SpeechError,
    UnknownError,
    remote_error_for_status,
)
from tts_web.services.validators import (
    resolve_api_key,
    validate_choice,
    validate_directory,
    validate_file_name,
    validate_text,
)
from tts_web.speech.client import (
    OpenAISpeechClient,
    SpeechClient,
    SpeechConnectionError,
    SpeechHTTPError,
)
from tts_web.speech.options import (
    ALLOWED_FORMATS,
    ALLOWED_MODELS,
    ALLOWED_SUFFIX_TYPES,
    ALLOWED_VOICES,
    DEFAULT_DEST_DIR,
    DEFAULT_FILE_NAME,
    DEFAULT_FORMAT,
    DEFAULT_MODEL,
    DEFAULT_SUFFIX_TYPE,
    DEFAULT_VOICE,
)
from tts_web.speech.suffix import build_output_path, make_suffix
from tts_web.utils.timeit import timeit

_LOG = get_logger("tts-web.synthesizer")

ClientFactory = Callable[[str], SpeechClient]


@dataclass
class SynthesisRequest:
    """
    Request for speech synthesis.

    Attributes:
        text: Text to synthesize (required, at most 4096 characters).
        voice: Voice name from ALLOWED_VOICES.
        model: Model name from ALLOWED_MODELS.
        response_format: Audio format from ALLOWED_FORMATS.
        suffix_type: Suffix strategy from ALLOWED_SUFFIX_TYPES.
        dest_dir: Directory that receives the audio file.
        file_name: Base file name (empty falls back to "speech-audio").
        api_key: Per-request API key (overrides the configured key).
    """
    text: Optional[str]
    voice: str = DEFAULT_VOICE
    model: str = DEFAULT_MODEL
    response_format: str = DEFAULT_FORMAT
    suffix_type: str = DEFAULT_SUFFIX_TYPE
    dest_dir: str = DEFAULT_DEST_DIR
    file_name: Optional[str] = DEFAULT_FILE_NAME
    api_key: Optional[str] = None


@dataclass
class SynthesisResult:
    """
    Result of a successful synthesis.

    Attributes:
        file_path: Absolute path of the written audio file.
        file_name: Base name of the written file.
        bytes_written: Size of the audio data.
        seconds: Total processing time.
    """
    file_path: str
    file_name: str
    bytes_written: int
    seconds: float


def _default_client_factory(
    base_url: Optional[str] = None,
    timeout_s: float = 60.0,
) -> ClientFactory:
    def factory(api_key: str) -> SpeechClient:
        return OpenAISpeechClient(api_key=api_key, base_url=base_url, timeout_s=timeout_s)
    return factory


class SpeechSynthesizer:
    """
    Synthesis adapter: validates a request, calls the speech API and saves
    the returned audio.

    Holds only immutable configuration, so one instance can serve
    concurrent requests.

    Args:
        api_key: Fallback API key used when a request carries none.
        client_factory: Builds a SpeechClient for a given API key.
            Defaults to OpenAISpeechClient.
        text_preview_chars: Characters of text included in request logs.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        client_factory: Optional[ClientFactory] = None,
        text_preview_chars: int = 80,
    ):
        self._api_key = api_key
        self._client_factory = client_factory or _default_client_factory()
        self._text_preview_chars = text_preview_chars

    @classmethod
    def from_config(cls, config: AppConfig) -> "SpeechSynthesizer":
        """Create a synthesizer from validated application config."""
        return cls(
            api_key=config.openai.api_key,
            client_factory=_default_client_factory(
                base_url=config.openai.base_url,
                timeout_s=config.openai.timeout_s,
            ),
            text_preview_chars=config.logging.text_preview_chars,
        )

    @property
    def has_api_key(self) -> bool:
        """Whether a fallback API key is configured."""
        return bool(self._api_key)

    # =========================================================================
    # Validation
    # =========================================================================

    def _validate(self, request: SynthesisRequest) -> tuple[Path, str]:
        """Run checks 1-10 in order. Returns (directory, api_key)."""
        validate_text(request.text)
        validate_choice(request.voice, ALLOWED_VOICES, "voice", ErrorCode.INVALID_VOICE)
        validate_choice(request.model, ALLOWED_MODELS, "model", ErrorCode.INVALID_MODEL)
        validate_choice(
            request.response_format, ALLOWED_FORMATS, "response format", ErrorCode.INVALID_FORMAT
        )
        validate_file_name(request.file_name)
        dir_path = validate_directory(request.dest_dir)
        api_key = resolve_api_key(request.api_key, self._api_key)
        validate_choice(
            request.suffix_type, ALLOWED_SUFFIX_TYPES, "suffix_type", ErrorCode.INVALID_SUFFIX
        )
        return dir_path, api_key

    # =========================================================================
    # Public API
    # =========================================================================

    def synthesize(self, request: SynthesisRequest) -> SynthesisResult:
        """
        Synthesize speech and save it to disk.

        Args:
            request: SynthesisRequest with text and options.

        Returns:
            SynthesisResult with the absolute file path.

        Raises:
            InputError, ConfigError, FilesystemError, RemoteError, UnknownError
        """
        text = request.text or ""
        preview = text[:self._text_preview_chars] if self._text_preview_chars > 0 else ""
        info(_LOG, "request", chars=len(text), voice=request.voice,
             model=request.model, format=request.response_format, text_preview=preview)

        try:
            with timeit("request_total") as total_t:
                dir_path, api_key = self._validate(request)

                suffix = make_suffix(request.suffix_type)
                if suffix is None:
                    warn(_LOG, "suffix_none_may_overwrite", file_name=request.file_name)
                out_path = build_output_path(
                    dir_path, request.file_name, suffix, request.response_format
                )
                debug(_LOG, "resolved", path=str(out_path), suffix_type=request.suffix_type)

                audio = self._call_remote(api_key, request)

                with timeit("write") as t_write:
                    self._write_audio(out_path, audio)
                verbose(_LOG, "stage", event="write", seconds=round(t_write.timing.seconds, 4))

        except SpeechError as e:
            fail(_LOG, "request_failed", error=e.code, kind=e.kind, message=e.message)
            metrics.record_request(status="error", code=e.code)
            raise
        except Exception as e:
            fail(_LOG, "request_failed", error=ErrorCode.UNKNOWN, error_type=type(e).__name__)
            metrics.record_request(status="error", code=ErrorCode.UNKNOWN)
            raise UnknownError(
                f"An unexpected error occurred: {e}",
                {"error_type": type(e).__name__},
            ) from e

        seconds = total_t.timing.seconds
        success(_LOG, "done", path=str(out_path), bytes=len(audio), seconds=round(seconds, 3))
        metrics.record_request(
            status="success",
            code="OK",
            duration=seconds,
            audio_bytes=len(audio),
        )
        return SynthesisResult(
            file_path=str(out_path),
            file_name=out_path.name,
            bytes_written=len(audio),
            seconds=seconds,
        )

    # =========================================================================
    # Remote call and write
    # =========================================================================

    def _call_remote(self, api_key: str, request: SynthesisRequest) -> bytes:
        """Invoke the speech client and classify its failures."""
        try:
            client = self._client_factory(api_key)
            with timeit("synth") as t_synth:
                audio = client.synthesize(
                    text=request.text,
                    voice=request.voice,
                    model=request.model,
                    response_format=request.response_format,
                )
        except SpeechHTTPError as e:
            raise remote_error_for_status(e.status_code, e.reason) from e
        except SpeechConnectionError as e:
            raise RemoteError(
                "Network error: Unable to reach OpenAI API.",
                ErrorCode.NETWORK_UNREACHABLE,
                details={"error": str(e)},
            ) from e
        except Exception as e:
            raise UnknownError(
                f"An unexpected error occurred: {e}",
                {"error_type": type(e).__name__},
            ) from e

        verbose(_LOG, "stage", event="synth", seconds=round(t_synth.timing.seconds, 4))
        return audio

    @staticmethod
    def _write_audio(path: Path, audio: bytes) -> None:
        """Write audio bytes, overwriting any existing file."""
        try:
            path.write_bytes(audio)
        except PermissionError as e:
            raise FilesystemError(
                f"Failed to write audio file: {e}",
                ErrorCode.WRITE_DENIED,
                {"path": str(path)},
            ) from e
        except Exception as e:
            raise UnknownError(
                f"An unexpected error occurred: {e}",
                {"error_type": type(e).__name__},
            ) from e


# =============================================================================
# Global Synthesizer Singleton
# =============================================================================

_synthesizer: Optional[SpeechSynthesizer] = None
_synthesizer_config: Optional[AppConfig] = None
_synthesizer_lock = threading.Lock()


def get_synthesizer(config: AppConfig) -> SpeechSynthesizer:
    """
    Get or create the global SpeechSynthesizer.

    Thread-safe lazy singleton, created from config on first call and
    rebuilt when called with a different config.
    """
    global _synthesizer, _synthesizer_config
    if _synthesizer is None or _synthesizer_config != config:
        with _synthesizer_lock:
            if _synthesizer is None or _synthesizer_config != config:
                _synthesizer = SpeechSynthesizer.from_config(config)
                _synthesizer_config = config
    return _synthesizer


def reset_synthesizer() -> None:
    """Drop the global instance (used by tests)."""
    global _synthesizer, _synthesizer_config
    with _synthesizer_lock:
        _synthesizer = None
        _synthesizer_config = None
