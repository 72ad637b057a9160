"""
tts-web Services Layer.

Sits between the HTTP/CLI layer and the remote speech client.

Components:
    - synthesizer.py: SpeechSynthesizer (validate, synthesize, save)
    - validators.py: Per-field validation functions
    - errors.py: Error taxonomy and codes
"""
from .errors import (
    ConfigError,
    ErrorCode,
    FilesystemError,
    InputError,
    RemoteError,
    SpeechError,
    UnknownError,
)
from .synthesizer import (
    SpeechSynthesizer,
    SynthesisRequest,
    SynthesisResult,
)

__all__ = [
    "SpeechSynthesizer",
    "SynthesisRequest",
    "SynthesisResult",
    "SpeechError",
    "InputError",
    "ConfigError",
    "FilesystemError",
    "RemoteError",
    "UnknownError",
    "ErrorCode",
]
