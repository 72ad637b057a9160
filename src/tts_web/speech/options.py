"""
Allowed Speech Parameters.

The OpenAI speech endpoint accepts a fixed set of voices, models and
response formats. These lists are the single source of truth for the
form options, the JSON schema and request validation.

Formats:
    mp3:  Default, general purpose.
    opus: Internet streaming and communication, low latency.
    aac:  Digital audio compression, preferred by YouTube, Android, iOS.
    flac: Lossless compression, for archiving.
    wav:  Uncompressed WAV, avoids decoding overhead.
    pcm:  Raw 24kHz 16-bit signed little-endian samples, no header.

Suffix types (uniqueness token appended to output file names):
    uuid:  Random UUID4 (default).
    milli: Monotonic clock reading in milliseconds.
    micro: Monotonic clock reading in microseconds.
    nano:  Monotonic clock reading in nanoseconds.
    none:  No suffix. Repeated requests overwrite the same file.

See Also:
    - https://platform.openai.com/docs/guides/text-to-speech/voice-options
"""
from __future__ import annotations

from enum import Enum


class SuffixType(str, Enum):
    """Strategies for making output file names unique."""
    UUID = "uuid"
    MILLI = "milli"
    MICRO = "micro"
    NANO = "nano"
    NONE = "none"


ALLOWED_VOICES = ("alloy", "echo", "fable", "onyx", "nova", "shimmer")
ALLOWED_MODELS = ("tts-1", "tts-1-hd")
ALLOWED_FORMATS = ("mp3", "opus", "aac", "flac", "wav", "pcm")
ALLOWED_SUFFIX_TYPES = tuple(s.value for s in SuffixType)

# Upper bound imposed by the remote API
MAX_INPUT_CHARS = 4096

# Adapter defaults (used when a caller omits a field)
DEFAULT_VOICE = "nova"
DEFAULT_MODEL = "tts-1"
DEFAULT_FORMAT = "mp3"
DEFAULT_SUFFIX_TYPE = SuffixType.UUID.value
DEFAULT_FILE_NAME = "speech-audio"
DEFAULT_DEST_DIR = "./"
