"""
API Request/Response Schemas.

Models:
    SpeechRequest: Input schema for POST /v1/speech
    SpeechResponse: Success body for POST /v1/speech

Fields are plain optional strings. Allowed values and the length limit are
checked by the synthesis adapter, not here.

Example Request:
    {
        "input": "Hello world",
        "voice": "nova",
        "model": "tts-1",
        "response_format": "mp3",
        "suffix_type": "none",
        "file_name": "greeting"
    }
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SpeechRequest(BaseModel):
    """
    Synthesis request for the JSON API.

    Omitted fields fall back to the configured synthesis defaults.
    """
    input: Optional[str] = Field(
        default=None,
        description="Text to synthesize (at most 4096 characters)",
    )
    voice: Optional[str] = Field(
        default=None,
        description="Voice: alloy, echo, fable, onyx, nova, shimmer",
    )
    model: Optional[str] = Field(
        default=None,
        description="Model: tts-1 or tts-1-hd",
    )
    response_format: Optional[str] = Field(
        default=None,
        description="Audio format: mp3, opus, aac, flac, wav, pcm",
    )
    suffix_type: Optional[str] = Field(
        default=None,
        description="Filename suffix strategy: uuid, milli, micro, nano, none",
    )
    file_name: Optional[str] = Field(
        default=None,
        description="Base name of the saved file",
    )


class SpeechResponse(BaseModel):
    """Saved file information."""
    ok: bool = True
    file_name: str
    url: str
    request_id: str
    bytes: int
