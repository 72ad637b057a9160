"""
Remote Speech Synthesis Clients.

This module hides the third-party speech API behind a small capability
interface so the synthesis adapter can be exercised without network access.

Classes:
    SpeechClient: Base class. Subclasses implement synthesize().
    OpenAISpeechClient: Calls OpenAI's /v1/audio/speech via the openai SDK.
    SpeechHTTPError: Upstream answered with a non-success HTTP status.
    SpeechConnectionError: Upstream could not be reached.

Implementing a Client:
    class FixedClient(SpeechClient):
        name = "fixed"

        def synthesize(self, *, text, voice, model, response_format):
            return b"ID3..."

    Failures must be raised as SpeechHTTPError / SpeechConnectionError so the
    adapter can classify them. Any other exception is reported as unknown.
"""
from __future__ import annotations

from typing import Optional

import openai
from openai import OpenAI

from tts_web.core.logging import debug, get_logger

_LOG = get_logger("tts-web.client")


class SpeechHTTPError(Exception):
    """
    Raised when the speech API answers with an error status.

    Attributes:
        status_code: HTTP status code returned by the API.
        reason: HTTP reason phrase (e.g. "Too Many Requests").
    """

    def __init__(self, status_code: int, reason: str = "", message: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(message or f"HTTP {status_code} {reason}".strip())


class SpeechConnectionError(Exception):
    """Raised when the speech API host is unreachable or times out."""


class SpeechClient:
    """
    Capability interface for remote speech synthesis.

    Attributes:
        name: Client identifier used in logs.
    """
    name: str = "base"

    def synthesize(
        self,
        *,
        text: str,
        voice: str,
        model: str,
        response_format: str,
    ) -> bytes:
        """
        Synthesize speech and return the encoded audio bytes.

        Raises:
            SpeechHTTPError: Upstream returned an error status.
            SpeechConnectionError: Upstream unreachable.
            NotImplementedError: If not overridden.
        """
        raise NotImplementedError


class OpenAISpeechClient(SpeechClient):
    """
    Speech client backed by the official openai SDK.

    Automatic retries are disabled: every failure is surfaced to the caller
    exactly once.

    Example:
        >>> client = OpenAISpeechClient(api_key="sk-...")
        >>> audio = client.synthesize(text="Hello", voice="nova",
        ...                           model="tts-1", response_format="mp3")
    """
    name = "openai"

    def __init__(
        self,
        api_key: str,
        base_url: Optional[str] = None,
        timeout_s: float = 60.0,
    ):
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_s,
            max_retries=0,
        )

    def synthesize(
        self,
        *,
        text: str,
        voice: str,
        model: str,
        response_format: str,
    ) -> bytes:
        debug(_LOG, "openai_speech_call", model=model, voice=voice, format=response_format)
        try:
            response = self._client.audio.speech.create(
                model=model,
                voice=voice,
                input=text,
                response_format=response_format,
            )
        except openai.APIStatusError as e:
            raise SpeechHTTPError(
                e.status_code,
                e.response.reason_phrase,
                e.message,
            ) from e
        except openai.APIConnectionError as e:
            raise SpeechConnectionError(str(e)) from e
        return response.content
