"""
Input Validation for Speech Synthesis.

Each function checks one field and raises the matching SpeechError
subclass. The synthesis adapter calls them in a fixed order and the first
failure wins, so cheap input checks run before any filesystem access and
the filesystem is checked before any remote call.

Validation Rules:
    - Text: Required (non-empty), max 4096 characters, taken verbatim
    - Voice/model/format/suffix: Must be in the allowed set
    - File name: A bare name, no directory parts
    - Destination: Must exist, be a directory, and be writable
    - API key: Request key or configured fallback must be non-empty

Usage:
    from tts_web.services.validators import validate_text, validate_choice

    text = validate_text(request.text)
    voice = validate_choice(request.voice, ALLOWED_VOICES, "voice",
                            ErrorCode.INVALID_VOICE)
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Sequence

from tts_web.services.errors import (
    ConfigError,
    ErrorCode,
    FilesystemError,
    InputError,
)
from tts_web.speech.options import MAX_INPUT_CHARS


def validate_text(text: Optional[str], max_length: int = MAX_INPUT_CHARS) -> str:
    """
    Validate text input.

    Whitespace-only text is accepted; the text is not stripped.

    Args:
        text: Input text
        max_length: Maximum allowed length

    Returns:
        The text, unchanged

    Raises:
        InputError: If text is missing or too long
    """
    if not text:
        raise InputError("No input text provided.", ErrorCode.MISSING_TEXT)

    if len(text) > max_length:
        raise InputError(
            f"Input text exceeds the maximum allowed length of {max_length} characters.",
            ErrorCode.TEXT_TOO_LONG,
            {"length": len(text), "max_length": max_length},
        )

    return text


def validate_choice(value: str, allowed: Sequence[str], label: str, code: str) -> str:
    """
    Validate that value is one of the allowed options.

    Args:
        value: Value to check
        allowed: Allowed values
        label: Field name used in the message (e.g. "voice")
        code: ErrorCode raised on failure

    Returns:
        The value

    Raises:
        InputError: If value is not allowed

    Example:
        >>> validate_choice("robot", ("alloy", "nova"), "voice", ErrorCode.INVALID_VOICE)
        Traceback (most recent call last):
        ...
        InputError: Invalid voice 'robot'. Allowed values are: alloy, nova.
    """
    if value not in allowed:
        raise InputError(
            f"Invalid {label} '{value}'. Allowed values are: {', '.join(allowed)}.",
            code,
        )
    return value


def validate_file_name(file_name: Optional[str]) -> Optional[str]:
    """
    Validate the base file name.

    Empty names are allowed (the default name is used). Anything that
    would place the file outside the destination directory is rejected.

    Raises:
        InputError: If the name contains a path separator or is "." or ".."
    """
    if not file_name:
        return file_name

    if (
        file_name in (".", "..")
        or "/" in file_name
        or "\\" in file_name
        or Path(file_name).name != file_name
    ):
        raise InputError(
            f"Invalid file name '{file_name}'. Use a bare name without directory parts.",
            ErrorCode.INVALID_FILE_NAME,
        )
    return file_name


def validate_directory(dest_dir: str | Path) -> Path:
    """
    Validate the destination directory.

    Args:
        dest_dir: Directory that will receive the audio file

    Returns:
        Absolute directory path

    Raises:
        FilesystemError: If the directory is missing, not a directory,
            or not writable
    """
    dir_path = Path(dest_dir).resolve()

    # stat() fails with PermissionError when a parent cannot be traversed
    try:
        exists = dir_path.exists()
        is_dir = exists and dir_path.is_dir()
    except PermissionError as e:
        raise FilesystemError(
            f"No permission to access the directory '{dir_path}'.",
            ErrorCode.PERMISSION_DENIED,
            {"error": str(e)},
        ) from e

    if not exists:
        raise FilesystemError(
            f"Destination directory '{dir_path}' does not exist.",
            ErrorCode.MISSING_DIRECTORY,
        )
    if not is_dir:
        raise FilesystemError(
            f"The path '{dir_path}' is not a directory.",
            ErrorCode.MISSING_DIRECTORY,
        )
    if not os.access(dir_path, os.W_OK):
        raise FilesystemError(
            f"No write permission to the directory '{dir_path}'.",
            ErrorCode.PERMISSION_DENIED,
        )

    return dir_path


def resolve_api_key(explicit: Optional[str], fallback: Optional[str]) -> str:
    """
    Pick the API key for a request.

    Args:
        explicit: Key supplied with the request
        fallback: Key configured at startup

    Returns:
        The key to use

    Raises:
        ConfigError: If neither key is set
    """
    key = explicit or fallback
    if not key:
        raise ConfigError(
            "The OpenAI API key could not be found. Set the OPENAI_API_KEY "
            "environment variable or pass api_key explicitly."
        )
    return key
