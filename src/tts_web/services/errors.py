"""
Error Taxonomy for Speech Synthesis.

Every failure of the synthesis adapter is raised as a SpeechError subclass
carrying a human-readable message and a machine-readable code.

Kinds:
    InputError:      Client-supplied data is invalid
    ConfigError:     A required secret (the API key) is missing
    FilesystemError: Directory missing, not writable, or write failed
    RemoteError:     The speech API failed (classified by HTTP status)
    UnknownError:    Anything else (wraps the original exception)

Error responses use a consistent shape:
    {
        "ok": false,
        "error": "RATE_LIMITED",
        "kind": "remote",
        "message": "API rate limit exceeded."
    }
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class ErrorCode:
    """Machine-readable error codes."""
    # Input
    MISSING_TEXT = "MISSING_TEXT"
    TEXT_TOO_LONG = "TEXT_TOO_LONG"
    INVALID_VOICE = "INVALID_VOICE"
    INVALID_MODEL = "INVALID_MODEL"
    INVALID_FORMAT = "INVALID_FORMAT"
    INVALID_SUFFIX = "INVALID_SUFFIX"
    INVALID_FILE_NAME = "INVALID_FILE_NAME"
    # Configuration
    MISSING_API_KEY = "MISSING_API_KEY"
    # Filesystem
    MISSING_DIRECTORY = "MISSING_DIRECTORY"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    WRITE_DENIED = "WRITE_DENIED"
    # Remote
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    UNEXPECTED_STATUS = "UNEXPECTED_STATUS"
    NETWORK_UNREACHABLE = "NETWORK_UNREACHABLE"
    # Catch-all
    UNKNOWN = "UNKNOWN"


class SpeechError(Exception):
    """
    Base exception for synthesis failures.

    Attributes:
        message: Human-readable error message.
        code: Error code from ErrorCode.
        details: Optional dictionary with additional context.
        kind: Error category, set by each subclass.
    """
    kind: str = "unknown"

    def __init__(self, message: str, code: str = ErrorCode.UNKNOWN, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the error response dict used by the API."""
        result: Dict[str, Any] = {
            "ok": False,
            "error": self.code,
            "kind": self.kind,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class InputError(SpeechError):
    """Raised when request parameters fail validation."""
    kind = "input"


class ConfigError(SpeechError):
    """Raised when no API key is available."""
    kind = "config"

    def __init__(self, message: str, code: str = ErrorCode.MISSING_API_KEY, details: Optional[Dict] = None):
        super().__init__(message, code, details)


class FilesystemError(SpeechError):
    """Raised for destination directory and write problems."""
    kind = "filesystem"


class RemoteError(SpeechError):
    """
    Raised when the speech API call fails.

    Attributes:
        status_code: Upstream HTTP status, or None when unreachable.
    """
    kind = "remote"

    def __init__(
        self,
        message: str,
        code: str,
        status_code: Optional[int] = None,
        details: Optional[Dict] = None,
    ):
        self.status_code = status_code
        if status_code is not None:
            details = {**(details or {}), "status_code": status_code}
        super().__init__(message, code, details)


class UnknownError(SpeechError):
    """Raised for failures that fit no other category."""
    kind = "unknown"

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.UNKNOWN, details)


# HTTP status -> (code, message) for upstream failures
_STATUS_ERRORS = {
    400: (ErrorCode.BAD_REQUEST, "Bad request. Please check your input parameters."),
    401: (ErrorCode.UNAUTHORIZED, "Unauthorized. Check your API key."),
    429: (ErrorCode.RATE_LIMITED, "API rate limit exceeded."),
    500: (ErrorCode.UPSTREAM_ERROR, "Internal server error at OpenAI."),
}


def remote_error_for_status(status_code: int, reason: str = "") -> RemoteError:
    """
    Build the RemoteError for an upstream HTTP status.

    Args:
        status_code: HTTP status returned by the speech API.
        reason: HTTP reason phrase, used for unmapped statuses.

    Returns:
        RemoteError with the matching code and message.

    Example:
        >>> remote_error_for_status(429).code
        'RATE_LIMITED'
        >>> remote_error_for_status(503, "Service Unavailable").message
        'API error: 503 Service Unavailable'
    """
    if status_code in _STATUS_ERRORS:
        code, message = _STATUS_ERRORS[status_code]
        return RemoteError(message, code, status_code)
    message = f"API error: {status_code} {reason}".rstrip()
    return RemoteError(message, ErrorCode.UNEXPECTED_STATUS, status_code)
