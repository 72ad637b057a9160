"""
File Name Suffix Generation.

Output files are named ``<file_name>[-<suffix>].<format>``. The suffix keeps
concurrent or repeated requests from writing to the same path. Collisions
are avoided probabilistically (uuid) or by clock resolution (timestamps),
never by locking.

Usage:
    >>> make_suffix("uuid")
    '3f0c8a5e-6f7c-4b0e-9a53-2d1c7e2f1b44'
    >>> make_suffix("nano")
    '81234567890123'
    >>> make_suffix("none") is None
    True
"""
from __future__ import annotations

import time
import uuid
from pathlib import Path
from typing import Optional

from tts_web.speech.options import DEFAULT_FILE_NAME, SuffixType

# Nanoseconds per unit for the timestamp strategies
_NS_PER_UNIT = {
    SuffixType.MILLI: 1_000_000,
    SuffixType.MICRO: 1_000,
    SuffixType.NANO: 1,
}


def monotonic_reading(unit: SuffixType) -> int:
    """
    Read the monotonic high-resolution clock in the given unit.

    Args:
        unit: One of SuffixType.MILLI, MICRO or NANO.

    Returns:
        Integer clock reading. Only differences are meaningful; the value
        restarts from an arbitrary origin on reboot.
    """
    return time.monotonic_ns() // _NS_PER_UNIT[unit]


def make_suffix(suffix_type: str | SuffixType) -> Optional[str]:
    """
    Generate a uniqueness token for the given strategy.

    Args:
        suffix_type: Suffix strategy name or SuffixType.

    Returns:
        Suffix string, or None for the "none" strategy.

    Raises:
        ValueError: If suffix_type is not a known strategy.
    """
    kind = SuffixType(suffix_type)
    if kind is SuffixType.NONE:
        return None
    if kind is SuffixType.UUID:
        return str(uuid.uuid4())
    return str(monotonic_reading(kind))


def build_output_path(
    dest_dir: str | Path,
    file_name: Optional[str],
    suffix: Optional[str],
    response_format: str,
) -> Path:
    """
    Compose the absolute output path for a synthesized file.

    Empty file names fall back to DEFAULT_FILE_NAME.

    Example:
        >>> build_output_path("/srv/audio", "tts-output", None, "mp3")
        PosixPath('/srv/audio/tts-output.mp3')
    """
    stem = file_name or DEFAULT_FILE_NAME
    if suffix:
        stem = f"{stem}-{suffix}"
    return Path(dest_dir).resolve() / f"{stem}.{response_format}"
