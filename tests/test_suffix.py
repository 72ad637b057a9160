"""
Tests for file name suffix generation and output paths.

Tests cover:
- make_suffix() for every strategy
- monotonic_reading() units
- build_output_path() composition and fallbacks
"""
import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from tts_web.speech.options import ALLOWED_SUFFIX_TYPES, SuffixType
from tts_web.speech.suffix import build_output_path, make_suffix, monotonic_reading


class TestMakeSuffix:
    """Tests for make_suffix()."""

    def test_uuid(self):
        """uuid yields a parseable version 4 UUID."""
        suffix = make_suffix("uuid")
        assert uuid.UUID(suffix).version == 4

    def test_uuid_unique(self):
        """Two uuid suffixes differ."""
        assert make_suffix("uuid") != make_suffix("uuid")

    @pytest.mark.parametrize("kind", ["milli", "micro", "nano"])
    def test_timestamps_are_integers(self, kind):
        """Timestamp suffixes are decimal integers."""
        suffix = make_suffix(kind)
        assert suffix.isdigit()

    def test_none(self):
        """none yields no suffix."""
        assert make_suffix("none") is None

    def test_accepts_enum(self):
        """SuffixType members are accepted."""
        assert make_suffix(SuffixType.NONE) is None

    def test_unknown_raises(self):
        """Unknown strategies raise ValueError."""
        with pytest.raises(ValueError):
            make_suffix("seconds")

    def test_allowed_suffix_types(self):
        """Wire names of all strategies."""
        assert ALLOWED_SUFFIX_TYPES == ("uuid", "milli", "micro", "nano", "none")


class TestMonotonicReading:
    """Tests for monotonic_reading()."""

    def test_units(self):
        """The same clock value is scaled per unit."""
        with patch("tts_web.speech.suffix.time.monotonic_ns", return_value=12_345_678_901):
            assert monotonic_reading(SuffixType.NANO) == 12_345_678_901
            assert monotonic_reading(SuffixType.MICRO) == 12_345_678
            assert monotonic_reading(SuffixType.MILLI) == 12_345

    def test_non_decreasing(self):
        """Successive readings never go backwards."""
        first = monotonic_reading(SuffixType.NANO)
        second = monotonic_reading(SuffixType.NANO)
        assert second >= first


class TestBuildOutputPath:
    """Tests for build_output_path()."""

    def test_without_suffix(self, tmp_path):
        """No suffix gives <name>.<format>."""
        path = build_output_path(tmp_path, "tts-output", None, "mp3")
        assert path == tmp_path.resolve() / "tts-output.mp3"

    def test_with_suffix(self, tmp_path):
        """A suffix is joined with a hyphen."""
        path = build_output_path(tmp_path, "tts-output", "123", "wav")
        assert path.name == "tts-output-123.wav"

    def test_empty_name_uses_default(self, tmp_path):
        """Empty and missing names fall back to speech-audio."""
        assert build_output_path(tmp_path, "", None, "mp3").name == "speech-audio.mp3"
        assert build_output_path(tmp_path, None, "x", "aac").name == "speech-audio-x.aac"

    def test_relative_dir_resolved(self):
        """Relative directories are made absolute."""
        path = build_output_path("./", "a", None, "mp3")
        assert path.is_absolute()
        assert path.parent == Path("./").resolve()
