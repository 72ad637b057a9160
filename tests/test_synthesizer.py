"""
Tests for SpeechSynthesizer.

Tests cover:
- Successful synthesis: exact path, exact bytes, result fields
- Suffix strategies and overwrite behavior
- Validation order (first violation wins)
- No remote call / no filesystem access on early failures
- Classification of remote and write failures
- Metrics recording
- Global singleton
"""
import uuid
from pathlib import Path
from unittest.mock import patch

import pytest

from tts_web.core.config import AppConfig, OpenAIConfig
from tts_web.services.errors import (
    ConfigError,
    ErrorCode,
    FilesystemError,
    InputError,
    RemoteError,
    UnknownError,
)
from tts_web.services.synthesizer import (
    SpeechSynthesizer,
    SynthesisRequest,
    SynthesisResult,
    get_synthesizer,
    reset_synthesizer,
)
from tts_web.speech.client import SpeechClient, SpeechConnectionError, SpeechHTTPError

AUDIO = b"ID3\x04\x00fake-mp3-bytes"


class FakeSpeechClient(SpeechClient):
    """Returns fixed audio or raises a preset error; records calls."""
    name = "fake"

    def __init__(self, audio: bytes = AUDIO, error: Exception | None = None):
        self.audio = audio
        self.error = error
        self.calls = []
        self.api_keys = []

    def synthesize(self, *, text, voice, model, response_format):
        self.calls.append({
            "text": text,
            "voice": voice,
            "model": model,
            "response_format": response_format,
        })
        if self.error is not None:
            raise self.error
        return self.audio


def make_synth(client: FakeSpeechClient, api_key: str | None = "sk-test") -> SpeechSynthesizer:
    def factory(key):
        client.api_keys.append(key)
        return client
    return SpeechSynthesizer(api_key=api_key, client_factory=factory)


class TestSuccessfulSynthesis:
    """Tests for the happy path."""

    def test_hello_world_exact_path_and_bytes(self, tmp_path):
        """Fixed name, no suffix: <dir>/tts-output.mp3 holds the returned bytes."""
        client = FakeSpeechClient()
        synth = make_synth(client)

        result = synth.synthesize(SynthesisRequest(
            text="Hello world",
            voice="nova",
            response_format="mp3",
            suffix_type="none",
            dest_dir=str(tmp_path),
            file_name="tts-output",
        ))

        expected = tmp_path.resolve() / "tts-output.mp3"
        assert isinstance(result, SynthesisResult)
        assert result.file_path == str(expected)
        assert result.file_name == "tts-output.mp3"
        assert result.bytes_written == len(AUDIO)
        assert result.seconds >= 0
        assert expected.read_bytes() == AUDIO

    def test_remote_call_parameters(self, tmp_path):
        """The client receives the request parameters and the key."""
        client = FakeSpeechClient()
        synth = make_synth(client)

        synth.synthesize(SynthesisRequest(
            text="  spaced  ",
            voice="onyx",
            model="tts-1-hd",
            response_format="flac",
            dest_dir=str(tmp_path),
        ))

        assert client.calls == [{
            "text": "  spaced  ",
            "voice": "onyx",
            "model": "tts-1-hd",
            "response_format": "flac",
        }]
        assert client.api_keys == ["sk-test"]

    def test_request_key_overrides_configured_key(self, tmp_path):
        """A per-request key is passed to the client factory."""
        client = FakeSpeechClient()
        synth = make_synth(client, api_key="sk-config")

        synth.synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path), api_key="sk-request"))
        assert client.api_keys == ["sk-request"]

    def test_defaults(self, tmp_path):
        """Defaults: nova, tts-1, mp3, uuid suffix, speech-audio name."""
        client = FakeSpeechClient()
        result = make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))

        assert client.calls[0]["voice"] == "nova"
        assert client.calls[0]["model"] == "tts-1"
        assert client.calls[0]["response_format"] == "mp3"
        name = Path(result.file_path).name
        assert name.startswith("speech-audio-")
        assert name.endswith(".mp3")
        uuid.UUID(name[len("speech-audio-"):-len(".mp3")])

    def test_empty_file_name_uses_default(self, tmp_path):
        """An empty file name falls back to speech-audio."""
        result = make_synth(FakeSpeechClient()).synthesize(SynthesisRequest(
            text="hi", dest_dir=str(tmp_path), file_name="", suffix_type="none",
        ))
        assert result.file_name == "speech-audio.mp3"

    def test_whitespace_text_accepted(self, tmp_path):
        """Whitespace-only text reaches the remote API."""
        client = FakeSpeechClient()
        make_synth(client).synthesize(SynthesisRequest(text=" \n ", dest_dir=str(tmp_path)))
        assert client.calls[0]["text"] == " \n "

    def test_max_length_text_accepted(self, tmp_path):
        """4096 characters are within the limit."""
        client = FakeSpeechClient()
        make_synth(client).synthesize(SynthesisRequest(text="a" * 4096, dest_dir=str(tmp_path)))
        assert len(client.calls) == 1


class TestSuffixBehavior:
    """Tests for file name uniqueness."""

    def test_uuid_suffix_gives_distinct_files(self, tmp_path):
        """Two identical uuid requests produce two files."""
        synth = make_synth(FakeSpeechClient())
        request = SynthesisRequest(text="hi", dest_dir=str(tmp_path), file_name="same")

        first = synth.synthesize(request)
        second = synth.synthesize(request)

        assert first.file_path != second.file_path
        assert len(list(tmp_path.iterdir())) == 2

    @pytest.mark.parametrize("kind", ["milli", "micro", "nano"])
    def test_timestamp_suffix(self, tmp_path, kind):
        """Timestamp strategies append an integer."""
        result = make_synth(FakeSpeechClient()).synthesize(SynthesisRequest(
            text="hi", dest_dir=str(tmp_path), file_name="t", suffix_type=kind,
        ))
        stem = Path(result.file_path).stem
        assert stem.startswith("t-")
        assert stem[2:].isdigit()

    def test_none_suffix_overwrites(self, tmp_path):
        """With suffix none, the second write replaces the first."""
        request = SynthesisRequest(text="hi", dest_dir=str(tmp_path), file_name="fixed", suffix_type="none")

        make_synth(FakeSpeechClient(audio=b"first")).synthesize(request)
        result = make_synth(FakeSpeechClient(audio=b"second")).synthesize(request)

        assert Path(result.file_path).read_bytes() == b"second"
        assert [p.name for p in tmp_path.iterdir()] == ["fixed.mp3"]


class TestValidation:
    """Tests for validation failures and their ordering."""

    def test_missing_text(self, tmp_path):
        """No text: InputError, no remote call."""
        client = FakeSpeechClient()
        with pytest.raises(InputError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text=None, dest_dir=str(tmp_path)))
        assert exc_info.value.code == ErrorCode.MISSING_TEXT
        assert client.calls == []

    def test_text_too_long_no_remote_call(self, tmp_path):
        """4097 characters: InputError, remote never invoked."""
        client = FakeSpeechClient()
        with pytest.raises(InputError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text="a" * 4097, dest_dir=str(tmp_path)))
        assert exc_info.value.code == ErrorCode.TEXT_TOO_LONG
        assert client.calls == []
        assert client.api_keys == []

    def test_invalid_voice_no_filesystem_access(self, tmp_path):
        """Invalid voice fails before the directory is checked."""
        client = FakeSpeechClient()
        with patch("tts_web.services.synthesizer.validate_directory") as validate_dir:
            with pytest.raises(InputError) as exc_info:
                make_synth(client).synthesize(SynthesisRequest(
                    text="hi", voice="robot", dest_dir=str(tmp_path / "missing"),
                ))
        assert exc_info.value.code == ErrorCode.INVALID_VOICE
        validate_dir.assert_not_called()
        assert client.calls == []

    def test_invalid_model(self, tmp_path):
        """Unknown model is rejected."""
        with pytest.raises(InputError) as exc_info:
            make_synth(FakeSpeechClient()).synthesize(SynthesisRequest(
                text="hi", model="tts-2", dest_dir=str(tmp_path),
            ))
        assert exc_info.value.code == ErrorCode.INVALID_MODEL

    def test_invalid_format(self, tmp_path):
        """Unknown format is rejected."""
        with pytest.raises(InputError) as exc_info:
            make_synth(FakeSpeechClient()).synthesize(SynthesisRequest(
                text="hi", response_format="ogg", dest_dir=str(tmp_path),
            ))
        assert exc_info.value.code == ErrorCode.INVALID_FORMAT
        assert "response format" in exc_info.value.message

    def test_missing_directory_no_remote_call(self, tmp_path):
        """Missing directory: FilesystemError, remote never invoked."""
        client = FakeSpeechClient()
        with pytest.raises(FilesystemError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path / "nope")))
        assert exc_info.value.code == ErrorCode.MISSING_DIRECTORY
        assert client.calls == []

    def test_unwritable_directory(self, tmp_path):
        """Directory without write permission is rejected before the remote call."""
        client = FakeSpeechClient()
        with patch("tts_web.services.validators.os.access", return_value=False):
            with pytest.raises(FilesystemError) as exc_info:
                make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert exc_info.value.code == ErrorCode.PERMISSION_DENIED
        assert client.calls == []

    def test_missing_api_key(self, tmp_path):
        """No key anywhere: ConfigError."""
        client = FakeSpeechClient()
        with pytest.raises(ConfigError) as exc_info:
            make_synth(client, api_key=None).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert exc_info.value.code == ErrorCode.MISSING_API_KEY
        assert client.calls == []

    def test_invalid_suffix(self, tmp_path):
        """Unknown suffix type is rejected."""
        with pytest.raises(InputError) as exc_info:
            make_synth(FakeSpeechClient()).synthesize(SynthesisRequest(
                text="hi", suffix_type="seconds", dest_dir=str(tmp_path),
            ))
        assert exc_info.value.code == ErrorCode.INVALID_SUFFIX

    def test_file_name_with_directory_parts(self, tmp_path):
        """A name climbing out of the destination is rejected; nothing is written."""
        dest = tmp_path / "public" / "audio"
        dest.mkdir(parents=True)
        client = FakeSpeechClient()

        with pytest.raises(InputError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(
                text="hi", file_name="../../escaped", suffix_type="none", dest_dir=str(dest),
            ))

        assert exc_info.value.code == ErrorCode.INVALID_FILE_NAME
        assert client.calls == []
        assert not (tmp_path / "escaped.mp3").exists()
        assert list(tmp_path.rglob("*.mp3")) == []

    def test_file_name_checked_before_directory(self, tmp_path):
        """A bad name is reported before a missing directory."""
        with pytest.raises(InputError) as exc_info:
            make_synth(FakeSpeechClient()).synthesize(SynthesisRequest(
                text="hi", file_name="a/b", dest_dir=str(tmp_path / "nope"),
            ))
        assert exc_info.value.code == ErrorCode.INVALID_FILE_NAME

    def test_directory_stat_denied(self, tmp_path):
        """PermissionError while checking the directory is PERMISSION_DENIED, not UNKNOWN."""
        client = FakeSpeechClient()
        with patch.object(Path, "exists", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(FilesystemError) as exc_info:
                make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert exc_info.value.code == ErrorCode.PERMISSION_DENIED
        assert client.calls == []

    def test_text_checked_before_voice(self, tmp_path):
        """With several violations, the earliest check wins."""
        with pytest.raises(InputError) as exc_info:
            make_synth(FakeSpeechClient(), api_key=None).synthesize(SynthesisRequest(
                text="", voice="robot", model="x", dest_dir=str(tmp_path / "nope"),
            ))
        assert exc_info.value.code == ErrorCode.MISSING_TEXT

    def test_directory_checked_before_api_key(self, tmp_path):
        """Missing directory is reported before a missing key."""
        with pytest.raises(FilesystemError):
            make_synth(FakeSpeechClient(), api_key=None).synthesize(SynthesisRequest(
                text="hi", dest_dir=str(tmp_path / "nope"),
            ))

    def test_api_key_checked_before_suffix(self, tmp_path):
        """A missing key is reported before an invalid suffix."""
        with pytest.raises(ConfigError):
            make_synth(FakeSpeechClient(), api_key=None).synthesize(SynthesisRequest(
                text="hi", suffix_type="seconds", dest_dir=str(tmp_path),
            ))


class TestRemoteFailures:
    """Tests for classification of client failures."""

    @pytest.mark.parametrize("status,code", [
        (400, ErrorCode.BAD_REQUEST),
        (401, ErrorCode.UNAUTHORIZED),
        (429, ErrorCode.RATE_LIMITED),
        (500, ErrorCode.UPSTREAM_ERROR),
        (503, ErrorCode.UNEXPECTED_STATUS),
    ])
    def test_http_status_classification(self, tmp_path, status, code):
        """Upstream statuses map to RemoteError codes."""
        client = FakeSpeechClient(error=SpeechHTTPError(status, "Reason"))
        with pytest.raises(RemoteError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert exc_info.value.code == code
        assert exc_info.value.status_code == status

    def test_rate_limit_message_no_file(self, tmp_path):
        """429: 'rate limit' in the message and no file written."""
        client = FakeSpeechClient(error=SpeechHTTPError(429, "Too Many Requests"))
        with pytest.raises(RemoteError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert "rate limit" in exc_info.value.message.lower()
        assert list(tmp_path.iterdir()) == []

    def test_unexpected_status_message(self, tmp_path):
        """Unmapped statuses report code and reason."""
        client = FakeSpeechClient(error=SpeechHTTPError(503, "Service Unavailable"))
        with pytest.raises(RemoteError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert exc_info.value.message == "API error: 503 Service Unavailable"

    def test_network_unreachable(self, tmp_path):
        """Connection failures become NETWORK_UNREACHABLE."""
        client = FakeSpeechClient(error=SpeechConnectionError("Connection error."))
        with pytest.raises(RemoteError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        err = exc_info.value
        assert err.code == ErrorCode.NETWORK_UNREACHABLE
        assert err.message == "Network error: Unable to reach OpenAI API."
        assert err.status_code is None

    def test_unexpected_client_exception(self, tmp_path):
        """Other client exceptions become UnknownError with the cause kept."""
        boom = RuntimeError("boom")
        client = FakeSpeechClient(error=boom)
        with pytest.raises(UnknownError) as exc_info:
            make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert exc_info.value.message == "An unexpected error occurred: boom"
        assert exc_info.value.__cause__ is boom


class TestWriteFailures:
    """Tests for failures while saving the audio."""

    def test_permission_error_on_write(self, tmp_path):
        """PermissionError during write becomes WRITE_DENIED."""
        synth = make_synth(FakeSpeechClient())
        with patch.object(Path, "write_bytes", side_effect=PermissionError(13, "Permission denied")):
            with pytest.raises(FilesystemError) as exc_info:
                synth.synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))
        assert exc_info.value.code == ErrorCode.WRITE_DENIED
        assert exc_info.value.message.startswith("Failed to write audio file:")

    def test_other_os_error_on_write(self, tmp_path):
        """Other write failures become UnknownError."""
        synth = make_synth(FakeSpeechClient())
        with patch.object(Path, "write_bytes", side_effect=OSError(28, "No space left on device")):
            with pytest.raises(UnknownError):
                synth.synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))


class TestMetricsRecording:
    """Tests for metrics emitted by the synthesizer."""

    def test_success_recorded(self, tmp_path):
        """Successful requests are recorded with size and duration."""
        with patch("tts_web.services.synthesizer.metrics") as metrics:
            make_synth(FakeSpeechClient()).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))

        metrics.record_request.assert_called_once()
        kwargs = metrics.record_request.call_args.kwargs
        assert kwargs["status"] == "success"
        assert kwargs["code"] == "OK"
        assert kwargs["audio_bytes"] == len(AUDIO)
        assert kwargs["duration"] >= 0

    def test_failure_recorded(self, tmp_path):
        """Failed requests are recorded with the error code."""
        client = FakeSpeechClient(error=SpeechHTTPError(429, "Too Many Requests"))
        with patch("tts_web.services.synthesizer.metrics") as metrics:
            with pytest.raises(RemoteError):
                make_synth(client).synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))

        metrics.record_request.assert_called_once_with(status="error", code=ErrorCode.RATE_LIMITED)


class TestSynthesizerFactory:
    """Tests for construction helpers and the singleton."""

    @pytest.fixture(autouse=True)
    def reset(self):
        reset_synthesizer()
        yield
        reset_synthesizer()

    def test_has_api_key(self):
        """has_api_key reflects the configured key."""
        assert SpeechSynthesizer(api_key="sk-test").has_api_key is True
        assert SpeechSynthesizer(api_key=None).has_api_key is False

    def test_from_config(self):
        """from_config takes the key from the openai section."""
        config = AppConfig(openai=OpenAIConfig(api_key="sk-config"))
        assert SpeechSynthesizer.from_config(config).has_api_key is True

    def test_default_factory_builds_openai_client(self, tmp_path):
        """Without a factory, the OpenAI client is built with the configured options."""
        config = AppConfig(openai=OpenAIConfig(api_key="sk-config", base_url="http://localhost:9/v1", timeout_s=7.0))
        synth = SpeechSynthesizer.from_config(config)

        with patch("tts_web.services.synthesizer.OpenAISpeechClient") as client_cls:
            client_cls.return_value.synthesize.return_value = AUDIO
            synth.synthesize(SynthesisRequest(text="hi", dest_dir=str(tmp_path)))

        client_cls.assert_called_once_with(
            api_key="sk-config", base_url="http://localhost:9/v1", timeout_s=7.0,
        )

    def test_singleton(self):
        """get_synthesizer returns the same instance until reset."""
        config = AppConfig()
        first = get_synthesizer(config)
        assert get_synthesizer(config) is first

        reset_synthesizer()
        assert get_synthesizer(config) is not first

    def test_singleton_rebuilt_for_new_config(self):
        """A different config gives a synthesizer built from that config."""
        first = get_synthesizer(AppConfig())
        assert first.has_api_key is False

        second = get_synthesizer(AppConfig(openai=OpenAIConfig(api_key="sk-other")))
        assert second is not first
        assert second.has_api_key is True
        assert get_synthesizer(AppConfig(openai=OpenAIConfig(api_key="sk-other"))) is second
