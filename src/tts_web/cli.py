"""
Command-Line Interface for tts-web.

Synthesizes speech without running the HTTP server, lists the accepted
options, or starts the server.

Usage Examples:
    # Save ./speech-audio-<uuid>.mp3
    tts-web "Hello world"

    # Choose voice, format and destination
    tts-web "Hello world" --voice onyx --format wav --out-dir ./public/audio

    # Fixed file name (overwrites on repeat)
    tts-web "Hello world" --suffix none --file-name greeting

    # JSON summary
    tts-web "Hello world" --json

    # Accepted voices, models, formats, suffix types
    tts-web --list

    # Run the web server
    tts-web --serve --port 3000

Environment Variables:
    OPENAI_API_KEY: API key (unless --api-key is given)
    OPENAI_BASE_URL: Alternative API endpoint
    TTS_WEB_SETTINGS: Settings file (default config/settings.yaml)

Exit codes: 0 on success, 1 when synthesis fails.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional
from uuid import uuid4

from tts_web.core.config import load_settings
from tts_web.core.logging import configure_logging, get_logger, info, set_request_id
from tts_web.services.errors import SpeechError
from tts_web.services.synthesizer import SpeechSynthesizer, SynthesisRequest
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


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="tts-web CLI (OpenAI text-to-speech)")

    parser.add_argument("text", nargs="?", help="Text to synthesize")

    # Synthesis options (validated by the synthesizer, not argparse)
    parser.add_argument("--voice", default=DEFAULT_VOICE, help=f"Voice (default {DEFAULT_VOICE})")
    parser.add_argument("--model", default=DEFAULT_MODEL, help=f"Model (default {DEFAULT_MODEL})")
    parser.add_argument("--format", dest="response_format", default=DEFAULT_FORMAT,
                        help=f"Audio format (default {DEFAULT_FORMAT})")
    parser.add_argument("--suffix", dest="suffix_type", default=DEFAULT_SUFFIX_TYPE,
                        help=f"Filename suffix type (default {DEFAULT_SUFFIX_TYPE})")
    parser.add_argument("--file-name", default=DEFAULT_FILE_NAME,
                        help=f"Base file name (default {DEFAULT_FILE_NAME})")
    parser.add_argument("--out-dir", default=DEFAULT_DEST_DIR,
                        help="Existing, writable output directory (default ./)")
    parser.add_argument("--api-key", help="API key (overrides OPENAI_API_KEY)")
    parser.add_argument("--json", action="store_true", help="Print JSON summary")

    # Other modes
    parser.add_argument("--list", action="store_true",
                        help="Show accepted voices, models, formats and suffix types")
    parser.add_argument("--serve", action="store_true", help="Run the web server")
    parser.add_argument("--port", type=int, help="Server port (with --serve)")

    return parser.parse_args(argv)


def _print_options() -> None:
    print(f"voices:   {', '.join(ALLOWED_VOICES)}")
    print(f"models:   {', '.join(ALLOWED_MODELS)}")
    print(f"formats:  {', '.join(ALLOWED_FORMATS)}")
    print(f"suffixes: {', '.join(ALLOWED_SUFFIX_TYPES)}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 if synthesis failed).
    """
    args = _parse_args(argv)

    if args.list:
        _print_options()
        return 0

    if args.serve:
        from tts_web.main import run
        run(port=args.port)
        return 0

    configure_logging()
    log = get_logger("tts-web.cli")
    set_request_id(str(uuid4())[:12])

    settings = load_settings(missing_ok=True)
    synthesizer = SpeechSynthesizer.from_config(settings.get_app_config())

    request = SynthesisRequest(
        text=args.text,
        voice=args.voice,
        model=args.model,
        response_format=args.response_format,
        suffix_type=args.suffix_type,
        dest_dir=args.out_dir,
        file_name=args.file_name,
        api_key=args.api_key,
    )

    try:
        result = synthesizer.synthesize(request)
    except SpeechError as e:
        if args.json:
            print(json.dumps(e.to_dict(), ensure_ascii=False))
        else:
            print(f"Error generating speech audio: {e.message}", file=sys.stderr)
        return 1

    info(log, "saved", out=result.file_path, bytes=result.bytes_written)
    if args.json:
        print(json.dumps({
            "ok": True,
            "file_path": result.file_path,
            "file_name": result.file_name,
            "bytes": result.bytes_written,
            "seconds": round(result.seconds, 3),
        }, ensure_ascii=False))
    else:
        print(result.file_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
