"""
HTTP Routes.

Endpoints:
    GET  /            - Input form (text, voice, format)
    POST /synthesize  - Form handler: synthesize, save, render result page
    POST /v1/speech   - JSON API exposing every adapter parameter
    GET  /health      - Health check
    GET  /metrics     - Prometheus metrics

Saved files are served by the static mount at /audio (see main.py).

Request Flow (form handler):
    1. Generate a request id for tracing
    2. Fill parameters the form does not carry from configuration
    3. Call SpeechSynthesizer.synthesize()
    4. Render result.html, or answer 500 with a plain-text message

Error Handling:
    Every synthesis failure answers HTTP 500. The form handler returns
    plain text:

        Error generating speech audio: API rate limit exceeded.

    The JSON API returns the error's to_dict():

        {"ok": false, "error": "RATE_LIMITED", "kind": "remote", "message": "..."}
"""
from __future__ import annotations

import os
import uuid
from pathlib import Path
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.templating import Jinja2Templates

from tts_web.api.dependencies import get_app_config, get_speech_synthesizer
from tts_web.api.schemas import SpeechRequest, SpeechResponse
from tts_web.core.config import AppConfig
from tts_web.core.logging import get_logger, info, set_request_id
from tts_web.core.metrics import metrics
from tts_web.services.errors import SpeechError
from tts_web.services.synthesizer import SpeechSynthesizer, SynthesisRequest
from tts_web.speech.options import ALLOWED_FORMATS, ALLOWED_VOICES

router = APIRouter()

_LOG = get_logger("tts-web.api")

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

AUDIO_URL_PREFIX = "/audio"


def _new_request_id() -> str:
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)
    return rid


def _audio_url(file_name: str) -> str:
    return f"{AUDIO_URL_PREFIX}/{file_name}"


@router.get("/", response_class=HTMLResponse)
def index(request: Request, config: AppConfig = Depends(get_app_config)):
    """Render the input form."""
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "voices": ALLOWED_VOICES,
            "formats": ALLOWED_FORMATS,
            "default_voice": config.synthesis.voice,
            "default_format": config.synthesis.response_format,
        },
    )


@router.post("/synthesize")
def synthesize_form(
    request: Request,
    text: Annotated[Optional[str], Form()] = None,
    voice: Annotated[Optional[str], Form()] = None,
    response_format: Annotated[Optional[str], Form(alias="format")] = None,
    config: AppConfig = Depends(get_app_config),
    synthesizer: SpeechSynthesizer = Depends(get_speech_synthesizer),
):
    """
    Form handler.

    Only text, voice and format come from the user. Model, suffix type, file
    name and destination come from the synthesis section of the settings.

    Returns:
        result.html linking to /audio/<file name>, or HTTP 500 plain text
        "Error generating speech audio: <message>".
    """
    rid = _new_request_id()
    synth = config.synthesis

    synth_request = SynthesisRequest(
        text=text,
        voice=voice if voice is not None else synth.voice,
        model=synth.model,
        response_format=(
            response_format if response_format is not None else synth.response_format
        ),
        suffix_type=synth.suffix_type,
        dest_dir=synth.output_dir,
        file_name=synth.file_name,
    )

    try:
        result = synthesizer.synthesize(synth_request)
    except SpeechError as e:
        return PlainTextResponse(
            f"Error generating speech audio: {e.message}",
            status_code=500,
            headers={"X-Request-Id": rid},
        )

    info(_LOG, "form_result", file_name=result.file_name)
    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "file_name": result.file_name,
            "audio_url": _audio_url(result.file_name),
        },
        headers={"X-Request-Id": rid},
    )


@router.post("/v1/speech", response_model=SpeechResponse)
def speech_v1(
    req: SpeechRequest,
    config: AppConfig = Depends(get_app_config),
    synthesizer: SpeechSynthesizer = Depends(get_speech_synthesizer),
):
    """
    JSON synthesis endpoint.

    Example:
        curl -X POST http://localhost:3000/v1/speech \\
            -H "Content-Type: application/json" \\
            -d '{"input": "Hello world", "voice": "onyx", "suffix_type": "milli"}'

    Returns:
        200 {"ok": true, "file_name", "url", "bytes", "request_id"}
        500 error dict on any failure
    """
    rid = _new_request_id()
    synth = config.synthesis

    synth_request = SynthesisRequest(
        text=req.input,
        voice=req.voice if req.voice is not None else synth.voice,
        model=req.model if req.model is not None else synth.model,
        response_format=(
            req.response_format if req.response_format is not None else synth.response_format
        ),
        suffix_type=req.suffix_type if req.suffix_type is not None else synth.suffix_type,
        dest_dir=synth.output_dir,
        file_name=req.file_name if req.file_name is not None else synth.file_name,
    )

    try:
        result = synthesizer.synthesize(synth_request)
    except SpeechError as e:
        content = e.to_dict()
        content["request_id"] = rid
        return JSONResponse(status_code=500, content=content, headers={"X-Request-Id": rid})

    return SpeechResponse(
        file_name=result.file_name,
        url=_audio_url(result.file_name),
        request_id=rid,
        bytes=result.bytes_written,
    )


@router.get("/health")
def health(
    config: AppConfig = Depends(get_app_config),
    synthesizer: SpeechSynthesizer = Depends(get_speech_synthesizer),
):
    """
    Health check.

    Returns:
        ok: True when the output directory is writable and an API key is set
        output_dir / output_dir_writable: Public audio folder status
        api_key_configured: Whether a fallback API key is present
        default_model / default_voice / default_format: Form defaults
    """
    output_dir = Path(config.synthesis.output_dir).resolve()
    writable = output_dir.is_dir() and os.access(output_dir, os.W_OK)
    return {
        "ok": bool(writable and synthesizer.has_api_key),
        "output_dir": str(output_dir),
        "output_dir_writable": writable,
        "api_key_configured": synthesizer.has_api_key,
        "default_model": config.synthesis.model,
        "default_voice": config.synthesis.voice,
        "default_format": config.synthesis.response_format,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus metrics in text exposition format."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
