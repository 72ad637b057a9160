"""
tts-web: Web Front End for OpenAI Text-to-Speech.

Accepts text from an HTML form, sends it to the OpenAI speech API, saves the
returned audio under a public folder and renders a page linking to it.

Features:
    - Form handler (/, /synthesize) and JSON API (/v1/speech)
    - Six voices, two models, six audio formats
    - Collision-avoiding file names (uuid or monotonic timestamp suffixes)
    - Typed errors with codes, mapped from upstream HTTP statuses
    - Prometheus metrics and structured logging

Example Usage:
    >>> from tts_web.services import SpeechSynthesizer, SynthesisRequest
    >>>
    >>> synth = SpeechSynthesizer(api_key="sk-...")
    >>> result = synth.synthesize(SynthesisRequest(
    ...     text="Hello world", dest_dir="./public/audio", suffix_type="milli"))
    >>> result.file_name
    'speech-audio-81234567890.mp3'
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
