"""
Prometheus Metrics for tts-web.

Metrics Exposed:
    tts_web_requests_total{status,code}   - Synthesis requests by outcome
    tts_web_request_duration_seconds      - Latency of successful requests
    tts_web_audio_bytes_total             - Audio bytes written to disk

Usage:
    from tts_web.core.metrics import metrics

    metrics.record_request(status="success", code="OK", duration=0.8, audio_bytes=48000)
    metrics.record_request(status="error", code="RATE_LIMITED")

    content, content_type = metrics.get_metrics_response()
"""
from __future__ import annotations

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class SpeechMetrics:
    """
    Synthesis metrics on a private CollectorRegistry, so several instances
    (e.g. in tests) never clash on metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self._registry = registry or CollectorRegistry()

        self._requests_total = Counter(
            "tts_web_requests_total",
            "Total synthesis requests",
            ["status", "code"],
            registry=self._registry,
        )
        self._request_duration = Histogram(
            "tts_web_request_duration_seconds",
            "Synthesis request duration in seconds",
            buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )
        self._audio_bytes_total = Counter(
            "tts_web_audio_bytes_total",
            "Total audio bytes written",
            registry=self._registry,
        )

    @property
    def registry(self) -> CollectorRegistry:
        return self._registry

    def record_request(
        self,
        status: str,
        code: str,
        duration: Optional[float] = None,
        audio_bytes: int = 0,
    ) -> None:
        """
        Record a finished synthesis request.

        Args:
            status: "success" or "error"
            code: "OK" or an ErrorCode value
            duration: Request duration in seconds (successes only)
            audio_bytes: Size of the written file
        """
        self._requests_total.labels(status=status, code=code).inc()
        if duration is not None:
            self._request_duration.observe(duration)
        if audio_bytes > 0:
            self._audio_bytes_total.inc(audio_bytes)

    def get_metrics_response(self) -> tuple[bytes, str]:
        """Return (content, content_type) in Prometheus text format."""
        return generate_latest(self._registry), CONTENT_TYPE_LATEST


# Global instance: from tts_web.core.metrics import metrics
metrics = SpeechMetrics()
