"""Shared fixtures: isolate settings and tracing between tests."""

import threading
from typing import List, Sequence

import pytest
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult

from toolshape.config import reset_settings
from toolshape.tracing import disable_tracing, setup_tracing


class InMemorySpanExporter(SpanExporter):
    """Simple in-memory span exporter for testing."""

    def __init__(self) -> None:
        self._spans: List[ReadableSpan] = []
        self._lock = threading.Lock()

    def export(self, spans: Sequence[ReadableSpan]) -> SpanExportResult:
        with self._lock:
            self._spans.extend(spans)
        return SpanExportResult.SUCCESS

    def get_finished_spans(self) -> List[ReadableSpan]:
        with self._lock:
            return list(self._spans)

    def clear(self) -> None:
        with self._lock:
            self._spans.clear()

    def shutdown(self) -> None:
        self.clear()


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for name in ("PROVIDER", "MODEL", "MAX_DEPTH", "APPLY_DEFAULTS", "LOG_LEVEL", "LOG_FORMAT"):
        monkeypatch.delenv(f"TOOLSHAPE_{name}", raising=False)
    monkeypatch.setattr("toolshape.config.load_dotenv", lambda *args, **kwargs: False)
    reset_settings()
    yield
    reset_settings()
    disable_tracing()


@pytest.fixture
def span_exporter():
    """Set up tracing with an in-memory exporter for testing."""
    exporter = InMemorySpanExporter()
    setup_tracing(exporter=exporter, service_name="test-toolshape")
    return exporter
