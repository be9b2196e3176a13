"""OpenTelemetry instrumentation for model calls and argument decoding."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from .errors import format_path

_tracer: Optional[trace.Tracer] = None


def setup_tracing(
    exporter: Optional[SpanExporter] = None,
    service_name: str = "toolshape",
) -> trace.Tracer:
    """Configure OpenTelemetry tracing.

    Args:
        exporter: A span exporter. Defaults to ConsoleSpanExporter.
        service_name: The service name for the tracer.

    Returns:
        A configured Tracer instance.
    """
    global _tracer

    from opentelemetry.sdk.resources import Resource

    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)

    if exporter is None:
        exporter = ConsoleSpanExporter()

    provider.add_span_processor(SimpleSpanProcessor(exporter))
    _tracer = provider.get_tracer("toolshape")
    return _tracer


def get_tracer() -> Optional[trace.Tracer]:
    """Get the current tracer, if tracing has been set up."""
    return _tracer


def disable_tracing() -> None:
    global _tracer
    _tracer = None


@contextmanager
def llm_span(
    provider_name: str,
    model: str,
    tool_names: Sequence[str] = (),
) -> Iterator[trace.Span]:
    """Create a span around a forced tool call following GenAI semantic conventions."""
    tracer = _tracer
    if tracer is None:
        yield trace.INVALID_SPAN
        return

    with tracer.start_as_current_span(f"llm.chat {provider_name}.{model}") as span:
        span.set_attribute("gen_ai.system", provider_name)
        span.set_attribute("gen_ai.request.model", model)
        if tool_names:
            span.set_attribute("gen_ai.request.tools", list(tool_names))
        yield span


@contextmanager
def decode_span(tool_name: str, wrapped: bool = False) -> Iterator[trace.Span]:
    """Create a span around one run of the decode pipeline."""
    tracer = _tracer
    if tracer is None:
        yield trace.INVALID_SPAN
        return

    with tracer.start_as_current_span(f"toolshape.decode {tool_name}") as span:
        span.set_attribute("toolshape.tool.name", tool_name)
        span.set_attribute("toolshape.root_wrapped", wrapped)
        yield span


def record_user_message(span: trace.Span, content: str) -> None:
    """Record a user message as a span event."""
    if span.is_recording():
        span.add_event("gen_ai.user.message", attributes={"content": content})


def record_tool_call(span: trace.Span, name: str, arguments: str) -> None:
    """Record the raw tool call the model returned."""
    if span.is_recording():
        span.add_event("gen_ai.tool.call", attributes={"name": name, "arguments": arguments})


def record_usage(span: trace.Span, input_tokens: int, output_tokens: int) -> None:
    """Record token usage on the span."""
    if span.is_recording():
        span.set_attribute("gen_ai.usage.input_tokens", input_tokens)
        span.set_attribute("gen_ai.usage.output_tokens", output_tokens)


def record_reparse_error(span: trace.Span, path: Sequence, raw_text: str) -> None:
    if span.is_recording():
        span.add_event(
            "toolshape.reparse_error",
            attributes={"path": format_path(path), "raw_text": raw_text},
        )


def record_validation_issues(span: trace.Span, issues: Sequence) -> None:
    """Record each validation issue as an event and the total as an attribute."""
    if not span.is_recording():
        return
    span.set_attribute("toolshape.validation.issue_count", len(issues))
    for issue in issues:
        span.add_event(
            "toolshape.validation_issue",
            attributes={"path": format_path(issue.path), "expected": issue.expected},
        )
