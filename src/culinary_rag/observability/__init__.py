"""
Observability Module - OpenTelemetry tracing

USAGE:
------
# At application startup:
from culinary_rag.observability import init_tracing

init_tracing()  # no-op unless TRACING_ENABLED=true

# In code that needs tracing:
from culinary_rag.observability import get_tracer

with get_tracer().start_span("rag.answer") as span:
    span.set_attribute("rag.retrieval.doc_count", 8)
"""

from __future__ import annotations

import logging

from culinary_rag.observability.config import (
    TracingConfig,
    get_tracing_config,
    reset_tracing_config,
)
from culinary_rag.observability.tracer import (
    NoOpSpan,
    NoOpTracer,
    SpanProtocol,
    TracerProtocol,
    get_tracer,
    reset_tracer,
)

logger = logging.getLogger(__name__)

_tracing_initialized = False


def init_tracing(config: TracingConfig | None = None) -> bool:
    """
    Install an OTLP-exporting tracer provider and the OpenAI instrumentor.

    Returns:
        True if tracing was initialized, False if disabled or unavailable
    """
    global _tracing_initialized
    if _tracing_initialized:
        return True

    config = config or get_tracing_config()
    if not config.enabled:
        logger.debug("Tracing disabled")
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
    except ImportError as e:
        logger.warning(f"OpenTelemetry not installed, tracing disabled: {e}")
        return False

    exporter = (
        OTLPSpanExporter(endpoint=config.collector_endpoint)
        if config.collector_endpoint
        else OTLPSpanExporter()
    )
    provider = TracerProvider(resource=Resource.create({"service.name": config.service_name}))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    logger.info(f"Tracing enabled for {config.service_name}")

    try:
        from openinference.instrumentation.openai import OpenAIInstrumentor

        OpenAIInstrumentor().instrument()
        logger.info("Registered OpenAI instrumentor")
    except ImportError:
        logger.debug("OpenAI instrumentor not available")

    reset_tracer()
    _tracing_initialized = True
    return True


def shutdown_tracing() -> None:
    """Flush and shut down the tracer provider."""
    global _tracing_initialized

    if not _tracing_initialized:
        return

    from opentelemetry import trace

    provider = trace.get_tracer_provider()
    if hasattr(provider, "shutdown"):
        provider.shutdown()

    reset_tracer()
    reset_tracing_config()
    _tracing_initialized = False


__all__ = [
    "init_tracing",
    "shutdown_tracing",
    "TracingConfig",
    "get_tracing_config",
    "reset_tracing_config",
    "TracerProtocol",
    "SpanProtocol",
    "NoOpTracer",
    "NoOpSpan",
    "get_tracer",
    "reset_tracer",
]
