from __future__ import annotations

import logging
import os

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.flask import FlaskInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


logger = logging.getLogger("calc_service.observability")


def otel_enabled() -> bool:
    return os.getenv("CALC_OTEL_ENABLED", "0") == "1"


def init_otel(app) -> None:
    if not otel_enabled():
        return

    service_name = os.getenv("CALC_SERVICE_NAME", "calc-service")
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)

    endpoint = os.getenv("CALC_OTEL_EXPORTER_OTLP_ENDPOINT", "http://127.0.0.1:4318/v1/traces")
    exporter = OTLPSpanExporter(endpoint=endpoint)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app)
    logger.info("OpenTelemetry enabled", extra={"extra": {"endpoint": endpoint}})


def get_current_trace_context() -> dict[str, str] | None:
    if not otel_enabled():
        return None

    span = trace.get_current_span()
    if not span:
        return None

    ctx = span.get_span_context()
    if not ctx or not ctx.is_valid:
        return None

    return {
        "trace_id": f"{ctx.trace_id:032x}",
        "span_id": f"{ctx.span_id:016x}",
    }


def annotate_evaluation(outcome: str, error_code: str | None = None) -> None:
    """Attach the evaluation outcome to the active span, if any."""
    if not otel_enabled():
        return
    span = trace.get_current_span()
    if not span or not span.is_recording():
        return
    span.set_attribute("calc.outcome", outcome)
    if error_code:
        span.set_attribute("calc.error_code", error_code)
