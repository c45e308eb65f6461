import json
import logging
import os
import time
import uuid

from dotenv import load_dotenv
from flask import Flask, g, request
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from prometheus_client import CollectorRegistry, Counter, Histogram

from calc_service.http_routes import register_routes
from calc_service.observability import get_current_trace_context, init_otel

load_dotenv()


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - logging
        base = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "timestamp": int(record.created * 1000),
        }
        if hasattr(record, "extra") and isinstance(record.extra, dict):
            base.update(record.extra)
        return json.dumps(base, separators=(",", ":"))


def configure_logging() -> logging.Logger:
    log_level = os.getenv("CALC_LOG_LEVEL", "INFO").upper()
    log_json = os.getenv("CALC_LOG_JSON", "1") == "1"

    logger = logging.getLogger("calc_service")
    logger.setLevel(log_level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            JsonFormatter() if log_json else logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        logger.addHandler(handler)
    return logger


def _build_metrics() -> dict:
    registry = CollectorRegistry(auto_describe=True)
    return {
        "registry": registry,
        "requests": Counter(
            "calc_requests_total",
            "Total requests",
            ["route", "method", "status"],
            registry=registry,
        ),
        "latency": Histogram(
            "calc_request_latency_seconds",
            "Request latency",
            ["route", "method"],
            registry=registry,
        ),
        "errors": Counter(
            "calc_errors_total",
            "Total 5xx responses",
            ["route", "method", "status"],
            registry=registry,
        ),
        "evaluations": Counter(
            "calc_evaluations_total",
            "Expression evaluations by outcome",
            ["outcome"],
            registry=registry,
        ),
    }


def create_app() -> Flask:
    logger = configure_logging()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = int(os.getenv("CALC_MAX_REQUEST_BYTES", "65536"))
    init_otel(app)

    rate_limit_enabled = os.getenv("CALC_RATE_LIMIT_ENABLED", "1") == "1"
    rate_limit = os.getenv("CALC_RATE_LIMIT", "60 per minute")
    limiter = (
        Limiter(
            key_func=get_remote_address,
            app=app,
            default_limits=[],
            storage_uri=os.getenv("CALC_RATE_LIMIT_STORAGE_URL") or "memory://",
        )
        if rate_limit_enabled
        else None
    )
    app.config["CALC_LIMITER"] = limiter
    app.config["CALC_RATE_LIMIT"] = rate_limit

    metrics = _build_metrics()
    app.config["CALC_METRICS"] = metrics

    @app.before_request
    def start_request():
        g.request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        g.request_start = time.time()
        otel_context = get_current_trace_context()
        if otel_context:
            g.otel_trace_id = otel_context.get("trace_id")

    @app.after_request
    def finalize_request(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers["X-Request-ID"] = request_id
        route = request.url_rule.rule if request.url_rule else "unmatched"
        method = request.method
        status = str(response.status_code)
        duration = time.time() - getattr(g, "request_start", time.time())
        metrics["requests"].labels(route, method, status).inc()
        metrics["latency"].labels(route, method).observe(duration)
        if response.status_code >= 500:
            metrics["errors"].labels(route, method, status).inc()

        log_extra = {
            "request_id": request_id,
            "route": route,
            "method": method,
            "status": response.status_code,
            "latency_ms": int(duration * 1000),
        }
        otel_trace_id = getattr(g, "otel_trace_id", None)
        if otel_trace_id:
            log_extra["otel_trace_id"] = otel_trace_id
        logger.info("request", extra={"extra": log_extra})
        return response

    register_routes(app)
    return app


if __name__ == "__main__":
    port = int(os.getenv("CALC_PORT", "8080"))
    host = os.getenv("CALC_HOST", "127.0.0.1")
    create_app().run(host=host, port=port, debug=False)
