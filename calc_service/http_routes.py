from __future__ import annotations

import logging
import os
from typing import Any, Dict, Tuple

from flask import Response, current_app, jsonify, request
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from calc_service.errors import RUNTIME, CalcError, MissingOperandError
from calc_service.evaluator import evaluate
from calc_service.observability import annotate_evaluation

logger = logging.getLogger("calc_service.http")

INVALID_EXPRESSION_BODY = {"error": "Expression is not valid"}
INTERNAL_ERROR_BODY = {"error": "Internal server error"}


def _api_enabled() -> bool:
    return os.getenv("CALC_ENABLE_API", "1") == "1"


def _strict_syntax_status() -> bool:
    return os.getenv("CALC_STRICT_SYNTAX_STATUS", "0") == "1"


def error_response(exc: CalcError) -> Tuple[Dict[str, Any], int]:
    """Map an evaluation error to the outward body and status code."""
    if exc.kind == RUNTIME:
        return INTERNAL_ERROR_BODY, 500
    if isinstance(exc, MissingOperandError) and not _strict_syntax_status():
        return INTERNAL_ERROR_BODY, 500
    return INVALID_EXPRESSION_BODY, 422


def register_routes(app) -> None:
    limiter = app.config.get("CALC_LIMITER")
    rate_limit = app.config.get("CALC_RATE_LIMIT")

    def _limit_route(func):
        if limiter:
            return limiter.limit(rate_limit)(func)
        return func

    def _count(outcome: str) -> None:
        metrics = current_app.config.get("CALC_METRICS")
        if metrics:
            metrics["evaluations"].labels(outcome).inc()

    @app.errorhandler(405)
    def method_not_allowed(_exc):
        return Response(status=405)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": "calc_service"}

    @app.get("/ready")
    def ready():
        if not _api_enabled():
            return {"status": "disabled", "service": "calc_service"}, 503
        return {"status": "ready", "service": "calc_service"}

    @app.get("/metrics")
    def metrics():
        if os.getenv("CALC_METRICS_ENABLED", "1") != "1":
            return {"status": "disabled", "service": "calc_service"}, 503
        registry = current_app.config["CALC_METRICS"]["registry"]
        return Response(generate_latest(registry), mimetype=CONTENT_TYPE_LATEST)

    @app.post("/api/v1/calculate")
    @app.post("/calculate", endpoint="calculate_alias")
    @_limit_route
    def calculate():
        if not _api_enabled():
            return jsonify({"error": "API disabled"}), 503

        payload = request.get_json(force=True, silent=True)
        if not isinstance(payload, dict):
            _count("bad_request")
            return Response(status=400)
        expression = payload.get("expression")
        if not isinstance(expression, str) or not expression.strip():
            _count("bad_request")
            return Response(status=400)

        try:
            result = evaluate(expression)
        except CalcError as exc:
            body, status = error_response(exc)
            _count(exc.kind)
            annotate_evaluation(exc.kind, exc.code)
            logger.info(
                "evaluation_failed",
                extra={"extra": {"code": exc.code, "kind": exc.kind, "status": status}},
            )
            return jsonify(body), status

        _count("ok")
        annotate_evaluation("ok")
        return jsonify({"result": result}), 200
