"""API middleware: correlation ID, principal context, request audit."""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from opsconsole.config.settings import get_settings
from opsconsole.core.context import correlation_id_ctx, principal_id_ctx
from opsconsole.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
REQUEST_LATENCY_METRIC = "http_request_latency_ms"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Generate or preserve correlation ID; attach to request.state, response header, and logging context."""

    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        correlation_id_ctx.set(correlation_id)

        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = correlation_id
        return response


class PrincipalContextMiddleware(BaseHTTPMiddleware):
    """
    Read the caller's principal id header into request.state and the logging context.
    The id is only a claim here; the principal dependency resolves and validates it.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        raw = request.headers.get(get_settings().principal_header)
        principal_id = raw.strip() if raw and raw.strip() else None
        request.state.principal_id = principal_id
        principal_id_ctx.set(principal_id)
        return await call_next(request)


class AuditTriggerMiddleware(BaseHTTPMiddleware):
    """After response: log structured request audit (correlation_id, principal_id, path, method, status_code, latency)."""

    def __init__(self, app, metrics: MetricsCollector) -> None:
        super().__init__(app)
        self._metrics = metrics

    async def dispatch(self, request: Request, call_next) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - started) * 1000
        self._metrics.observe_latency(REQUEST_LATENCY_METRIC, latency_ms, route=request.url.path)
        logger.info(
            "request_audit",
            extra={
                "event": "request_audit",
                "principal_id": getattr(request.state, "principal_id", None),
                "path": request.url.path,
                "method": request.method,
                "status_code": response.status_code,
                "latency_ms": round(latency_ms, 2),
            },
        )
        return response
