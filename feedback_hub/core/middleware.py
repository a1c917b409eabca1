"""
HTTP middleware stack: correlation IDs, request logging and the maintenance-mode gate.
"""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from feedback_hub.core.config import settings
from feedback_hub.core.logging import request_id_var

logger = logging.getLogger(__name__)


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Propagates (or mints) a request ID and exposes it to the log formatter."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(settings.request_id_header) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[settings.request_id_header] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response


# Reachable while maintenance mode is on: sign-in flows, health probes and the status check itself
MAINTENANCE_ALLOWED_PREFIXES = (
    f"{settings.api_prefix}/auth",
    f"{settings.api_prefix}/maintenance-status",
    "/health",
    "/readiness",
)


class MaintenanceModeMiddleware(BaseHTTPMiddleware):
    """
    When MAINTENANCE_MODE is on, answers 503 for every route outside the allow-list.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if settings.maintenance_mode and not path.startswith(MAINTENANCE_ALLOWED_PREFIXES):
            logger.info("Request blocked by maintenance mode", extra={"path": path})
            return JSONResponse(
                status_code=503,
                content={
                    "success": False,
                    "maintenance": True,
                    "errors": [{
                        "msg": "Service temporarily unavailable - system maintenance in progress",
                        "code": "MAINTENANCE_MODE",
                    }],
                },
            )
        return await call_next(request)
