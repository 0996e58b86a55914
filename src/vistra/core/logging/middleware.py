"""Request logging middleware.

Logs every HTTP request and its outcome through structlog. The
request ID and the authenticated user ID are picked up from
``request.state`` when the upstream middlewares have set them.
"""

import time
from typing import Any

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


logger = structlog.get_logger()

DEFAULT_EXCLUDED_PATHS = [
    "/health/live",
    "/health/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
]


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware that logs all HTTP requests and responses.

    Responses with a 5xx status are logged at error level, 4xx at
    warning level (denied access shows up here) and the rest at info.
    """

    def __init__(
        self,
        app: Any,
        exclude_paths: list[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or DEFAULT_EXCLUDED_PATHS

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path

        log_data: dict[str, Any] = {
            "method": method,
            "path": path,
            "client_ip": get_client_ip(request),
        }
        if request.url.query:
            log_data["query"] = str(request.url.query)

        logger.info("request_started", **log_data)

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.exception(
                "request_failed",
                method=method,
                path=path,
                duration_ms=_elapsed_ms(start_time),
                error=str(exc),
            )
            raise

        completion_data: dict[str, Any] = {
            "method": method,
            "path": path,
            "status_code": response.status_code,
            "duration_ms": _elapsed_ms(start_time),
        }

        user_id = getattr(request.state, "user_id", None)
        if user_id:
            completion_data["user_id"] = str(user_id)

        if response.status_code >= 500:
            logger.error("request_completed", **completion_data)
        elif response.status_code >= 400:
            logger.warning("request_completed", **completion_data)
        else:
            logger.info("request_completed", **completion_data)

        return response


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


def get_client_ip(request: Request) -> str | None:
    """Extract the real client IP from a request.

    Handles X-Forwarded-For and X-Real-IP headers for proxied requests.

    Args:
        request: The incoming request

    Returns:
        The client IP address or None
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # The first entry is the original client
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return None
