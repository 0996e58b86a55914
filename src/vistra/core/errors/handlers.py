"""RFC 7807 Problem Details exception handlers.

Every error leaving the API has the same shape: the standard Problem
Details members, plus a stable ``code`` clients can branch on and the
request's ``trace_id``. Domain exceptions may add their ``details`` as
extension members (e.g. ``invalid_permissions``).

See: https://tools.ietf.org/html/rfc7807
"""

from http import HTTPStatus
from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from vistra.config import settings
from vistra.core.errors.exceptions import AppException


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()

PROBLEM_MEDIA_TYPE = "application/problem+json"


class FieldError(BaseModel):
    """Represents a single field validation error."""

    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details response schema.

    Attributes:
        type: URI reference identifying the problem type
        title: Short human-readable summary
        status: HTTP status code
        detail: Human-readable explanation specific to this occurrence
        code: Stable machine-readable error code
        instance: URI reference identifying this specific occurrence
        errors: List of field-level errors (for validation errors)
        trace_id: Request trace ID for debugging
    """

    type: str
    title: str
    status: int
    detail: str
    code: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    trace_id: str | None = None

    model_config = {"extra": "allow"}


def problem_response(
    request: Request,
    status_code: int,
    code: str,
    detail: str,
    errors: list[FieldError] | None = None,
    extensions: dict[str, Any] | None = None,
) -> JSONResponse:
    """Render a Problem Details response for ``request``.

    Extension members never replace the standard ones.
    """
    problem = ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{code}",
        title=code.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        code=code,
        instance=request.url.path,
        errors=errors,
        trace_id=getattr(request.state, "trace_id", None),
    )
    content = problem.model_dump(exclude_none=True)
    for key, value in (extensions or {}).items():
        content.setdefault(key, value)

    return JSONResponse(
        status_code=status_code,
        content=content,
        media_type=PROBLEM_MEDIA_TYPE,
    )


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Render a domain exception with its code and details."""
    server_side = exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR
    log = logger.error if server_side else logger.warning
    log(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=request.url.path,
        details=exc.details,
    )
    return problem_response(
        request,
        status_code=exc.status_code,
        code=exc.error_code,
        detail=exc.message,
        extensions=exc.details,
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render framework errors such as unknown routes or wrong methods."""
    phrase = HTTPStatus(exc.status_code).phrase
    detail = exc.detail if isinstance(exc.detail, str) else phrase
    response = problem_response(
        request,
        status_code=exc.status_code,
        code=phrase.lower().replace(" ", "_").replace("-", "_"),
        detail=detail,
    )
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation failures with one entry per bad field."""
    errors = [
        FieldError(
            field=".".join(str(part) for part in error.get("loc", ()) if part != "body")
            or "unknown",
            message=error.get("msg", "Invalid value"),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "validation_error",
        path=request.url.path,
        fields=[error.field for error in errors],
    )
    return problem_response(
        request,
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        detail="Request validation failed",
        errors=errors,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unexpected exception and answer with a bare 500.

    Nothing about the exception is sent to the client.
    """
    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
    )
    return problem_response(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code="internal_error",
        detail="Internal server error",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the Problem Details handlers on ``app``."""
    handlers: dict[Any, Any] = {
        AppException: app_exception_handler,
        StarletteHTTPException: http_exception_handler,
        RequestValidationError: validation_exception_handler,
        Exception: generic_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, cast("ExceptionHandler", handler))
