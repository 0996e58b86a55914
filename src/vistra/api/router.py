"""Root API router.

Probes and application info live at the root; every feature router,
including auth, is mounted under ``API_PREFIX``.
"""

from collections.abc import Awaitable, Callable
from typing import Any

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from vistra import __version__
from vistra.api.dependencies import DBSession
from vistra.config import settings
from vistra.core.auth import auth_router
from vistra.core.permissions.models import Permission
from vistra.modules import discover_modules


logger = structlog.get_logger()

API_PREFIX = "/api/v1"


class HealthResponse(BaseModel):
    status: str


class ReadinessResponse(BaseModel):
    """Overall status plus the outcome of each named check."""

    status: str
    checks: dict[str, str]


async def _check_database(db: AsyncSession) -> None:
    await db.execute(text("SELECT 1"))


async def _check_permission_catalog(db: AsyncSession) -> None:
    # Fails until migrations have created the access-control schema
    await db.execute(select(func.count()).select_from(Permission))


READINESS_CHECKS: dict[str, Callable[[AsyncSession], Awaitable[None]]] = {
    "database": _check_database,
    "permission_catalog": _check_permission_catalog,
}


probe_router = APIRouter(tags=["health"])


@probe_router.get("/health/live", response_model=HealthResponse, summary="Liveness probe")
async def liveness() -> HealthResponse:
    """Return 200 while the process can serve requests."""
    return HealthResponse(status="alive")


@probe_router.get(
    "/health/ready",
    response_model=ReadinessResponse,
    summary="Readiness probe",
    responses={503: {"model": ReadinessResponse, "description": "A check failed"}},
)
async def readiness(db: DBSession) -> JSONResponse:
    """Run every readiness check; any failure makes the service degraded."""
    checks: dict[str, str] = {}

    for name, check in READINESS_CHECKS.items():
        try:
            await check(db)
        except (SQLAlchemyError, OSError) as exc:
            logger.warning("readiness_check_failed", check=name, error=str(exc))
            checks[name] = "unavailable"
            # Later checks would fail on the same broken connection
            break
        checks[name] = "ok"

    ready = len(checks) == len(READINESS_CHECKS) and all(v == "ok" for v in checks.values())
    body = ReadinessResponse(status="ready" if ready else "degraded", checks=checks)
    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )


module_routers = discover_modules()


@probe_router.get("/info", summary="Application info")
async def info() -> dict[str, Any]:
    """Describe the running application and the mounted API modules."""
    return {
        "app": settings.app_name,
        "version": __version__,
        "environment": settings.environment,
        "api_prefix": API_PREFIX,
        "modules": sorted(
            router.prefix.lstrip("/") for router in [auth_router, *module_routers]
        ),
    }


v1_router = APIRouter(prefix=API_PREFIX)
for feature_router in [auth_router, *module_routers]:
    v1_router.include_router(feature_router)

api_router = APIRouter()
api_router.include_router(probe_router)
api_router.include_router(v1_router)
