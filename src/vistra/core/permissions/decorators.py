"""Permission decorators for route protection.

This module provides decorators that can be applied to FastAPI
routes to require specific permissions. The wrapped route must
declare ``current_user`` and ``db`` parameters; it may also declare
``permission_cache`` to share resolved permissions with the handler.
"""

from collections.abc import Awaitable, Callable, Sequence
from functools import wraps
from typing import TYPE_CHECKING, Any, ParamSpec, TypeVar, cast

from vistra.core.errors import AppException, UnauthorizedError
from vistra.core.permissions.cache import PermissionCache
from vistra.core.permissions.checker import AccessPolicy, PermissionChecker, RequiredPermission
from vistra.core.permissions.resolver import PermissionResolver


if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from vistra.modules.users.models import User


P = ParamSpec("P")
R = TypeVar("R")


def _get_request_context(
    kwargs: dict[str, Any],
) -> tuple["User | None", "AsyncSession | None", PermissionCache | None]:
    """Extract user, db session and permission cache from route kwargs."""
    user = cast("User | None", kwargs.get("current_user"))
    db = cast("AsyncSession | None", kwargs.get("db"))
    cache = cast("PermissionCache | None", kwargs.get("permission_cache"))
    return user, db, cache


def require_access(
    permission: tuple[str, str] | None = None,
    any_of: Sequence[str] | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that guards a route with a permission policy.

    Usage:
        @router.post("/users/{user_id}/roles")
        @require_access(("users", "write"), any_of=["roles:*", "roles:write"])
        async def assign_role(user_id: UUID, current_user: CurrentUser, db: DBSession):
            ...

    Args:
        permission: (resource, action) checked with wildcard matching
        any_of: Permission names, one of which must be held verbatim

    Returns:
        Decorator function
    """
    policy = AccessPolicy(
        permission=RequiredPermission(*permission) if permission else None,
        any_of=tuple(any_of or ()),
    )

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            user, db, cache = _get_request_context(kwargs)

            if user is None:
                raise UnauthorizedError()

            if db is None:
                raise AppException(
                    "Permission check failed",
                    error_code="permission_check_failed",
                )

            checker = PermissionChecker(PermissionResolver(db, cache=cache))
            await checker.require(user.id, policy)

            return await func(*args, **kwargs)

        return wrapper

    return decorator


def require_permission(
    resource: str, action: str
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires a single permission, wildcards honoured.

    Usage:
        @router.delete("/users/{user_id}")
        @require_permission("users", "delete")
        async def delete_user(user_id: UUID, current_user: CurrentUser, db: DBSession):
            ...
    """
    return require_access(permission=(resource, action))


def require_any_permission(
    names: Sequence[str],
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that requires one of the listed permission names verbatim.

    Usage:
        @router.get("/roles")
        @require_any_permission(["roles:read", "roles:*", "*:*"])
        async def list_roles(current_user: CurrentUser, db: DBSession):
            ...
    """
    return require_access(any_of=names)
