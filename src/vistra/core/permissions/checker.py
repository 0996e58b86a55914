"""Authorization decisions.

Two decision shapes exist and they deliberately differ:

* A single requirement ``RequiredPermission(resource, action)`` is
  granted by the exact name, by ``resource:*`` or by ``*:*``.
* An any-of requirement (a list of names) is a literal membership
  test: it is granted only if the user holds one of the listed names
  exactly. Callers that want wildcards list them, e.g.
  ``["roles:write", "roles:*"]``.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple
from uuid import UUID

import structlog

from vistra.core.constants import WILDCARD
from vistra.core.errors import ForbiddenError
from vistra.core.permissions.names import format_permission_name, is_valid_permission_name


if TYPE_CHECKING:
    from vistra.core.permissions.models import Permission
    from vistra.core.permissions.resolver import PermissionResolver


logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class EffectivePermission:
    """An immutable permission value as seen by authorization code.

    Built from a catalog row that has already been validated, so the
    name is never re-checked downstream.
    """

    id: UUID
    name: str
    resource: str
    action: str

    @classmethod
    def from_model(cls, permission: "Permission") -> "EffectivePermission":
        return cls(
            id=permission.id,
            name=permission.name,
            resource=permission.resource,
            action=permission.action,
        )


class RequiredPermission(NamedTuple):
    """A single ``resource:action`` requirement."""

    resource: str
    action: str

    @property
    def name(self) -> str:
        return format_permission_name(self.resource, self.action)


def has_permission(
    permissions: Iterable[EffectivePermission],
    resource: str,
    action: str,
) -> bool:
    """Check a single requirement with resource/action wildcards.

    Args:
        permissions: The user's effective permissions
        resource: The resource to check (e.g., "users")
        action: The action to check (e.g., "read")

    Returns:
        True if any permission is "resource:action", "resource:*" or "*:*"
    """
    accepted = {
        format_permission_name(resource, action),
        format_permission_name(resource, WILDCARD),
        format_permission_name(WILDCARD, WILDCARD),
    }
    return any(permission.name in accepted for permission in permissions)


def has_any_permission_name(
    permissions: Iterable[EffectivePermission],
    names: Sequence[str],
) -> bool:
    """Check whether the user holds one of ``names`` verbatim.

    No wildcard expansion happens here: "users:*" in ``names`` matches a
    held "users:*" and nothing else, and a held "*:*" only matches a
    listed "*:*".
    """
    wanted = set(names)
    return any(permission.name in wanted for permission in permissions)


def is_authorized(
    permissions: Iterable[EffectivePermission],
    required: RequiredPermission | Sequence[str],
) -> bool:
    """Decide whether ``permissions`` satisfy ``required``.

    Args:
        permissions: The user's effective permissions
        required: Either a RequiredPermission or a list of acceptable names

    Returns:
        True if authorized

    Raises:
        TypeError: If an any-of requirement is a str or holds non-names
    """
    if isinstance(required, RequiredPermission):
        return has_permission(permissions, required.resource, required.action)
    if isinstance(required, str):
        raise TypeError("Any-of requirements must be a sequence of names, not a str")
    if not all(is_valid_permission_name(name) for name in required):
        # e.g. ("files", "read") meant as a single requirement
        raise TypeError(
            "Any-of requirements must be permission names; "
            "use RequiredPermission for a (resource, action) pair"
        )
    return has_any_permission_name(permissions, required)


@dataclass(frozen=True)
class AccessPolicy:
    """What a guarded operation requires.

    Both parts may be set, in which case both must hold.
    """

    permission: RequiredPermission | None = None
    any_of: tuple[str, ...] = ()

    def describe(self) -> list[str]:
        """Human-readable list of the requirements, for errors and logs."""
        required: list[str] = []
        if self.permission is not None:
            required.append(self.permission.name)
        if self.any_of:
            required.append(f"any of [{', '.join(self.any_of)}]")
        return required


def evaluate_policy(
    permissions: Sequence[EffectivePermission],
    policy: AccessPolicy,
) -> bool:
    """Apply every part of ``policy`` (AND semantics)."""
    if policy.permission is not None and not is_authorized(permissions, policy.permission):
        return False
    if policy.any_of and not is_authorized(permissions, policy.any_of):
        return False
    return True


class PermissionChecker:
    """Service for checking a user's permissions.

    Evaluates decisions against the effective permissions returned by
    the resolver, reading the grant store through it.
    """

    def __init__(self, resolver: "PermissionResolver") -> None:
        self.resolver = resolver

    async def has_permission(self, user_id: UUID, resource: str, action: str) -> bool:
        """Check a single ``resource:action`` requirement for a user."""
        permissions = await self.resolver.resolve_effective_permissions(user_id)
        return has_permission(permissions, resource, action)

    async def has_any_permission(self, user_id: UUID, names: Sequence[str]) -> bool:
        """Check a literal any-of requirement for a user."""
        permissions = await self.resolver.resolve_effective_permissions(user_id)
        return has_any_permission_name(permissions, names)

    async def check(self, user_id: UUID, policy: AccessPolicy) -> bool:
        """Evaluate a whole policy for a user."""
        if policy.permission is None and not policy.any_of:
            return True
        permissions = await self.resolver.resolve_effective_permissions(user_id)
        return evaluate_policy(permissions, policy)

    async def require(self, user_id: UUID, policy: AccessPolicy) -> None:
        """Evaluate a policy and raise if it does not hold.

        Raises:
            ForbiddenError: If the user is not authorized
        """
        if await self.check(user_id, policy):
            return

        required = policy.describe()
        logger.warning(
            "permission_denied",
            user_id=str(user_id),
            required=required,
        )
        raise ForbiddenError(
            f"Missing required permission: {'; '.join(required)}",
            details={"required_permissions": required},
        )
