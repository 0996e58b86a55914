"""Role-based access control: catalog, grants, resolution and decisions."""

from vistra.core.permissions.cache import PermissionCache, PermissionCacheDep, get_permission_cache
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.checker import (
    AccessPolicy,
    EffectivePermission,
    PermissionChecker,
    RequiredPermission,
    evaluate_policy,
    has_any_permission_name,
    has_permission,
    is_authorized,
)
from vistra.core.permissions.decorators import (
    require_access,
    require_any_permission,
    require_permission,
)
from vistra.core.permissions.models import (
    Permission,
    Role,
    RolePermission,
    UserPermission,
    UserRole,
)
from vistra.core.permissions.names import (
    find_invalid_permission_names,
    format_permission_name,
    is_valid_permission_name,
    parse_permission_name,
)
from vistra.core.permissions.protection import AccountMutation, ensure_not_system_account
from vistra.core.permissions.repos import GrantRepository
from vistra.core.permissions.resolver import PermissionResolver


__all__ = [
    "AccessPolicy",
    "AccountMutation",
    "EffectivePermission",
    "GrantRepository",
    "Permission",
    "PermissionCache",
    "PermissionCacheDep",
    "PermissionCatalog",
    "PermissionChecker",
    "PermissionResolver",
    "RequiredPermission",
    "Role",
    "RolePermission",
    "UserPermission",
    "UserRole",
    "ensure_not_system_account",
    "evaluate_policy",
    "find_invalid_permission_names",
    "format_permission_name",
    "get_permission_cache",
    "has_any_permission_name",
    "has_permission",
    "is_authorized",
    "is_valid_permission_name",
    "parse_permission_name",
    "require_access",
    "require_any_permission",
    "require_permission",
]
