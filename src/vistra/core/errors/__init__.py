"""Error handling module with RFC 7807 Problem Details."""

from vistra.core.errors.exceptions import (
    AppException,
    BadRequestError,
    CannotDeleteSystemAccountError,
    CannotModifySystemAccountError,
    CannotModifySystemAccountPermissionsError,
    CannotModifySystemAccountRolesError,
    ConflictError,
    ForbiddenError,
    InvalidPermissionFormatError,
    NotFoundError,
    PermissionNotFoundError,
    RoleNotFoundError,
    ServiceUnavailableError,
    UnauthorizedError,
    UserNotFoundError,
    ValidationError,
)
from vistra.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    # Exceptions
    "AppException",
    "BadRequestError",
    "CannotDeleteSystemAccountError",
    "CannotModifySystemAccountError",
    "CannotModifySystemAccountPermissionsError",
    "CannotModifySystemAccountRolesError",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "InvalidPermissionFormatError",
    "NotFoundError",
    "PermissionNotFoundError",
    "ProblemDetail",
    "RoleNotFoundError",
    "ServiceUnavailableError",
    "UnauthorizedError",
    "UserNotFoundError",
    "ValidationError",
    "register_exception_handlers",
]
