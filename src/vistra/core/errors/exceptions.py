"""Domain exceptions for the application.

These exceptions represent business-logic errors and are automatically
converted to RFC 7807 Problem Details responses by the exception handlers.
Every exception carries a stable machine-readable ``error_code`` so that
clients branch on semantics, never on message text.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("User not found", resource="user", resource_id=str(user_id))
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class UserNotFoundError(NotFoundError):
    """Raised when a referenced user does not exist."""

    message = "User not found"
    error_code = "user_not_found"

    def __init__(self, user_id: Any = None, **kwargs: Any) -> None:
        super().__init__(
            resource="user",
            resource_id=str(user_id) if user_id is not None else None,
            **kwargs,
        )


class RoleNotFoundError(NotFoundError):
    """Raised when a referenced role does not exist."""

    message = "Role not found"
    error_code = "role_not_found"

    def __init__(self, role_id: Any = None, **kwargs: Any) -> None:
        super().__init__(
            resource="role",
            resource_id=str(role_id) if role_id is not None else None,
            **kwargs,
        )


class PermissionNotFoundError(NotFoundError):
    """Raised when a referenced permission does not exist."""

    message = "Permission not found"
    error_code = "permission_not_found"

    def __init__(self, permission_id: Any = None, **kwargs: Any) -> None:
        super().__init__(
            resource="permission",
            resource_id=str(permission_id) if permission_id is not None else None,
            **kwargs,
        )


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Email already exists", details={"email": email})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": "email", "message": "Invalid email format"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)


class BadRequestError(AppException):
    """Raised for general client errors.

    Example:
        raise BadRequestError("Invalid request format")
    """

    message = "Bad request"
    error_code = "bad_request"
    status_code = 400


class InvalidPermissionFormatError(BadRequestError):
    """Raised when a permission name is not ``resource:action``.

    Example:
        raise InvalidPermissionFormatError(["users", "files:read:all"])
    """

    message = "Invalid permission format"
    error_code = "invalid_permission_format"

    def __init__(self, names: list[str] | str, **kwargs: Any) -> None:
        invalid = [names] if isinstance(names, str) else list(names)
        self.names = invalid
        message = (
            f"Invalid permission format: {', '.join(invalid)}. "
            'Expected format: "resource:action" or "resource:*"'
        )
        details = kwargs.pop("details", {})
        details["invalid_permissions"] = invalid
        super().__init__(message=message, details=details, **kwargs)


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid.

    Example:
        raise UnauthorizedError("Invalid access token")
    """

    message = "Unauthorized"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when an authenticated user lacks permission to access a resource.

    Example:
        raise ForbiddenError(
            "Insufficient permissions",
            details={"required_permission": "users:delete"}
        )
    """

    message = "Forbidden"
    error_code = "forbidden"
    status_code = 403


class CannotModifySystemAccountError(ForbiddenError):
    """Raised on any mutation of a protected system account.

    This is a data-level rule and applies whatever the caller's grants are.
    """

    message = "Cannot modify system accounts"
    error_code = "cannot_modify_system_account"

    def __init__(self, user_id: Any = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        if user_id is not None:
            details["user_id"] = str(user_id)
        super().__init__(details=details, **kwargs)


class CannotDeleteSystemAccountError(CannotModifySystemAccountError):
    """Raised when deleting a system account."""

    message = "Cannot delete system accounts"
    error_code = "cannot_delete_system_account"


class CannotModifySystemAccountRolesError(CannotModifySystemAccountError):
    """Raised when assigning or revoking roles of a system account."""

    message = "Cannot modify roles for system accounts"
    error_code = "cannot_modify_roles_for_system_account"


class CannotModifySystemAccountPermissionsError(CannotModifySystemAccountError):
    """Raised when assigning or revoking direct permissions of a system account."""

    message = "Cannot modify permissions for system accounts"
    error_code = "cannot_modify_permissions_for_system_account"


class ServiceUnavailableError(AppException):
    """Raised when a required service is unavailable.

    Example:
        raise ServiceUnavailableError("Database connection failed")
    """

    message = "Service temporarily unavailable"
    error_code = "service_unavailable"
    status_code = 503
