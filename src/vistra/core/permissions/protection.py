"""Protection of system accounts.

System accounts cannot be updated, deleted, or have their roles or
direct permissions changed, whatever permissions the caller holds.
This is a property of the target row, checked in addition to the
caller's authorization.
"""

from enum import Enum
from typing import Protocol
from uuid import UUID

import structlog

from vistra.core.errors import (
    CannotDeleteSystemAccountError,
    CannotModifySystemAccountError,
    CannotModifySystemAccountPermissionsError,
    CannotModifySystemAccountRolesError,
)


logger = structlog.get_logger()


class ProtectedAccount(Protocol):
    id: UUID
    is_system_account: bool


class AccountMutation(str, Enum):
    """Kinds of change that can target a user account."""

    UPDATE = "update"
    DELETE = "delete"
    ROLES = "roles"
    PERMISSIONS = "permissions"


_ERRORS: dict[AccountMutation, type[CannotModifySystemAccountError]] = {
    AccountMutation.UPDATE: CannotModifySystemAccountError,
    AccountMutation.DELETE: CannotDeleteSystemAccountError,
    AccountMutation.ROLES: CannotModifySystemAccountRolesError,
    AccountMutation.PERMISSIONS: CannotModifySystemAccountPermissionsError,
}


def ensure_not_system_account(user: ProtectedAccount, mutation: AccountMutation) -> None:
    """Reject ``mutation`` if ``user`` is a system account.

    Raises:
        CannotModifySystemAccountError: Or the subclass matching ``mutation``
    """
    if not user.is_system_account:
        return

    logger.warning(
        "system_account_mutation_refused",
        user_id=str(user.id),
        mutation=mutation.value,
    )
    raise _ERRORS[mutation](user_id=user.id)
