"""Permission name parsing.

A permission name is ``resource:action`` where each half is made of
letters, digits, underscores and ``*``. This module is the single
place where names coming from clients are validated.
"""

import re
from collections.abc import Sequence

from vistra.core.constants import (
    MAX_PERMISSION_NAME_LENGTH,
    MAX_PERMISSION_PART_LENGTH,
    PERMISSION_NAME_PATTERN,
    PERMISSION_SEPARATOR,
)
from vistra.core.errors import InvalidPermissionFormatError


_PERMISSION_NAME_RE = re.compile(PERMISSION_NAME_PATTERN)


def is_valid_permission_name(name: str) -> bool:
    """Return True if ``name`` is a well-formed permission name.

    Besides the pattern, the name and each half must fit their columns.
    """
    if not isinstance(name, str) or len(name) > MAX_PERMISSION_NAME_LENGTH:
        return False
    if _PERMISSION_NAME_RE.fullmatch(name) is None:
        return False
    return all(
        len(part) <= MAX_PERMISSION_PART_LENGTH
        for part in name.split(PERMISSION_SEPARATOR)
    )


def parse_permission_name(name: str) -> tuple[str, str]:
    """Split a permission name into its resource and action.

    Args:
        name: Permission name such as "users:read" or "files:*"

    Returns:
        Tuple of (resource, action)

    Raises:
        InvalidPermissionFormatError: If the name is malformed
    """
    if not is_valid_permission_name(name):
        raise InvalidPermissionFormatError(name)
    resource, action = name.split(PERMISSION_SEPARATOR, 1)
    return resource, action


def format_permission_name(resource: str, action: str) -> str:
    """Join a resource and an action into a permission name."""
    return f"{resource}{PERMISSION_SEPARATOR}{action}"


def find_invalid_permission_names(names: Sequence[str]) -> list[str]:
    """Return the malformed names of ``names``, in input order."""
    return [name for name in names if not is_valid_permission_name(name)]
