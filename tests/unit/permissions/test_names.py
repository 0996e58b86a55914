"""Unit tests for permission name parsing."""

import pytest

from vistra.core.constants import MAX_PERMISSION_NAME_LENGTH
from vistra.core.errors import InvalidPermissionFormatError
from vistra.core.permissions.names import (
    find_invalid_permission_names,
    format_permission_name,
    is_valid_permission_name,
    parse_permission_name,
)


pytestmark = pytest.mark.unit


class TestIsValidPermissionName:
    @pytest.mark.parametrize(
        "name",
        ["users:read", "files:*", "*:*", "*:read", "dashboard:users_count", "A1:b_2"],
    )
    def test_valid(self, name: str):
        assert is_valid_permission_name(name)

    @pytest.mark.parametrize(
        "name",
        [
            "",
            "users",
            "users:",
            ":read",
            "users:read:extra",
            "users-admin:read",
            "users: read",
            "users:read\n",
            "usérs:read",
        ],
    )
    def test_invalid(self, name: str):
        assert not is_valid_permission_name(name)

    def test_non_string(self):
        assert not is_valid_permission_name(None)  # type: ignore[arg-type]

    def test_length_limit(self):
        longest = "a" * (MAX_PERMISSION_NAME_LENGTH - len(":read")) + ":read"

        assert is_valid_permission_name(longest)
        assert not is_valid_permission_name("a" + longest)


class TestParsePermissionName:
    def test_splits_resource_and_action(self):
        assert parse_permission_name("files:read") == ("files", "read")

    def test_wildcards(self):
        assert parse_permission_name("*:*") == ("*", "*")

    def test_malformed_raises(self):
        with pytest.raises(InvalidPermissionFormatError) as exc_info:
            parse_permission_name("files:read:all")

        assert exc_info.value.error_code == "invalid_permission_format"
        assert exc_info.value.status_code == 400
        assert exc_info.value.details["invalid_permissions"] == ["files:read:all"]


def test_format_permission_name():
    assert format_permission_name("files", "*") == "files:*"


def test_find_invalid_permission_names_keeps_order():
    names = ["users:read", "bad", "roles:*", "also bad:x"]

    assert find_invalid_permission_names(names) == ["bad", "also bad:x"]
