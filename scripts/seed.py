#!/usr/bin/env python
"""
Generate seed data: the permission catalog, default roles and users.
"""

import argparse
import asyncio
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession


# Add src to path for imports
sys.path.insert(0, "src")

from vistra.core.auth.backend import hash_password
from vistra.core.database import async_session_factory
from vistra.core.permissions.catalog import PermissionCatalog
from vistra.core.permissions.models import Role
from vistra.core.permissions.repos import GrantRepository
from vistra.modules.users.models import User


DEFAULT_PERMISSIONS: dict[str, str] = {
    "*:*": "Full access to all resources and actions",
    "users:read": "Read user information",
    "users:write": "Create and update users",
    "users:delete": "Delete users",
    "users:*": "All actions on users",
    "roles:read": "Read role information",
    "roles:write": "Create and update roles",
    "roles:*": "All actions on roles",
    "permissions:read": "Read permission information",
    "permissions:write": "Create permissions",
    "permissions:*": "All actions on permissions",
    "activities:read": "Read the activity log",
    "dashboard:users_count": "See the user count on the dashboard",
    "dashboard:roles_count": "See the role count on the dashboard",
    "dashboard:permissions_count": "See the permission count on the dashboard",
    "dashboard:recent_activity": "See recent activity on the dashboard",
}

DEFAULT_ROLES: dict[str, tuple[str, list[str]]] = {
    "admin": ("Administrator with full access", ["*:*"]),
    "user": ("Regular user with limited access", ["users:read", "users:write"]),
    "viewer": ("Read-only access", ["users:read", "roles:read", "permissions:read"]),
}

# email, name, password, role, is_system_account
DEFAULT_USERS = [("admin@vistra.com", "Admin User", "admin123", "admin", True)]
DEMO_USERS = [
    ("user@vistra.com", "Regular User", "user123", "user", False),
    ("demo@vistra.com", "Demo User", "demo123", "viewer", False),
]


async def get_or_create_role(session: AsyncSession, name: str, description: str) -> Role:
    result = await session.execute(select(Role).where(Role.name == name))
    role = result.scalar_one_or_none()
    if role:
        print(f"Role already exists: {name}")
        return role

    role = Role(name=name, description=description)
    session.add(role)
    await session.flush()
    print(f"Created role: {name}")
    return role


async def seed_users(
    session: AsyncSession,
    users: list[tuple[str, str, str, str, bool]],
    roles: dict[str, Role],
) -> None:
    grants = GrantRepository(session)
    admin_id = None

    for email, name, password, role_name, is_system_account in users:
        result = await session.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()
        if user:
            print(f"User already exists: {email}")
        else:
            user = User(
                email=email,
                name=name,
                password_hash=hash_password(password),
                is_system_account=is_system_account,
            )
            session.add(user)
            await session.flush()
            print(f"Created user: {email}")

        admin_id = admin_id or user.id
        await grants.assign_role(user.id, roles[role_name].id, assigned_by=admin_id)


async def seed_data(session: AsyncSession, include_demo_users: bool = False) -> None:
    """Create the catalog, the default roles and the system admin.

    Safe to run repeatedly; existing rows are reused.
    """
    catalog = PermissionCatalog(session)
    grants = GrantRepository(session)

    permissions = {
        name: await catalog.get_or_create_permission(name, description)
        for name, description in DEFAULT_PERMISSIONS.items()
    }
    print(f"Permission catalog has {await catalog.count()} entries")

    roles: dict[str, Role] = {}
    for role_name, (description, names) in DEFAULT_ROLES.items():
        role = await get_or_create_role(session, role_name, description)
        for name in names:
            await grants.add_permission_to_role(role.id, permissions[name].id)
        roles[role_name] = role

    users = DEFAULT_USERS + (DEMO_USERS if include_demo_users else [])
    await seed_users(session, users, roles)


async def seed_default(include_demo_users: bool = False) -> None:
    async with async_session_factory() as session:
        await seed_data(session, include_demo_users=include_demo_users)
        await session.commit()


async def main(scenario: str) -> None:
    """Run the seeding based on scenario."""
    if scenario == "default":
        await seed_default()
    elif scenario == "demo":
        await seed_default(include_demo_users=True)
    else:
        print(f"Unknown scenario: {scenario}")
        print("Available scenarios: default, demo")
        sys.exit(1)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed database with initial data")
    parser.add_argument(
        "--scenario",
        "-s",
        default="default",
        help="Seed scenario to run (default, demo)",
    )
    args = parser.parse_args()

    asyncio.run(main(args.scenario))
