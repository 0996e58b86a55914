"""Role repository for database operations."""

from uuid import UUID

from sqlalchemy import func, select

from vistra.api.dependencies import DBSession
from vistra.core.permissions.models import Role


class RoleRepository:
    """Repository for Role database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, role: Role) -> Role:
        self.session.add(role)
        await self.session.flush()
        return role

    async def get_by_id(self, role_id: UUID) -> Role | None:
        return await self.session.get(Role, role_id)

    async def get_by_name(self, name: str) -> Role | None:
        stmt = select(Role).where(Role.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_roles(self) -> list[Role]:
        """List all roles ordered by name."""
        result = await self.session.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(Role))
        return result.scalar_one()

    async def update(self, role: Role) -> Role:
        await self.session.flush()
        return role

    async def delete(self, role: Role) -> None:
        """Delete a role.

        Its permission links and user assignments go with it through
        ON DELETE CASCADE.
        """
        await self.session.delete(role)
        await self.session.flush()
