"""User repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from vistra.api.dependencies import DBSession
from vistra.modules.users.models import User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID.

        Returns:
            User if found, None otherwise
        """
        return await self.session.get(User, user_id)

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address.

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_users(
        self,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[User], int]:
        """List users with pagination.

        Args:
            page: Page number (1-indexed)
            page_size: Number of items per page

        Returns:
            Tuple of (users list, total count)
        """
        total = await self.count()

        offset = (page - 1) * page_size
        stmt = (
            select(User)
            .order_by(User.created_at.desc(), User.email)
            .offset(offset)
            .limit(page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(User))
        return result.scalar_one()

    async def update(self, user: User) -> User:
        """Flush pending changes to a user and reload it."""
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def delete(self, user: User) -> None:
        """Delete a user.

        Grant rows go with it through ON DELETE CASCADE.
        """
        await self.session.delete(user)
        await self.session.flush()


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
