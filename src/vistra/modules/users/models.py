"""User database models."""

from sqlalchemy import Boolean, String, Text, false, true
from sqlalchemy.orm import Mapped, mapped_column

from vistra.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from vistra.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """User model representing an admin console account.

    Roles and direct permissions live in the grant tables and are read
    through the resolver, never through relationships on this model.

    Attributes:
        email: Unique email address
        name: Display name
        password_hash: Bcrypt-hashed password
        is_system_account: Protected account that cannot be modified
        is_active: Whether the user can authenticate
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    is_system_account: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        server_default=false(),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        server_default=true(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
