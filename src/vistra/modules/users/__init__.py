"""User management module."""

from vistra.modules.users.routes import router


__all__ = ["router"]
