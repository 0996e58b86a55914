"""Role management module."""

from vistra.modules.roles.routes import router


__all__ = ["router"]
