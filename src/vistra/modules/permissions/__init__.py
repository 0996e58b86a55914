"""Permission catalog module."""

from vistra.modules.permissions.routes import router


__all__ = ["router"]
