"""Dashboard module."""

from vistra.modules.dashboard.routes import router


__all__ = ["router"]
