"""Activity log module."""

from vistra.modules.activities.routes import router


__all__ = ["router"]
