"""API routers."""

from catalog.api.routers import characters, health

__all__ = ["characters", "health"]
