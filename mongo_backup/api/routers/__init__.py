"""API routers."""

from . import databases, backup, restore, health

__all__ = ["databases", "backup", "restore", "health"]
