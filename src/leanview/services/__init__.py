"""Service layer helpers (engine settings)."""

from .settings import Settings

__all__ = ["Settings"]
