"""Infoview panels, their content objects and the engine that keeps them in sync."""

from .engine import INFO_FILETYPE, SynchronizationEngine
from .models import Info, Infoview
from .store import InfoviewStore

__all__ = ["INFO_FILETYPE", "Info", "Infoview", "InfoviewStore", "SynchronizationEngine"]
