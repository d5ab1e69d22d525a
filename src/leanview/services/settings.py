"""Settings dataclass for the infoview engine and its verification helpers."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = ["Settings"]


@dataclass(slots=True)
class Settings:
    """User-configurable settings for the infoview engine.

    Loading these from disk or the environment is left to the host editor
    plugin; the engine only consumes the resulting values.
    """

    autoopen: bool = True
    infoview_width: int = 50
    debounce_seconds: float = 0.05
    request_timeout: float = 5.0
    change_wait_seconds: float = 1.0
    keep_wait_seconds: float = 0.3
    poll_interval: float = 0.01
    source_filetypes: list[str] = field(default_factory=lambda: ["lean", "lean3"])
    debug_logging: bool = False

    def is_source_filetype(self, filetype: str | None) -> bool:
        return bool(filetype) and filetype in self.source_filetypes
