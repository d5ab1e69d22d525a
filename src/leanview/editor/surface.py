"""Contract between the infoview engine and the editor that hosts it."""

from __future__ import annotations

from typing import Protocol, Sequence

from .events import EditorEventBus

__all__ = ["EditorSurface"]


class EditorSurface(Protocol):
    """Window, buffer and tab primitives the engine relies on.

    Handles are opaque integers assigned by the editor. They are never reused
    within one editor session.
    """

    @property
    def events(self) -> EditorEventBus:
        """Bus on which the editor publishes focus, close and edit events."""
        ...

    # Tabs -------------------------------------------------------------
    def current_tab(self) -> int:
        ...

    def list_tabs(self) -> list[int]:
        ...

    def tab_is_valid(self, tab: int | None) -> bool:
        ...

    # Windows ----------------------------------------------------------
    def current_window(self) -> int:
        ...

    def set_current_window(self, window: int) -> None:
        ...

    def list_windows(self, tab: int | None = None) -> list[int]:
        """List live windows, optionally restricted to one tab."""
        ...

    def window_is_valid(self, window: int | None) -> bool:
        ...

    def window_tab(self, window: int) -> int:
        ...

    def window_buffer(self, window: int) -> int:
        ...

    def open_window(
        self,
        buffer: int,
        *,
        tab: int | None = None,
        enter: bool = False,
        vertical: bool = True,
        width: int | None = None,
    ) -> int:
        """Split a new window showing ``buffer``; focus moves only if ``enter``."""
        ...

    def set_window_buffer(self, window: int, buffer: int) -> None:
        ...

    def close_window(self, window: int) -> None:
        ...

    def cursor(self, window: int) -> tuple[int, int]:
        ...

    # Buffers ----------------------------------------------------------
    def current_buffer(self) -> int:
        ...

    def list_buffers(self) -> list[int]:
        ...

    def buffer_is_valid(self, buffer: int | None) -> bool:
        ...

    def create_buffer(
        self,
        *,
        listed: bool = False,
        name: str | None = None,
        filetype: str | None = None,
    ) -> int:
        ...

    def delete_buffer(self, buffer: int) -> None:
        ...

    def buffer_name(self, buffer: int) -> str:
        ...

    def buffer_filetype(self, buffer: int) -> str | None:
        ...

    def get_lines(self, buffer: int) -> list[str]:
        ...

    def set_lines(self, buffer: int, lines: Sequence[str]) -> None:
        ...
