"""In-memory editor surface.

Models just enough of a tabbed, split-window editor for the infoview engine to
run without a real editor attached: tab pages holding windows, windows showing
buffers, per-window cursors, and buffer lines. Handles follow the usual editor
conventions (windows start at 1000, tabs and buffers at 1) and are allocated
monotonically, so a destroyed handle is never handed out again.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .events import (
    BufferChanged,
    BufferDeleted,
    BufferEntered,
    CursorMoved,
    EditorEventBus,
    TabClosed,
    WindowClosed,
    WindowFocused,
)

__all__ = ["HeadlessEditor"]

LOGGER = logging.getLogger(__name__)

_FIRST_WINDOW = 1000
_FIRST_BUFFER = 1
_FIRST_TAB = 1


@dataclass(slots=True)
class _Buffer:
    handle: int
    name: str = ""
    filetype: str | None = None
    listed: bool = True
    lines: list[str] = field(default_factory=lambda: [""])


@dataclass(slots=True)
class _Window:
    handle: int
    tab: int
    buffer: int
    cursor: tuple[int, int] = (0, 0)
    width: int | None = None
    vertical: bool = True


@dataclass(slots=True)
class _Tab:
    handle: int
    windows: list[int] = field(default_factory=list)
    current: int | None = None


class HeadlessEditor:
    """Editor surface backed by plain dictionaries."""

    def __init__(self, *, events: EditorEventBus | None = None) -> None:
        self._events = events or EditorEventBus()
        self._next_window = _FIRST_WINDOW
        self._next_buffer = _FIRST_BUFFER
        self._next_tab = _FIRST_TAB
        self._buffers: dict[int, _Buffer] = {}
        self._windows: dict[int, _Window] = {}
        self._tabs: dict[int, _Tab] = {}
        self._tab_order: list[int] = []

        buffer = self._allocate_buffer(listed=True)
        tab = self._allocate_tab()
        window = self._allocate_window(tab, buffer.handle)
        self._current_tab = tab.handle
        tab.current = window.handle

    @property
    def events(self) -> EditorEventBus:
        return self._events

    # ------------------------------------------------------------------
    # Tabs
    # ------------------------------------------------------------------
    def current_tab(self) -> int:
        return self._current_tab

    def list_tabs(self) -> list[int]:
        return list(self._tab_order)

    def tab_is_valid(self, tab: int | None) -> bool:
        return tab is not None and tab in self._tabs

    def new_tab(self, buffer: int | None = None) -> int:
        """Open a tab page with one window and enter it."""

        if buffer is None:
            buffer = self._allocate_buffer(listed=True).handle
        self._require_buffer(buffer)
        tab = self._allocate_tab()
        window = self._allocate_window(tab, buffer)
        tab.current = window.handle
        self._focus(window.handle)
        return tab.handle

    def close_tab(self, tab: int) -> None:
        """Close every window of ``tab``; the tab disappears with its last window."""

        record = self._require_tab(tab)
        if len(self._tabs) == 1:
            raise RuntimeError("Cannot close the last tab page")
        for window in list(record.windows):
            if self.window_is_valid(window):
                self.close_window(window)

    # ------------------------------------------------------------------
    # Windows
    # ------------------------------------------------------------------
    def current_window(self) -> int:
        current = self._tabs[self._current_tab].current
        if current is None:
            raise RuntimeError(f"Tab {self._current_tab} has no current window")
        return current

    def set_current_window(self, window: int) -> None:
        self._require_window(window)
        self._focus(window)

    def list_windows(self, tab: int | None = None) -> list[int]:
        if tab is not None:
            return list(self._require_tab(tab).windows)
        return [handle for tab_handle in self._tab_order for handle in self._tabs[tab_handle].windows]

    def window_is_valid(self, window: int | None) -> bool:
        return window is not None and window in self._windows

    def window_tab(self, window: int) -> int:
        return self._require_window(window).tab

    def window_buffer(self, window: int) -> int:
        return self._require_window(window).buffer

    def window_width(self, window: int) -> int | None:
        return self._require_window(window).width

    def open_window(
        self,
        buffer: int,
        *,
        tab: int | None = None,
        enter: bool = False,
        vertical: bool = True,
        width: int | None = None,
    ) -> int:
        self._require_buffer(buffer)
        tab_record = self._require_tab(self._current_tab if tab is None else tab)
        window = self._allocate_window(tab_record, buffer, vertical=vertical, width=width)
        LOGGER.debug("Opened window %s in tab %s showing buffer %s", window.handle, tab_record.handle, buffer)
        if enter:
            self._focus(window.handle)
        return window.handle

    def set_window_buffer(self, window: int, buffer: int) -> None:
        record = self._require_window(window)
        self._require_buffer(buffer)
        if record.buffer == buffer:
            return
        record.buffer = buffer
        record.cursor = (0, 0)
        self._events.publish(BufferEntered(window, buffer=buffer))

    def close_window(self, window: int) -> None:
        record = self._require_window(window)
        if len(self._windows) == 1:
            raise RuntimeError("Cannot close the last window")
        tab = self._tabs[record.tab]
        was_current = self._current_tab == tab.handle and tab.current == window
        index = tab.windows.index(window)
        tab.windows.pop(index)
        del self._windows[window]

        tab_closed = not tab.windows
        if tab_closed:
            tab_index = self._tab_order.index(tab.handle)
            self._tab_order.pop(tab_index)
            del self._tabs[tab.handle]
            if self._current_tab == tab.handle:
                self._current_tab = self._tab_order[min(tab_index, len(self._tab_order) - 1)]
        elif tab.current == window:
            tab.current = tab.windows[max(0, index - 1)]

        LOGGER.debug("Closed window %s (tab %s)", window, record.tab)
        self._events.publish(WindowClosed(window, tab=record.tab, buffer=record.buffer))
        if tab_closed:
            self._events.publish(TabClosed(record.tab))
        if was_current:
            # handlers above may already have moved focus elsewhere
            focused = self._tabs[self._current_tab].current
            if focused is not None and self.window_is_valid(focused):
                self._events.publish(WindowFocused(focused, previous=window))

    def cursor(self, window: int) -> tuple[int, int]:
        return self._require_window(window).cursor

    def set_cursor(self, window: int, line: int, character: int) -> None:
        record = self._require_window(window)
        record.cursor = (line, character)
        self._events.publish(CursorMoved(window, line=line, character=character))

    # ------------------------------------------------------------------
    # Buffers
    # ------------------------------------------------------------------
    def current_buffer(self) -> int:
        return self._windows[self.current_window()].buffer

    def list_buffers(self) -> list[int]:
        return sorted(self._buffers)

    def buffer_is_valid(self, buffer: int | None) -> bool:
        return buffer is not None and buffer in self._buffers

    def create_buffer(
        self,
        *,
        listed: bool = False,
        name: str | None = None,
        filetype: str | None = None,
    ) -> int:
        record = self._allocate_buffer(listed=listed)
        record.name = name or ""
        record.filetype = filetype
        return record.handle

    def delete_buffer(self, buffer: int) -> None:
        """Wipe ``buffer``, closing the windows that display it.

        The last remaining window of the editor cannot close, so it is handed
        a fresh empty buffer instead.
        """

        self._require_buffer(buffer)
        for window in [w.handle for w in self._windows.values() if w.buffer == buffer]:
            if not self.window_is_valid(window):
                continue
            if len(self._windows) == 1:
                replacement = self._allocate_buffer(listed=True)
                self.set_window_buffer(window, replacement.handle)
            else:
                self.close_window(window)
        if buffer in self._buffers:
            del self._buffers[buffer]
            LOGGER.debug("Deleted buffer %s", buffer)
            self._events.publish(BufferDeleted(buffer))

    def buffer_name(self, buffer: int) -> str:
        return self._require_buffer(buffer).name

    def set_buffer_name(self, buffer: int, name: str) -> None:
        self._require_buffer(buffer).name = name

    def buffer_filetype(self, buffer: int) -> str | None:
        return self._require_buffer(buffer).filetype

    def set_buffer_filetype(self, buffer: int, filetype: str | None) -> None:
        self._require_buffer(buffer).filetype = filetype

    def get_lines(self, buffer: int) -> list[str]:
        return list(self._require_buffer(buffer).lines)

    def set_lines(self, buffer: int, lines: Sequence[str]) -> None:
        record = self._require_buffer(buffer)
        record.lines = list(lines) or [""]
        self._events.publish(BufferChanged(buffer))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _focus(self, window: int) -> None:
        previous = self.current_window() if self._current_tab in self._tabs else None
        record = self._windows[window]
        self._current_tab = record.tab
        self._tabs[record.tab].current = window
        if previous != window:
            self._events.publish(WindowFocused(window, previous=previous))

    def _allocate_buffer(self, *, listed: bool) -> _Buffer:
        record = _Buffer(handle=self._next_buffer, listed=listed)
        self._next_buffer += 1
        self._buffers[record.handle] = record
        return record

    def _allocate_window(
        self,
        tab: _Tab,
        buffer: int,
        *,
        vertical: bool = True,
        width: int | None = None,
    ) -> _Window:
        record = _Window(
            handle=self._next_window,
            tab=tab.handle,
            buffer=buffer,
            width=width,
            vertical=vertical,
        )
        self._next_window += 1
        self._windows[record.handle] = record
        tab.windows.append(record.handle)
        return record

    def _allocate_tab(self) -> _Tab:
        record = _Tab(handle=self._next_tab)
        self._next_tab += 1
        self._tabs[record.handle] = record
        self._tab_order.append(record.handle)
        return record

    def _require_buffer(self, buffer: int) -> _Buffer:
        try:
            return self._buffers[buffer]
        except KeyError:
            raise ValueError(f"Invalid buffer handle: {buffer}") from None

    def _require_window(self, window: int) -> _Window:
        try:
            return self._windows[window]
        except KeyError:
            raise ValueError(f"Invalid window handle: {window}") from None

    def _require_tab(self, tab: int) -> _Tab:
        try:
            return self._tabs[tab]
        except KeyError:
            raise ValueError(f"Invalid tab handle: {tab}") from None
