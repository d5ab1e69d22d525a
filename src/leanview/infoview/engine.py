"""Keeps infoview panels and their content in step with the editor and server.

All mutation happens on the event loop thread. The only suspension point is
the language-server round trip inside :meth:`SynchronizationEngine.refresh`;
every query is tagged with the Info's generation so that a slow, superseded
response can never overwrite a newer one.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Union

from ..editor.events import (
    BufferChanged,
    BufferDeleted,
    BufferEntered,
    CursorMoved,
    TabClosed,
    WindowClosed,
    WindowFocused,
)
from ..editor.surface import EditorSurface
from ..errors import UnknownInfoviewError
from ..lsp.collaborator import LanguageServer, Position, SourcePosition, render_lines
from ..lsp.progress import ProgressTracker
from ..services.settings import Settings
from ..utils.logging import configure_logging
from .models import Info, Infoview
from .store import InfoviewStore

__all__ = ["SynchronizationEngine", "INFO_FILETYPE"]

LOGGER = logging.getLogger(__name__)

INFO_FILETYPE = "leaninfo"

InfoviewRef = Union[Infoview, int]


class SynchronizationEngine:
    """Drives Infoview state transitions in response to editor and server events."""

    def __init__(
        self,
        *,
        editor: EditorSurface,
        server: LanguageServer,
        settings: Settings | None = None,
        store: InfoviewStore | None = None,
        progress: ProgressTracker | None = None,
    ) -> None:
        if editor is None:
            raise ValueError("editor is required")
        if server is None:
            raise ValueError("server is required")
        self._editor = editor
        self._server = server
        self._settings = settings or Settings()
        self._store = store or InfoviewStore()
        self._progress = progress
        self._pending: dict[int, asyncio.TimerHandle] = {}
        self._tasks: set[asyncio.Task[bool]] = set()
        self._last_source_window: dict[int, int] = {}
        self._attached = False

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def editor(self) -> EditorSurface:
        return self._editor

    @property
    def store(self) -> InfoviewStore:
        return self._store

    @property
    def settings(self) -> Settings:
        return self._settings

    # ------------------------------------------------------------------
    # Event wiring
    # ------------------------------------------------------------------
    def attach(self) -> None:
        """Start listening to editor events and the progress feed.

        With ``debug_logging`` set, transcript logging is configured first.
        """

        if self._attached:
            return
        if self._settings.debug_logging:
            configure_logging(self._settings)
        events = self._editor.events
        events.subscribe(WindowFocused, self._handle_window_focused)
        events.subscribe(BufferEntered, self._handle_buffer_entered)
        events.subscribe(CursorMoved, self._handle_cursor_moved)
        events.subscribe(WindowClosed, self._handle_window_closed)
        events.subscribe(TabClosed, self._handle_tab_closed)
        events.subscribe(BufferChanged, self._handle_buffer_changed)
        events.subscribe(BufferDeleted, self._handle_buffer_deleted)
        if self._progress is not None:
            self._progress.subscribe(self._handle_progress)
        self._attached = True
        LOGGER.debug("Engine attached to editor events")

    def detach(self) -> None:
        if not self._attached:
            return
        events = self._editor.events
        events.unsubscribe(WindowFocused, self._handle_window_focused)
        events.unsubscribe(BufferEntered, self._handle_buffer_entered)
        events.unsubscribe(CursorMoved, self._handle_cursor_moved)
        events.unsubscribe(WindowClosed, self._handle_window_closed)
        events.unsubscribe(TabClosed, self._handle_tab_closed)
        events.unsubscribe(BufferChanged, self._handle_buffer_changed)
        events.unsubscribe(BufferDeleted, self._handle_buffer_deleted)
        if self._progress is not None:
            self._progress.unsubscribe(self._handle_progress)
        self._attached = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def infoview_for(self, tab: int | None = None, *, create: bool = True) -> Infoview | None:
        """Return the Infoview of ``tab`` (default: current tab), creating it if asked."""

        target = self._editor.current_tab() if tab is None else tab
        infoview = self._store.for_tab(target)
        if infoview is None and create:
            infoview = self._create(target)
        return infoview

    def current_infoview(self) -> Infoview:
        tab = self._editor.current_tab()
        return self._store.for_tab(tab) or self._create(tab)

    def open(self, infoview: InfoviewRef) -> Infoview:
        """Show the panel. Already-open panels only get a content refresh."""

        infoview = self._resolve(infoview)
        if infoview.is_open:
            self.schedule_refresh(infoview)
            return infoview
        if not self._editor.buffer_is_valid(infoview.info.bufnr):
            # content buffer was wiped behind our back; bind a fresh Info
            replacement = self._mint_info()
            self._store.replace_info(infoview, replacement)
        window = self._editor.open_window(
            infoview.info.bufnr,
            tab=infoview.tab,
            enter=False,
            vertical=True,
            width=self._settings.infoview_width,
        )
        infoview.window = window
        infoview.is_open = True
        LOGGER.debug("Opened infoview %s in window %s", infoview.id, window)
        self.schedule_refresh(infoview)
        return infoview

    def close(self, infoview: InfoviewRef) -> Infoview:
        """Hide the panel, keeping its Info and content buffer.

        When the panel is the editor's last window, that window stays and shows
        a scratch buffer instead.
        """

        infoview = self._resolve(infoview)
        if not infoview.is_open:
            return infoview
        window = infoview.window
        if window is not None and self._editor.window_is_valid(window):
            self._release_window(window)
        if infoview.is_open:
            self._mark_closed(infoview)
        return infoview

    def toggle(self, infoview: InfoviewRef) -> Infoview:
        infoview = self._resolve(infoview)
        if infoview.is_open:
            return self.close(infoview)
        return self.open(infoview)

    def teardown(self, infoview: InfoviewRef) -> None:
        """Destroy the panel and its Info for good."""

        infoview = self._resolve(infoview)
        self._cancel_pending(infoview.id)
        if infoview.is_open:
            window = infoview.window
            if window is not None and self._editor.window_is_valid(window):
                self._release_window(window)
            if infoview.is_open:
                self._mark_closed(infoview)
        if self._store.get_infoview(infoview.id) is not infoview:
            # closing the window closed the tab, which already tore it down
            return
        info = infoview.info
        self._store.retire(infoview)
        self._last_source_window.pop(infoview.tab, None)
        if self._editor.buffer_is_valid(info.bufnr):
            self._editor.delete_buffer(info.bufnr)
        LOGGER.debug("Tore down infoview %s and info %s", infoview.id, info.id)

    async def refresh(self, infoview: InfoviewRef, position: SourcePosition | None = None) -> bool:
        """Query the server and rewrite the content if it changed.

        Returns whether ``msg`` was updated. Timeouts, ``None`` answers and
        superseded responses leave the current content untouched.
        """

        infoview = self._resolve(infoview)
        info = infoview.info
        target = position or self.source_position(infoview.tab) or info.position
        if target is None:
            LOGGER.debug("No source position for infoview %s; skipping refresh", infoview.id)
            return False
        generation = info.next_generation()
        info.position = target
        try:
            content = await asyncio.wait_for(
                self._server.fetch_content(target.document, target.position),
                timeout=self._settings.request_timeout,
            )
        except asyncio.TimeoutError:
            LOGGER.warning(
                "Language server did not answer for %s within %.2fs; keeping previous content",
                target.document,
                self._settings.request_timeout,
            )
            return False
        if not info.is_current(generation) or not self._store.is_live_info(info):
            LOGGER.debug(
                "Discarding stale content for info %s (generation %s, now %s)",
                info.id,
                generation,
                info.generation,
            )
            return False
        if content is None:
            return False
        lines = render_lines(content)
        if lines == info.msg:
            return False
        info.msg = lines
        if self._editor.buffer_is_valid(info.bufnr):
            self._editor.set_lines(info.bufnr, lines)
        LOGGER.debug("Info %s content updated (%d lines)", info.id, len(lines))
        return True

    def schedule_refresh(self, infoview: InfoviewRef) -> None:
        """Debounced refresh; a burst of calls collapses into one query."""

        infoview = self._resolve(infoview)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            LOGGER.debug("No running event loop; not scheduling refresh of infoview %s", infoview.id)
            return
        self._cancel_pending(infoview.id)
        self._pending[infoview.id] = loop.call_later(
            max(0.0, self._settings.debounce_seconds),
            self._spawn_refresh,
            infoview.id,
        )

    async def flush(self) -> None:
        """Wait until no refresh is pending or in flight."""

        while self._pending or self._tasks:
            if self._tasks:
                await asyncio.gather(*list(self._tasks), return_exceptions=True)
            else:
                await asyncio.sleep(max(self._settings.debounce_seconds, 0.001))

    async def aclose(self) -> None:
        self.detach()
        for infoview_id in list(self._pending):
            self._cancel_pending(infoview_id)
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task

    def source_position(self, tab: int) -> SourcePosition | None:
        """Cursor position of the source window the panel of ``tab`` follows."""

        window = self._source_window(tab)
        if window is None:
            return None
        buffer = self._editor.window_buffer(window)
        line, character = self._editor.cursor(window)
        document = self._editor.buffer_name(buffer) or f"buffer://{buffer}"
        return SourcePosition(document=document, position=Position(line, character))

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------
    def _handle_window_focused(self, event: WindowFocused) -> None:
        if self._editor.window_is_valid(event.window):
            self._source_entered(event.window)

    def _handle_buffer_entered(self, event: BufferEntered) -> None:
        if self._editor.window_is_valid(event.window):
            self._source_entered(event.window)

    def _handle_cursor_moved(self, event: CursorMoved) -> None:
        if not self._is_source_window(event.window):
            return
        tab = self._editor.window_tab(event.window)
        self._last_source_window[tab] = event.window
        infoview = self._store.for_tab(tab)
        if infoview is not None:
            self.schedule_refresh(infoview)

    def _handle_window_closed(self, event: WindowClosed) -> None:
        infoview = self._store.for_window(event.window)
        if infoview is not None:
            self._mark_closed(infoview)
            return
        if self._last_source_window.get(event.tab) == event.window:
            del self._last_source_window[event.tab]
        if not self._editor.tab_is_valid(event.tab):
            return
        infoview = self._store.for_tab(event.tab)
        if infoview is None or not infoview.is_open:
            return
        if self._source_window(event.tab) is not None:
            return
        if len(self._editor.list_windows()) <= 1:
            return
        LOGGER.debug("Last source window of tab %s closed; closing infoview %s", event.tab, infoview.id)
        self.close(infoview)

    def _handle_tab_closed(self, event: TabClosed) -> None:
        infoview = self._store.for_tab(event.tab)
        if infoview is not None:
            self.teardown(infoview)

    def _handle_buffer_changed(self, event: BufferChanged) -> None:
        if not self._settings.is_source_filetype(self._editor.buffer_filetype(event.buffer)):
            return
        for infoview in self._store.infoviews():
            window = self._source_window(infoview.tab)
            if window is not None and self._editor.window_buffer(window) == event.buffer:
                self.schedule_refresh(infoview)

    def _handle_buffer_deleted(self, event: BufferDeleted) -> None:
        for info in self._store.infos():
            if info.bufnr == event.buffer:
                LOGGER.debug("Content buffer %s of info %s was deleted", event.buffer, info.id)

    def _handle_progress(self, document: str) -> None:
        for infoview in self._store.infoviews():
            position = infoview.info.position
            if position is not None and position.document == document:
                self.schedule_refresh(infoview)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve(self, infoview: InfoviewRef) -> Infoview:
        if isinstance(infoview, Infoview):
            if self._store.get_infoview(infoview.id) is not infoview:
                raise UnknownInfoviewError(infoview.id)
            return infoview
        return self._store.infoview(infoview)

    def _create(self, tab: int) -> Infoview:
        info = self._mint_info()
        infoview = self._store.mint_infoview(tab, info)
        if self._settings.autoopen:
            self.open(infoview)
        else:
            self.schedule_refresh(infoview)
        return infoview

    def _mint_info(self) -> Info:
        bufnr = self._editor.create_buffer(listed=False, filetype=INFO_FILETYPE)
        return self._store.mint_info(bufnr)

    def _release_window(self, window: int) -> None:
        if len(self._editor.list_windows()) > 1:
            self._editor.close_window(window)
            return
        # the editor keeps its last window; it shows a scratch buffer instead
        scratch = self._editor.create_buffer(listed=True)
        self._editor.set_window_buffer(window, scratch)
        LOGGER.debug("Window %s is the last one; swapped in scratch buffer %s", window, scratch)

    def _mark_closed(self, infoview: Infoview) -> None:
        infoview.window = None
        infoview.is_open = False
        self._cancel_pending(infoview.id)
        # an answer still in flight belongs to the panel as it was before closing
        infoview.info.next_generation()
        LOGGER.debug("Infoview %s closed", infoview.id)

    def _source_entered(self, window: int) -> None:
        if not self._is_source_window(window):
            return
        tab = self._editor.window_tab(window)
        self._last_source_window[tab] = window
        infoview = self._store.for_tab(tab)
        if infoview is None and self._settings.autoopen:
            self._create(tab)
            return
        if infoview is not None:
            self.schedule_refresh(infoview)

    def _is_source_window(self, window: int) -> bool:
        if not self._editor.window_is_valid(window):
            return False
        if self._store.for_window(window) is not None:
            return False
        buffer = self._editor.window_buffer(window)
        return self._settings.is_source_filetype(self._editor.buffer_filetype(buffer))

    def _source_window(self, tab: int) -> int | None:
        if not self._editor.tab_is_valid(tab):
            return None
        current = self._editor.current_window()
        if self._editor.window_tab(current) == tab and self._is_source_window(current):
            return current
        last = self._last_source_window.get(tab)
        if last is not None and self._is_source_window(last) and self._editor.window_tab(last) == tab:
            return last
        for window in self._editor.list_windows(tab):
            if self._is_source_window(window):
                return window
        return None

    def _spawn_refresh(self, infoview_id: int) -> None:
        self._pending.pop(infoview_id, None)
        infoview = self._store.get_infoview(infoview_id)
        if infoview is None:
            return
        task = asyncio.get_running_loop().create_task(self._run_refresh(infoview))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_refresh(self, infoview: Infoview) -> bool:
        if self._store.get_infoview(infoview.id) is not infoview:
            return False
        try:
            return await self.refresh(infoview)
        except asyncio.CancelledError:
            raise
        except Exception:
            LOGGER.exception("Scheduled refresh of infoview %s failed", infoview.id)
            return False

    def _cancel_pending(self, infoview_id: int) -> None:
        handle = self._pending.pop(infoview_id, None)
        if handle is not None:
            handle.cancel()
