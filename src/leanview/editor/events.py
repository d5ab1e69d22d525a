"""Editor events and the synchronous bus that delivers them."""

from __future__ import annotations

import logging
from typing import Callable, List, MutableMapping, Type, TypeVar

_LOGGER = logging.getLogger(__name__)


class EditorEvent:
    """Base class for events emitted by an editor surface."""

    __slots__ = ()


class WindowFocused(EditorEvent):
    """Published after the current window changes."""

    __slots__ = ("window", "previous")

    def __init__(self, window: int, *, previous: int | None = None) -> None:
        self.window = window
        self.previous = previous


class CursorMoved(EditorEvent):
    """Published after the cursor of a window moves."""

    __slots__ = ("window", "line", "character")

    def __init__(self, window: int, *, line: int, character: int) -> None:
        self.window = window
        self.line = line
        self.character = character


class WindowClosed(EditorEvent):
    """Published after a window is destroyed."""

    __slots__ = ("window", "tab", "buffer")

    def __init__(self, window: int, *, tab: int, buffer: int | None) -> None:
        self.window = window
        self.tab = tab
        self.buffer = buffer


class TabClosed(EditorEvent):
    """Published after a tab page and all of its windows are gone."""

    __slots__ = ("tab",)

    def __init__(self, tab: int) -> None:
        self.tab = tab


class BufferEntered(EditorEvent):
    """Published after a window starts displaying a different buffer."""

    __slots__ = ("window", "buffer")

    def __init__(self, window: int, *, buffer: int) -> None:
        self.window = window
        self.buffer = buffer


class BufferChanged(EditorEvent):
    """Published after the lines of a buffer are replaced."""

    __slots__ = ("buffer",)

    def __init__(self, buffer: int) -> None:
        self.buffer = buffer


class BufferDeleted(EditorEvent):
    """Published after a buffer is wiped."""

    __slots__ = ("buffer",)

    def __init__(self, buffer: int) -> None:
        self.buffer = buffer


E = TypeVar("E", bound=EditorEvent)
Subscriber = Callable[[EditorEvent], None]


class EditorEventBus:
    """Synchronous pub/sub bus for editor events.

    Handlers run in subscription order on the publishing call stack. A failing
    handler is logged and does not prevent the remaining handlers from running.
    """

    def __init__(self) -> None:
        self._subscribers: MutableMapping[Type[EditorEvent], List[Subscriber]] = {}

    def subscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)  # type: ignore[arg-type]

    def unsubscribe(self, event_type: Type[E], handler: Callable[[E], None]) -> None:
        subscribers = self._subscribers.get(event_type)
        if not subscribers:
            return
        subscribers[:] = [sub for sub in subscribers if sub != handler]
        if not subscribers:
            self._subscribers.pop(event_type, None)

    def publish(self, event: EditorEvent) -> None:
        to_invoke: list[Subscriber] = []
        for event_type, subscribers in list(self._subscribers.items()):
            if isinstance(event, event_type):
                to_invoke.extend(subscribers)
        for callback in to_invoke:
            try:
                callback(event)
            except Exception:  # pragma: no cover - subscriber isolation
                _LOGGER.exception("Editor event subscriber failed for %s", type(event).__name__)


__all__ = [
    "EditorEvent",
    "EditorEventBus",
    "WindowFocused",
    "CursorMoved",
    "WindowClosed",
    "TabClosed",
    "BufferEntered",
    "BufferChanged",
    "BufferDeleted",
]
