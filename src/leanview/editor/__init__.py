"""Editor surface contract and the in-memory implementation."""

from .events import (
    BufferChanged,
    BufferDeleted,
    BufferEntered,
    CursorMoved,
    EditorEvent,
    EditorEventBus,
    TabClosed,
    WindowClosed,
    WindowFocused,
)
from .headless import HeadlessEditor
from .surface import EditorSurface

__all__ = [
    "BufferChanged",
    "BufferDeleted",
    "BufferEntered",
    "CursorMoved",
    "EditorEvent",
    "EditorEventBus",
    "EditorSurface",
    "HeadlessEditor",
    "TabClosed",
    "WindowClosed",
    "WindowFocused",
]
