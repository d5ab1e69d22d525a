"""Server progress feed: which parts of each document are still being processed."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

__all__ = ["ProgressTracker", "FILE_PROGRESS_METHOD"]

LOGGER = logging.getLogger(__name__)

FILE_PROGRESS_METHOD = "$/lean/fileProgress"

ProgressListener = Callable[[str], None]
LineRange = tuple[int, int]


class ProgressTracker:
    """Tracks in-flight processing ranges reported by the server, per document.

    A document the server has never reported on is considered busy; it becomes
    idle once a report with no processing ranges arrives.
    """

    def __init__(self) -> None:
        self._processing: dict[str, tuple[LineRange, ...]] = {}
        self._listeners: list[ProgressListener] = []

    def update(self, document: str, processing: Iterable[LineRange]) -> None:
        ranges = tuple((int(start), int(end)) for start, end in processing)
        previous = self._processing.get(document)
        self._processing[document] = ranges
        if previous == ranges:
            return
        LOGGER.debug("Progress for %s: %s", document, ranges or "idle")
        for listener in list(self._listeners):
            listener(document)

    def handle_notification(self, message: Mapping[str, Any]) -> bool:
        """Consume a ``$/lean/fileProgress`` notification; return whether it was one."""

        if message.get("method") != FILE_PROGRESS_METHOD:
            return False
        params = message.get("params") or {}
        document = (params.get("textDocument") or {}).get("uri")
        if not document:
            LOGGER.warning("Ignoring progress notification without a document: %s", message)
            return False
        ranges: list[LineRange] = []
        for item in params.get("processing") or []:
            range_ = item.get("range") or {}
            start = (range_.get("start") or {}).get("line", 0)
            end = (range_.get("end") or {}).get("line", start)
            ranges.append((start, end))
        self.update(document, ranges)
        return True

    def processing(self, document: str) -> tuple[LineRange, ...] | None:
        return self._processing.get(document)

    def is_busy(self, document: str) -> bool:
        return self._processing.get(document) != ()

    def forget(self, document: str) -> None:
        self._processing.pop(document, None)

    def subscribe(self, listener: ProgressListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: ProgressListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass
