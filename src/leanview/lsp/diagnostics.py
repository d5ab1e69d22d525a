"""Diagnostics feed: the latest ``textDocument/publishDiagnostics`` per document."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

__all__ = ["DiagnosticsTracker", "PUBLISH_DIAGNOSTICS_METHOD"]

LOGGER = logging.getLogger(__name__)

PUBLISH_DIAGNOSTICS_METHOD = "textDocument/publishDiagnostics"

Diagnostic = Mapping[str, Any]


def _line_span(diagnostic: Diagnostic) -> tuple[int, int]:
    range_ = diagnostic.get("range") or {}
    start = (range_.get("start") or {}).get("line", 0)
    end = (range_.get("end") or {}).get("line", start)
    return start, end


class DiagnosticsTracker:
    """Each publication replaces the document's previous diagnostics wholesale."""

    def __init__(self) -> None:
        self._by_document: dict[str, tuple[Diagnostic, ...]] = {}

    def update(self, document: str, diagnostics: Iterable[Diagnostic]) -> None:
        self._by_document[document] = tuple(diagnostics)
        LOGGER.debug("%d diagnostics for %s", len(self._by_document[document]), document)

    def handle_notification(self, message: Mapping[str, Any]) -> bool:
        if message.get("method") != PUBLISH_DIAGNOSTICS_METHOD:
            return False
        params = message.get("params") or {}
        document = params.get("uri")
        if not document:
            LOGGER.warning("Ignoring diagnostics without a document: %s", message)
            return False
        self.update(document, params.get("diagnostics") or [])
        return True

    def diagnostics(self, document: str) -> tuple[Diagnostic, ...]:
        return self._by_document.get(document, ())

    def line_diagnostics(self, document: str, line: int) -> list[Diagnostic]:
        """Diagnostics whose range covers ``line``."""

        found = []
        for diagnostic in self.diagnostics(document):
            start, end = _line_span(diagnostic)
            if start <= line <= end:
                found.append(diagnostic)
        return found

    def clear(self, document: str) -> None:
        self._by_document.pop(document, None)
