"""Narrow interface to the language server that feeds the infoview."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol

__all__ = [
    "Position",
    "SourcePosition",
    "LanguageServer",
    "HoverProvider",
    "hover_text",
    "render_lines",
]


@dataclass(frozen=True, slots=True)
class Position:
    """Zero-based line/character location inside a document."""

    line: int = 0
    character: int = 0


@dataclass(frozen=True, slots=True)
class SourcePosition:
    """A position tied to the document it belongs to."""

    document: str
    position: Position = Position()

    def to_params(self) -> dict[str, Any]:
        """Return ``TextDocumentPositionParams`` for this location."""

        return {
            "textDocument": {"uri": self.document},
            "position": {"line": self.position.line, "character": self.position.character},
        }


class LanguageServer(Protocol):
    """What the engine needs from a language server client."""

    async def fetch_content(self, document: str, position: Position) -> str | None:
        """Return the goal/hover text for ``position`` or ``None`` when nothing applies."""
        ...


class HoverProvider(Protocol):
    """Servers that answer plain hover queries, used to detect readiness."""

    async def hover(self, document: str, position: Position) -> str | None:
        ...


def hover_text(result: Mapping[str, Any] | None) -> str | None:
    """Flatten a ``textDocument/hover`` result into plain text.

    Accepts ``MarkupContent``, a single ``MarkedString`` or a list of them.
    """

    if not result:
        return None
    contents = result.get("contents")
    if contents is None:
        return None
    if isinstance(contents, str):
        return contents
    if isinstance(contents, Mapping):
        value = contents.get("value")
        return str(value) if value is not None else None
    parts: list[str] = []
    for item in contents:
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, Mapping) and item.get("value") is not None:
            parts.append(str(item["value"]))
    return "\n".join(parts) if parts else None


def render_lines(content: str) -> list[str]:
    """Split collaborator text into buffer lines."""

    return content.split("\n")
