"""Dataclasses for infoview panels and the content they display."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..lsp.collaborator import SourcePosition

__all__ = ["Info", "Infoview"]


@dataclass(slots=True, eq=False)
class Info:
    """Content object of one panel: a buffer and the lines last rendered into it.

    ``generation`` increases every time a new content query starts, or an
    in-flight one must be abandoned. A response is applied only while the
    generation it was issued under is still current.
    """

    id: int
    bufnr: int
    msg: list[str] = field(default_factory=list)
    generation: int = 0
    position: SourcePosition | None = None

    # Bookkeeping maintained by the verification oracle.
    prev_msg: list[str] | None = None
    prev_buf: int | None = None
    prev_check: str | None = None

    def next_generation(self) -> int:
        self.generation += 1
        return self.generation

    def is_current(self, generation: int) -> bool:
        return self.generation == generation


@dataclass(slots=True, eq=False)
class Infoview:
    """A panel instance bound to one tab page.

    ``window`` is set exactly while the panel is open. ``info`` is owned
    exclusively; it may be replaced over the panel's lifetime but is never
    shared.
    """

    id: int
    tab: int
    info: Info
    is_open: bool = False
    window: int | None = None

    # Bookkeeping maintained by the verification oracle.
    prev_win: int | None = None
    prev_info: int | None = None
    prev_check: str | None = None
