"""Shared test helpers and stub classes.

Import from here instead of duplicating these classes in individual test files.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass
from typing import Callable

from leanview.lsp.collaborator import Position


@dataclass(slots=True)
class _Scripted:
    content: str | None
    gate: asyncio.Event | None = None


class ScriptedLanguageServer:
    """Language server stub whose answers are scripted by the test.

    Queued replies are consumed in call order and may be held back behind an
    :class:`asyncio.Event`. Without a queued reply the stub answers from
    ``responses`` keyed by document, falling back to ``default``.

    Example:
        server = ScriptedLanguageServer()
        gate = server.queue("old", hold=True)
        server.queue("new")
    """

    def __init__(self, *, default: str | None = None) -> None:
        self.default = default
        self.responses: dict[str, str | None] = {}
        self.calls: list[tuple[str, Position]] = []
        self.responder: Callable[[str, Position], str | None] | None = None
        self.hang = False
        self._queue: deque[_Scripted] = deque()

    def queue(self, content: str | None, *, hold: bool = False) -> asyncio.Event | None:
        gate = asyncio.Event() if hold else None
        self._queue.append(_Scripted(content, gate))
        return gate

    async def wait_for_calls(self, count: int, *, timeout: float = 1.0) -> None:
        """Yield to the loop until at least ``count`` queries have started."""

        async def started() -> None:
            while len(self.calls) < count:
                await asyncio.sleep(0)

        await asyncio.wait_for(started(), timeout)

    async def fetch_content(self, document: str, position: Position) -> str | None:
        self.calls.append((document, position))
        if self._queue:
            scripted = self._queue.popleft()
            if scripted.gate is not None:
                await scripted.gate.wait()
            return scripted.content
        if self.hang:
            await asyncio.Event().wait()
        if self.responder is not None:
            return self.responder(document, position)
        return self.responses.get(document, self.default)
