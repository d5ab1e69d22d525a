"""Adapter from a raw JSON-RPC request function to :class:`LanguageServer`.

The transport is not ours: the host supplies a coroutine that sends one request
and returns its ``result`` (raising on protocol errors). The adapter asks for
the Lean 4 plain goal first and falls back to hover text, which is all a Lean 3
server offers.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping

from .collaborator import Position, SourcePosition, hover_text

__all__ = ["RequestLanguageServer", "PLAIN_GOAL_METHOD", "HOVER_METHOD"]

LOGGER = logging.getLogger(__name__)

PLAIN_GOAL_METHOD = "$/lean/plainGoal"
HOVER_METHOD = "textDocument/hover"

Request = Callable[[str, Mapping[str, Any]], Awaitable[Any]]


class RequestLanguageServer:
    """Serves goal and hover queries through a host-provided request coroutine."""

    def __init__(self, request: Request, *, goal_method: str | None = PLAIN_GOAL_METHOD) -> None:
        self._request = request
        self._goal_method = goal_method

    async def fetch_content(self, document: str, position: Position) -> str | None:
        if self._goal_method is not None:
            goals = await self.plain_goal(document, position)
            if goals is not None:
                return goals
        return await self.hover(document, position)

    async def plain_goal(self, document: str, position: Position) -> str | None:
        """Goals at ``position`` separated by blank lines, or ``None`` outside a proof."""

        if self._goal_method is None:
            return None
        params = SourcePosition(document, position).to_params()
        result = await self._request(self._goal_method, params)
        if not isinstance(result, Mapping):
            return None
        goals = result.get("goals")
        if goals is None:
            return None
        if not goals:
            return "no goals"
        return "\n\n".join(str(goal) for goal in goals)

    async def hover(self, document: str, position: Position) -> str | None:
        params = SourcePosition(document, position).to_params()
        result = await self._request(HOVER_METHOD, params)
        text = hover_text(result)
        LOGGER.debug("Hover at %s:%s -> %s", document, position.line, "text" if text else "nothing")
        return text
