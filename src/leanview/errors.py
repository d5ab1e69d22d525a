"""Failure types raised by the infoview engine and its verification helpers.

Verification failures derive from :class:`AssertionError` so they surface as
ordinary test failures, while still carrying structured expected/actual
payloads for diagnosis.
"""

from __future__ import annotations

import pprint
from dataclasses import dataclass, field
from typing import Any, ClassVar


class ErrorCode:
    """Constants for verification error codes."""

    INVARIANT_VIOLATION = "invariant_violation"
    UNEXPECTED_HANDLE_MUTATION = "unexpected_handle_mutation"
    STALE_IDENTITY = "stale_identity"
    CONTENT_WAIT_TIMEOUT = "content_wait_timeout"


_MISSING = object()


def _render(value: Any) -> str:
    if isinstance(value, (set, frozenset)):
        value = sorted(value)
    return pprint.pformat(value, width=88, compact=True)


@dataclass(eq=False)
class VerificationError(AssertionError):
    """Base class for all fatal verification failures.

    Attributes:
        code: Machine-readable error identifier.
        message: Human-readable description.
        expected: What the check expected to observe, when meaningful.
        actual: What was actually observed, when meaningful.
    """

    code: str
    message: str
    expected: Any = field(default=_MISSING)
    actual: Any = field(default=_MISSING)

    severity: ClassVar[str] = "fatal"

    def __post_init__(self) -> None:
        AssertionError.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.expected is not _MISSING:
            result["expected"] = self.expected
        if self.actual is not _MISSING:
            result["actual"] = self.actual
        return result

    def __str__(self) -> str:
        text = f"[{self.code}] {self.message}"
        if self.expected is not _MISSING or self.actual is not _MISSING:
            text += f"\n  expected: {_render(self.expected)}\n       got: {_render(self.actual)}"
        return text


@dataclass(eq=False)
class InvariantViolation(VerificationError):
    """A live Infoview or Info failed a structural check."""

    code: str = field(default=ErrorCode.INVARIANT_VIOLATION)
    message: str = field(default="Structural invariant violated")


@dataclass(eq=False)
class UnexpectedHandleMutation(VerificationError):
    """Window or buffer handles changed in a way that was not declared."""

    code: str = field(default=ErrorCode.UNEXPECTED_HANDLE_MUTATION)
    message: str = field(default="Unexpected handle mutation")


@dataclass(eq=False)
class StaleIdentityError(VerificationError):
    """An identifier was reused, declared twice, or refers to nothing alive."""

    code: str = field(default=ErrorCode.STALE_IDENTITY)
    message: str = field(default="Stale or duplicate identity")


@dataclass(eq=False)
class ContentWaitTimeout(VerificationError):
    """A bounded wait for a content condition expired."""

    code: str = field(default=ErrorCode.CONTENT_WAIT_TIMEOUT)
    message: str = field(default="Timed out waiting for content")
    timeout: float = 0.0


class UnknownInfoviewError(KeyError):
    """Raised when the engine is asked about an Infoview it does not own."""

    def __init__(self, infoview_id: int) -> None:
        super().__init__(infoview_id)
        self.infoview_id = infoview_id

    def __str__(self) -> str:
        return f"Unknown or retired infoview: {self.infoview_id}"


__all__ = [
    "ErrorCode",
    "VerificationError",
    "InvariantViolation",
    "UnexpectedHandleMutation",
    "StaleIdentityError",
    "ContentWaitTimeout",
    "UnknownInfoviewError",
]
