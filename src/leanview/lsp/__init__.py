"""Language-server collaborator contract, request adapter and notification feeds."""

from .client import HOVER_METHOD, PLAIN_GOAL_METHOD, RequestLanguageServer
from .collaborator import HoverProvider, LanguageServer, Position, SourcePosition, hover_text, render_lines
from .diagnostics import PUBLISH_DIAGNOSTICS_METHOD, DiagnosticsTracker
from .progress import FILE_PROGRESS_METHOD, ProgressTracker

__all__ = [
    "DiagnosticsTracker",
    "FILE_PROGRESS_METHOD",
    "HOVER_METHOD",
    "HoverProvider",
    "LanguageServer",
    "PLAIN_GOAL_METHOD",
    "PUBLISH_DIAGNOSTICS_METHOD",
    "Position",
    "ProgressTracker",
    "RequestLanguageServer",
    "SourcePosition",
    "hover_text",
    "render_lines",
]
