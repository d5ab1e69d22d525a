"""Verification helpers: handle tracking, the transition oracle and polling utilities."""

from .buffers import CleanBuffer, assert_contents, assert_has_all, buffer_contents, clean_buffer, num_windows
from .handles import HandleKind, HandleTracker
from .oracle import (
    CycleReport,
    Expectation,
    InfoTransition,
    InfoviewOracle,
    InfoviewTransition,
    steady_info_successor,
    steady_successor,
)
from .waiting import wait_for_content, wait_for_line_diagnostics, wait_for_server_progress, wait_until

__all__ = [
    "CleanBuffer",
    "CycleReport",
    "Expectation",
    "HandleKind",
    "HandleTracker",
    "InfoTransition",
    "InfoviewOracle",
    "InfoviewTransition",
    "assert_contents",
    "assert_has_all",
    "buffer_contents",
    "clean_buffer",
    "num_windows",
    "steady_info_successor",
    "steady_successor",
    "wait_for_content",
    "wait_for_line_diagnostics",
    "wait_for_server_progress",
    "wait_until",
]
