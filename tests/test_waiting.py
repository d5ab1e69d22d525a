"""Tests for bounded waiting and buffer helpers."""

from __future__ import annotations

import asyncio

import pytest

from leanview.editor.headless import HeadlessEditor
from leanview.errors import ContentWaitTimeout, InvariantViolation
from leanview.infoview.models import Info
from leanview.lsp.collaborator import Position
from leanview.lsp.diagnostics import DiagnosticsTracker
from leanview.lsp.progress import ProgressTracker
from leanview.testing.buffers import assert_contents, assert_has_all, buffer_contents, clean_buffer, num_windows
from leanview.testing.waiting import (
    wait_for_content,
    wait_for_line_diagnostics,
    wait_for_server_progress,
    wait_until,
)


@pytest.mark.asyncio
async def test_wait_until_true_immediately() -> None:
    assert await wait_until(lambda: True, 0.1)


@pytest.mark.asyncio
async def test_wait_until_expires() -> None:
    assert not await wait_until(lambda: False, 0.03, interval=0.005)


@pytest.mark.asyncio
async def test_wait_until_sees_later_change() -> None:
    flag = {"ready": False}
    asyncio.get_running_loop().call_later(0.02, flag.update, {"ready": True})

    assert await wait_until(lambda: flag["ready"], 1.0, interval=0.005)


@pytest.mark.asyncio
async def test_wait_until_propagates_predicate_errors() -> None:
    def broken() -> bool:
        raise LookupError("predicate failed")

    with pytest.raises(LookupError):
        await wait_until(broken, 0.1)


@pytest.mark.asyncio
async def test_wait_for_server_progress() -> None:
    progress = ProgressTracker()
    progress.update("file:///Demo.lean", [(0, 3)])
    asyncio.get_running_loop().call_later(0.02, progress.update, "file:///Demo.lean", [])

    await wait_for_server_progress(progress, "file:///Demo.lean", timeout=1.0, interval=0.005)


@pytest.mark.asyncio
async def test_wait_for_server_progress_times_out() -> None:
    progress = ProgressTracker()
    progress.update("file:///Demo.lean", [(0, 3)])

    with pytest.raises(ContentWaitTimeout) as excinfo:
        await wait_for_server_progress(progress, "file:///Demo.lean", timeout=0.03, interval=0.005)

    assert excinfo.value.actual == ((0, 3),)


@pytest.mark.asyncio
async def test_wait_for_content() -> None:
    info = Info(id=1, bufnr=2)
    asyncio.get_running_loop().call_later(0.02, setattr, info, "msg", ["⊢ True"])

    assert await wait_for_content(info, ["⊢ True"], timeout=1.0, interval=0.005) == ["⊢ True"]
    assert await wait_for_content(info, lambda msg: "⊢ True" in msg, timeout=0.1) == ["⊢ True"]


@pytest.mark.asyncio
async def test_wait_for_content_times_out() -> None:
    info = Info(id=1, bufnr=2, msg=["old"])

    with pytest.raises(ContentWaitTimeout) as excinfo:
        await wait_for_content(info, ["new"], timeout=0.03, interval=0.005)

    assert "[content_wait_timeout]" in str(excinfo.value)
    assert excinfo.value.actual == ["old"]


def test_clean_buffers_get_unique_names(editor: HeadlessEditor) -> None:
    first = clean_buffer(editor, "example : True := trivial")
    second = clean_buffer(editor, ["theorem t : True := by", "  trivial"])

    assert first.name != second.name
    assert first.name.startswith("unittest-") and first.name.endswith(".lean")
    assert editor.current_buffer() == second.bufnr
    assert editor.buffer_filetype(second.bufnr) == "lean"
    assert buffer_contents(editor, second.bufnr) == "theorem t : True := by\n  trivial"


@pytest.mark.asyncio
async def test_clean_buffer_context_wipes_buffer(editor: HeadlessEditor) -> None:
    async with clean_buffer(editor, "example : True := trivial") as source:
        assert editor.buffer_is_valid(source.bufnr)
        assert num_windows(editor) == 1

    assert not editor.buffer_is_valid(source.bufnr)
    assert num_windows(editor) == 1


def test_content_assertions(editor: HeadlessEditor) -> None:
    editor.set_lines(1, ["goal", "⊢ True"])

    assert_contents(editor, 1, "goal\n⊢ True")
    assert_contents(editor, 1, ["goal", "⊢ True"])
    assert_has_all("goal\n⊢ True", ["goal", "True"])
    with pytest.raises(InvariantViolation):
        assert_contents(editor, 1, "other")
    with pytest.raises(InvariantViolation) as excinfo:
        assert_has_all("goal", ["goal", "missing"])
    assert excinfo.value.expected == ["missing"]


class SlowHover:
    """Hover provider whose text only matches from the ``ready_after``-th query on."""

    def __init__(self, ready_after: int, text: str) -> None:
        self.ready_after = ready_after
        self.text = text
        self.queries: list[tuple[str, Position]] = []

    async def hover(self, document: str, position: Position) -> str | None:
        self.queries.append((document, position))
        if len(self.queries) < self.ready_after:
            return None
        return self.text


@pytest.mark.asyncio
async def test_wait_until_accepts_coroutine_predicates() -> None:
    calls: list[int] = []

    async def third_time() -> bool:
        calls.append(1)
        return len(calls) >= 3

    assert await wait_until(third_time, 1.0, interval=0.001)
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_wait_for_server_progress_by_hover_match() -> None:
    server = SlowHover(ready_after=3, text="example : true = tt")

    await wait_for_server_progress(
        None,
        "file:///Demo.lean",
        hover_match="true = tt",
        server=server,
        position=Position(0, 9),
        timeout=1.0,
        interval=0.001,
    )

    assert len(server.queries) == 3
    assert server.queries[-1] == ("file:///Demo.lean", Position(0, 9))


@pytest.mark.asyncio
async def test_wait_for_server_progress_hover_mismatch_times_out() -> None:
    server = SlowHover(ready_after=1, text="nat")

    with pytest.raises(ContentWaitTimeout) as excinfo:
        await wait_for_server_progress(
            None, "file:///Demo.lean", hover_match="true = tt", server=server, timeout=0.03, interval=0.005
        )

    assert excinfo.value.expected == "true = tt"
    assert excinfo.value.actual == "nat"


@pytest.mark.asyncio
async def test_wait_for_server_progress_requires_a_source() -> None:
    with pytest.raises(ValueError):
        await wait_for_server_progress(None, "file:///Demo.lean")
    with pytest.raises(ValueError):
        await wait_for_server_progress(None, "file:///Demo.lean", hover_match="x")


@pytest.mark.asyncio
async def test_wait_for_line_diagnostics() -> None:
    diagnostics = DiagnosticsTracker()
    error = {"range": {"start": {"line": 2}, "end": {"line": 2}}, "message": "unknown identifier 'foo'"}
    asyncio.get_running_loop().call_later(0.02, diagnostics.update, "file:///Demo.lean", [error])

    found = await wait_for_line_diagnostics(diagnostics, "file:///Demo.lean", 2, timeout=1.0, interval=0.005)

    assert found == [error]


@pytest.mark.asyncio
async def test_wait_for_line_diagnostics_times_out() -> None:
    diagnostics = DiagnosticsTracker()
    elsewhere = {"range": {"start": {"line": 7}, "end": {"line": 7}}, "message": "unused variable"}
    diagnostics.update("file:///Demo.lean", [elsewhere])

    with pytest.raises(ContentWaitTimeout) as excinfo:
        await wait_for_line_diagnostics(diagnostics, "file:///Demo.lean", 2, timeout=0.03, interval=0.005)

    assert excinfo.value.actual == [elsewhere]
