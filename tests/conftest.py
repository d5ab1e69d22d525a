"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from leanview.editor.headless import HeadlessEditor
from leanview.infoview.engine import SynchronizationEngine
from leanview.lsp.progress import ProgressTracker
from leanview.services.settings import Settings
from leanview.testing.handles import HandleTracker
from leanview.testing.oracle import InfoviewOracle
from tests.helpers import ScriptedLanguageServer


@pytest.fixture
def settings() -> Settings:
    """Fast timings so waits in the suite stay short."""
    return Settings(
        autoopen=False,
        debounce_seconds=0.0,
        request_timeout=0.2,
        change_wait_seconds=0.5,
        keep_wait_seconds=0.05,
        poll_interval=0.005,
    )


@pytest.fixture
def editor() -> HeadlessEditor:
    return HeadlessEditor()


@pytest.fixture
def server() -> ScriptedLanguageServer:
    return ScriptedLanguageServer()


@pytest.fixture
def progress() -> ProgressTracker:
    return ProgressTracker()


@pytest.fixture
def engine(editor, server, settings, progress):
    engine = SynchronizationEngine(editor=editor, server=server, settings=settings, progress=progress)
    engine.attach()
    yield engine
    engine.detach()


@pytest.fixture
def tracker(editor) -> HandleTracker:
    tracker = HandleTracker(editor)
    tracker.prime()
    return tracker


@pytest.fixture
def oracle(engine, tracker, settings) -> InfoviewOracle:
    return InfoviewOracle(engine.store, tracker, settings)
