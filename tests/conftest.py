from __future__ import annotations

import logging
import sys
from pathlib import Path

import pytest

from tests._fixtures.project_builder import ProjectBuilder, RecordingToolRunner


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    monkeypatch.setattr(sys, "dont_write_bytecode", True)
    return ProjectBuilder(tmp_path)


@pytest.fixture
def tool_runner() -> RecordingToolRunner:
    return RecordingToolRunner()


@pytest.fixture(autouse=True)
def _reset_pagelite_logger():
    """Undo configure_logging() so caplog sees pagelite records."""
    yield
    logger = logging.getLogger("pagelite")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
