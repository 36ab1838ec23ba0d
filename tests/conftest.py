"""Pytest configuration for test isolation.

The app keeps one store per process, backed by ``PROMPTPAD_STORE_PATH``.
Each test gets its own store file under ``tmp_path`` and fresh caches.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from promptpad import logging_setup
from promptpad.config import reset_settings
from promptpad.main import reset_store


@pytest.fixture(autouse=True)
def store_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "store.json"
    monkeypatch.setenv("PROMPTPAD_STORE_PATH", os.fspath(path))
    reset_settings()
    reset_store()
    yield path
    reset_settings()
    reset_store()


@pytest.fixture(autouse=True)
def _restore_pkg_logger(monkeypatch: pytest.MonkeyPatch):
    # Entrypoints configure the package logger once per process; undo that
    # after each test so later tests start from an unconfigured logger.
    logger = logging.getLogger("promptpad")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    monkeypatch.setattr(logging_setup, "_CONFIGURED", logging_setup._CONFIGURED)
    yield
    logger.handlers, logger.level, logger.propagate = saved


@pytest.fixture
def sample_records():
    return [
        {
            "title": "Summarize",
            "content": 'Summarize this, then say "done".',
            "notes": "line one\nline two",
            "author": "Ana",
            "link": "https://example.com/a,b",
            "category": "Writing",
            "date": "2024-03-01",
        },
        {
            "title": "Refactor",
            "content": "Refactor the function below:\r\n\r\ndef f(): pass",
            "notes": "",
            "author": "Luis",
            "link": "",
            "category": "Code",
            "date": "2024-01-15",
        },
    ]
