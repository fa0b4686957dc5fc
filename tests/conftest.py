"""Shared pytest fixtures for LoopTimer tests."""

import os
import sys

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtGui import QGuiApplication

from looptimer.database.db import configure_engine, init_db
from looptimer.timer.engine import TimerEngine

from helpers import ToneRecorder


@pytest.fixture(scope="session")
def qapp():
    """A single QGuiApplication instance shared across the entire test run."""
    app = QGuiApplication.instance() or QGuiApplication(sys.argv)
    yield app


@pytest.fixture(autouse=True)
def test_db():
    """Point every test at a fresh in-memory SQLite database."""
    configure_engine("sqlite:///:memory:")
    init_db()
    yield


@pytest.fixture
def tones():
    return ToneRecorder()


@pytest.fixture
def engine(qapp, tones):
    """Fresh TimerEngine whose tone hook records calls."""
    eng = TimerEngine(parent=None, on_play_tone=tones)
    yield eng
    eng.dispose()


@pytest.fixture
def settings_path(tmp_path, monkeypatch):
    """Redirect settings.json into the test's temp directory."""
    path = tmp_path / "settings.json"
    monkeypatch.setattr("looptimer.settings.SETTINGS_PATH", path)
    return path
