"""Tests for database URL selection and session handling."""

from datetime import datetime

import pytest

from looptimer.database import db
from looptimer.database.db import configure_engine, database_url, get_session, init_db
from looptimer.database.models import SavedTimer


def _row(timer_id="t1", position=0):
    return SavedTimer(
        id=timer_id,
        position=position,
        name="Rounds",
        duration_seconds=30,
        infinite_repeat=False,
        repeat_count=3,
        delay_seconds=5,
        tone_id="bell",
        volume=0.5,
        created_at=datetime(2024, 1, 2, 3, 4, 5),
    )


class TestDatabaseUrl:
    def test_default_is_sqlite_file(self, monkeypatch):
        monkeypatch.delenv(db.DB_URL_ENV, raising=False)
        assert database_url() == f"sqlite:///{db.DB_PATH}"

    def test_env_override(self, monkeypatch, tmp_path):
        url = f"sqlite:///{tmp_path / 'other.db'}"
        monkeypatch.setenv(db.DB_URL_ENV, url)
        assert database_url() == url

    def test_empty_env_falls_back(self, monkeypatch):
        monkeypatch.setenv(db.DB_URL_ENV, "")
        assert database_url() == f"sqlite:///{db.DB_PATH}"


class TestSessions:
    def test_commit_on_success(self):
        with get_session() as session:
            session.add(_row())
        with get_session() as session:
            assert session.query(SavedTimer).count() == 1

    def test_rollback_on_error(self):
        with pytest.raises(RuntimeError):
            with get_session() as session:
                session.add(_row())
                session.flush()
                raise RuntimeError("boom")
        with get_session() as session:
            assert session.query(SavedTimer).count() == 0

    def test_file_database_survives_reconfigure(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'timers.db'}"
        configure_engine(url)
        init_db()
        with get_session() as session:
            session.add(_row("keep"))

        configure_engine(url)
        with get_session() as session:
            row = session.get(SavedTimer, "keep")
            assert row is not None
            assert row.tone_id == "bell"
            assert row.created_at == datetime(2024, 1, 2, 3, 4, 5)
