"""Database connection and session management.

The store lives in ``$LOOPTIMER_HOME/looptimer.db`` unless
``LOOPTIMER_DB_URL`` names another SQLAlchemy URL.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker, Session as OrmSession

from ..settings import APP_SUPPORT_DIR
from .models import Base


logger = logging.getLogger(__name__)

DB_PATH = APP_SUPPORT_DIR / "looptimer.db"
DB_URL_ENV = "LOOPTIMER_DB_URL"

_engine: Engine | None = None
_SessionFactory = None


def database_url() -> str:
    """``LOOPTIMER_DB_URL`` if set, else the SQLite file under the app dir."""
    return os.environ.get(DB_URL_ENV) or f"sqlite:///{DB_PATH}"


def _make_engine(url: str) -> Engine:
    parsed = make_url(url)
    connect_args = {}
    if parsed.get_backend_name() == "sqlite":
        connect_args["check_same_thread"] = False
    logger.debug("opening database %s", parsed)
    return create_engine(url, connect_args=connect_args, echo=False)


def _get_engine() -> Engine:
    global _engine
    if _engine is None:
        url = database_url()
        if url == f"sqlite:///{DB_PATH}":
            APP_SUPPORT_DIR.mkdir(parents=True, exist_ok=True)
        _engine = _make_engine(url)
    return _engine


def _get_session_factory():
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=_get_engine(), expire_on_commit=False)
    return _SessionFactory


# ── public API ────────────────────────────────────────────────────────────


def configure_engine(url: str) -> None:
    """Point the store at *url*, disposing of any engine already open.

    Tests use ``sqlite:///:memory:``.
    """
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _SessionFactory = None
    _engine = _make_engine(url)


def init_db() -> None:
    """Create the saved-timer table if it does not exist yet."""
    Base.metadata.create_all(_get_engine())


@contextmanager
def get_session():
    """Yield a SQLAlchemy session; commit on success, rollback on error."""
    factory = _get_session_factory()
    session: OrmSession = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
