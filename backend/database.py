from __future__ import annotations

import logging
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db_models import Base

logger = logging.getLogger("thinkbright.database")

_engine: Optional[Engine] = None
SessionLocal = sessionmaker(autocommit=False, autoflush=False)


def build_engine(database_url: str) -> Engine:
    """Purpose: Create a SQLAlchemy engine for the configured database URL.
    Inputs/Outputs: Input is a database URL; output is an Engine.
    Side Effects / State: None until the first connection is opened.
    Dependencies: Uses sqlalchemy.create_engine.
    Failure Modes: Unknown dialects or missing drivers raise at creation time.
    If Removed: No session can be opened and every API write fails.
    Testing Notes: Pass a sqlite URL and verify check_same_thread is disabled.
    """
    # SQLite connections are shared across the threadpool that serves sync routes.
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, pool_pre_ping=True, connect_args=connect_args)


def configure(database_url: str) -> Engine:
    """Bind the process-wide session factory to a fresh engine."""
    global _engine
    _engine = build_engine(database_url)
    SessionLocal.configure(bind=_engine)
    logger.info("Database engine configured for %s", _engine.url.get_backend_name())
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    target = engine or _engine
    if target is None:
        raise RuntimeError("Database engine not configured. Call configure() first.")
    Base.metadata.create_all(bind=target)


def get_db() -> Iterator[Session]:
    """FastAPI dependency yielding one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
