import os
import tempfile

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are read when backend.app is imported
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="thinkbright-test-")
os.environ.pop("DATABASE_URL", None)

from backend.app import app  # noqa: E402
from backend.database import get_db  # noqa: E402
from backend.db_models import Base  # noqa: E402
from backend.storage import DatabaseStorage  # noqa: E402


@pytest.fixture
def engine():
    """In-memory SQLite shared across the TestClient threadpool."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def storage(session):
    return DatabaseStorage(session)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
