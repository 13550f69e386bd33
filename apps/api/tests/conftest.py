from __future__ import annotations

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Ensure config is set before app import
os.environ.setdefault("ENV", "local")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_AUTO_CREATE", "false")
os.environ.setdefault("JWT_SECRET", "test_jwt_secret_32_chars_minimum")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("SECURITY_HEADERS_ENABLED", "true")

from volunteer_hub.db import get_db  # noqa: E402
from volunteer_hub.main import app  # noqa: E402
from volunteer_hub.models import Base  # noqa: E402
from tests.helpers import make_organizer, make_volunteer  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    # A file (not :memory:) so every thread and session sees the same database.
    engine = create_engine(
        f"sqlite:///{tmp_path / 'volunteer_hub.db'}",
        future=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, future=True)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client(session_factory):
    def _get_test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_test_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def organizer(db_session):
    return make_organizer(db_session)


@pytest.fixture
def volunteer(db_session):
    return make_volunteer(db_session)
