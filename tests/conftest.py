"""Root conftest for all tests.

This file makes shared fixtures available across all test modules.
"""

import os

# Settings are read at import time; configure them before any app import
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("AUTH_SECRET_KEY", "test-secret-key")

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


@pytest.fixture
def fixed_today() -> date:
    """A Wednesday, used as 'today' for date range assertions."""
    return date(2025, 1, 15)


@pytest.fixture(scope="function")
def db_session():
    """
    Provides a transactional in-memory SQLite DB session for tests.

    Uses a StaticPool so the same connection is shared with FastAPI's worker
    threads in API tests. Rolled back after each test.
    """
    from app.db.models import Base

    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    connection = engine.connect()
    transaction = connection.begin()
    test_session_local = sessionmaker(bind=connection, autocommit=False, autoflush=False)
    session = test_session_local()

    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()
        engine.dispose()
