"""Shared test fixtures for the wiki history test suite.

Every test gets its own in-memory SQLite database (one shared connection via
StaticPool, so the TestClient's worker thread sees the same data) with all
tables created fresh. Ids come from a counter instead of the clock so that
tests are deterministic.
"""

import itertools
import os

# Use an in-memory database and readable logs before any app imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from wiki_history.database import Base, get_db
from wiki_history.main import app
from wiki_history.models import PageType
from wiki_history.schemas.page import PageCreate
from wiki_history.services import ContentService

PROJECT_ID = 7


class CountingIdGenerator:
    """Deterministic IdGenerator: 1000, 1001, 1002, ..."""

    def __init__(self, start: int = 1000):
        self._counter = itertools.count(start)

    def next_id(self) -> int:
        return next(self._counter)


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture()
def db(engine):
    """Per-test database session."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture()
def ids():
    return CountingIdGenerator()


@pytest.fixture()
def service(db, ids):
    """ContentService with a small window so eviction is easy to reach."""
    return ContentService(db, id_generator=ids, window_size=3)


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_document(service: ContentService, title: str = "Notes", content: str = "", parent_id=None, **overrides):
    """Create a document page through the service and return it."""
    data = PageCreate(
        title=title,
        page_type=PageType.DOCUMENT,
        parent_id=parent_id,
        content=content,
        **overrides,
    )
    return service.create_page(PROJECT_ID, data)


def make_directory(service: ContentService, title: str = "Folder", parent_id=None, project_id: int = PROJECT_ID, **overrides):
    data = PageCreate(title=title, page_type=PageType.DIRECTORY, parent_id=parent_id, **overrides)
    return service.create_page(project_id, data)


def page_payload(title: str = "Notes", content: str = "# Notes", **overrides) -> dict:
    """Factory for page creation payloads."""
    payload = {
        "title": title,
        "page_type": "DOCUMENT",
        "content": content,
    }
    payload.update(overrides)
    return payload
