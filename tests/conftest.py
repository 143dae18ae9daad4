"""
Shared fixtures. The environment is set before any devevent module is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_TOKEN"] = "test-admin-token"

import pytest

from devevent.services.repositories import open_sql_database


@pytest.fixture
def database(tmp_path):
    """SQLite-backed database handle, fresh for every test"""
    db = open_sql_database(f"sqlite:///{tmp_path / 'test_devevent.db'}")
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def event_payload():
    """A valid event submission"""
    return {
        "title": "React Conf 2024",
        "description": "The official React conference.",
        "overview": "Two days of talks about React and its ecosystem.",
        "image": "/images/react-conf.png",
        "venue": "Henderson Convention Center",
        "location": "Henderson, NV",
        "date": "2024-05-15",
        "time": "09:00",
        "mode": "hybrid",
        "audience": "Frontend developers",
        "agenda": ["Keynote", "Server Components deep dive"],
        "organizer": "Meta Open Source",
        "tags": ["react", "javascript"],
    }


@pytest.fixture
def admin_headers():
    return {"Authorization": "Bearer test-admin-token"}
