"""Shared test fixtures for the typing ledger tests."""

import tempfile
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from typing_ledger.config import Settings
from typing_ledger.main import create_app
from typing_ledger.storage import InMemoryScoreStore, SqliteScoreStore


@pytest.fixture
def temp_db_path():
    """Create a temporary database path and clean up afterwards."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "scores.db"


@pytest.fixture
def memory_store():
    return InMemoryScoreStore()


@pytest.fixture
def sqlite_store(temp_db_path):
    return SqliteScoreStore(temp_db_path)


@pytest.fixture(params=["memory", "sqlite"])
def store(request, temp_db_path):
    """Each store implementation in turn."""
    if request.param == "sqlite":
        return SqliteScoreStore(temp_db_path)
    return InMemoryScoreStore()


@pytest.fixture
def api_client(memory_store):
    """TestClient for an app serving the in-memory store."""
    app = create_app(Settings(), store=memory_store)
    with TestClient(app) as client:
        yield client
