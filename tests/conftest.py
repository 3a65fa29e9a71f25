"""
Pytest configuration.

Forces the in-memory ledger backend before the app is imported and provides
a TestClient wired to a fresh store for every test.
"""

import os

os.environ["LEDGER_BACKEND"] = "memory"

import pytest
from fastapi.testclient import TestClient
from loguru import logger
from ar_dashboard.api.deps import get_store
from ar_dashboard.api.main import app
from ar_dashboard.services.storage import InMemoryLedgerStore


@pytest.fixture
def store():
    """Fresh in-memory ledger for each test"""
    return InMemoryLedgerStore()


@pytest.fixture
def client(store):
    """TestClient whose routes see the per-test store"""
    app.dependency_overrides[get_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def log_records():
    """Capture loguru records emitted during a test"""
    records = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
