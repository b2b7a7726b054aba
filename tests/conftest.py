"""
Pytest fixtures shared across the test suite.

Provides sample bill texts, fixed identifier sources and an API test
client wired to fresh in-memory stores.
"""

import random
from datetime import datetime
from typing import Generator
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from bill_analyzer.api.deps import get_activity_log, get_history_store, get_ocr_service
from bill_analyzer.core.rate_limiter import limiter
from bill_analyzer.main import app
from bill_analyzer.samples import ER_VISIT, LAB_TESTS, OUTPATIENT_SURGERY
from bill_analyzer.services.history_store import ActivityLog, HistoryStore
from bill_analyzer.services.ocr_service import OCRService


FIXED_TIMESTAMP = datetime(2024, 10, 12, 9, 30, 0)


@pytest.fixture
def er_visit_text() -> str:
    """ER visit bill with duplicate charges and one dominating charge."""
    return ER_VISIT.content


@pytest.fixture
def lab_tests_text() -> str:
    """Laboratory bill whose first total label is the subtotal."""
    return LAB_TESTS.content


@pytest.fixture
def surgery_text() -> str:
    """Outpatient surgery bill with a premium care surcharge."""
    return OUTPATIENT_SURGERY.content


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible identifiers."""
    return random.Random(1234)


@pytest.fixture
def fixed_clock():
    """Clock returning a constant timestamp."""
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def history_store() -> HistoryStore:
    """Fresh analysis history."""
    return HistoryStore(max_items=100)


@pytest.fixture
def activity_log() -> ActivityLog:
    """Fresh activity log."""
    return ActivityLog(max_entries=500)


@pytest.fixture
def mock_ocr_service() -> MagicMock:
    """OCR service double; tests set return values per call."""
    return MagicMock(spec=OCRService)


@pytest.fixture(scope="function")
def client(
    history_store: HistoryStore,
    activity_log: ActivityLog,
    mock_ocr_service: MagicMock,
) -> Generator[TestClient, None, None]:
    """
    Create a test client with in-memory store overrides.

    Rate limiting is switched off so tests can call endpoints freely.

    Yields:
        TestClient: FastAPI test client.
    """
    app.dependency_overrides[get_history_store] = lambda: history_store
    app.dependency_overrides[get_activity_log] = lambda: activity_log
    app.dependency_overrides[get_ocr_service] = lambda: mock_ocr_service
    rate_limit_enabled = limiter.enabled
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    limiter.enabled = rate_limit_enabled
    app.dependency_overrides.clear()
