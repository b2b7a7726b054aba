"""
API dependencies for dependency injection.

Provides the process-wide history store, activity log and OCR service.
Tests replace them through app.dependency_overrides.
"""

from functools import lru_cache

from bill_analyzer.config import settings
from bill_analyzer.services.history_store import ActivityLog, HistoryStore
from bill_analyzer.services.ocr_service import OCRService


@lru_cache
def get_history_store() -> HistoryStore:
    """Get the shared in-memory analysis history."""
    return HistoryStore(max_items=settings.HISTORY_MAX_ITEMS)


@lru_cache
def get_activity_log() -> ActivityLog:
    """Get the shared in-memory activity log."""
    return ActivityLog(max_entries=settings.LOG_MAX_ENTRIES)


@lru_cache
def get_ocr_service() -> OCRService:
    """Get the shared OCR service (one rate limit state per process)."""
    return OCRService(config=settings)
