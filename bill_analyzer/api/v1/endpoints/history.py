"""
History API Endpoints.

Lists, searches and clears the volatile analysis history.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from bill_analyzer.api.deps import get_activity_log, get_history_store
from bill_analyzer.core.rate_limiter import limit_default
from bill_analyzer.models import ConfidenceStatus
from bill_analyzer.schemas.analysis import HistoryItemSchema, HistorySummary, MessageResponse
from bill_analyzer.services.history_store import ActivityLog, HistoryStore, LogType

router = APIRouter()


@router.get("", response_model=List[HistoryItemSchema])
@limit_default
def list_history(
    request: Request,
    search: str = "",
    status: Optional[ConfidenceStatus] = None,
    history: HistoryStore = Depends(get_history_store),
):
    """List past analyses, newest first, filtered by ID substring and status."""
    return [
        HistoryItemSchema.model_validate(item.to_dict())
        for item in history.search(search, status)
    ]


@router.get("/summary", response_model=HistorySummary)
@limit_default
def get_history_summary(
    request: Request,
    history: HistoryStore = Depends(get_history_store),
):
    """Totals across all stored analyses."""
    return HistorySummary(**history.summary())


@router.delete("", response_model=MessageResponse)
@limit_default
def clear_history(
    request: Request,
    history: HistoryStore = Depends(get_history_store),
    activity: ActivityLog = Depends(get_activity_log),
):
    """Remove every stored analysis."""
    removed = len(history)
    history.clear()
    activity.add(LogType.INFO, "History cleared", f"{removed} analyses removed")
    return MessageResponse(message=f"Cleared {removed} analyses")
