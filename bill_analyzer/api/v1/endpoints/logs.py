"""
Activity Log API Endpoints.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from bill_analyzer.api.deps import get_activity_log
from bill_analyzer.core.rate_limiter import limit_default
from bill_analyzer.schemas.analysis import LogEntrySchema, MessageResponse
from bill_analyzer.services.history_store import ActivityLog, LogType

router = APIRouter()


@router.get("", response_model=List[LogEntrySchema])
@limit_default
def list_logs(
    request: Request,
    log_type: Optional[LogType] = Query(None, alias="type"),
    activity: ActivityLog = Depends(get_activity_log),
):
    """List activity log entries, newest first, optionally by type."""
    return [LogEntrySchema.model_validate(entry.to_dict()) for entry in activity.entries(log_type)]


@router.get("/export", response_class=PlainTextResponse)
@limit_default
def export_logs(
    request: Request,
    activity: ActivityLog = Depends(get_activity_log),
):
    """Download the activity log as plain text."""
    return PlainTextResponse(
        activity.export_text(),
        headers={"Content-Disposition": 'attachment; filename="bill-analyzer-logs.txt"'},
    )


@router.delete("", response_model=MessageResponse)
@limit_default
def clear_logs(
    request: Request,
    activity: ActivityLog = Depends(get_activity_log),
):
    """Remove every activity log entry."""
    activity.clear()
    return MessageResponse(message="Logs cleared")
