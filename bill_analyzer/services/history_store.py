"""
Volatile in-process history of analyses and user-facing activity log.

Nothing here is durable: both stores live in memory, are bounded, and
are lost on restart. They only give the API something to list and
re-render letters and exports from.
"""

import logging
import threading
import uuid
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from bill_analyzer.models import AnalysisResult, ConfidenceStatus

logger = logging.getLogger(__name__)


class LogType(str, Enum):
    """Activity log entry types."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class AnalysisHistoryItem:
    """Summary of one stored analysis."""

    id: str
    patient_id: str
    timestamp: datetime
    status: ConfidenceStatus
    total_savings: float
    findings_count: int
    anomalies_count: int

    @classmethod
    def from_result(cls, result: AnalysisResult) -> "AnalysisHistoryItem":
        return cls(
            id=result.id,
            patient_id=result.patient_id,
            timestamp=result.timestamp,
            status=result.status,
            total_savings=result.total_savings,
            findings_count=len(result.findings),
            anomalies_count=result.anomalies_count,
        )

    def to_dict(self) -> dict:
        """Convert history item to dictionary."""
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "timestamp": self.timestamp.isoformat(),
            "status": self.status.value,
            "total_savings": self.total_savings,
            "findings_count": self.findings_count,
            "anomalies_count": self.anomalies_count,
        }


@dataclass(frozen=True)
class LogEntry:
    """One activity log entry."""

    type: LogType
    message: str
    details: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert log entry to dictionary."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "message": self.message,
            "details": self.details,
        }

    def to_text(self) -> str:
        """Format entry as "[timestamp] [TYPE] message" plus details."""
        line = f"[{self.timestamp.isoformat()}] [{self.type.value.upper()}] {self.message}"
        if self.details:
            line += f"\n  Details: {self.details}"
        return line


class HistoryStore:
    """Bounded, newest-first store of analysis results."""

    def __init__(self, max_items: int = 100):
        self.max_items = max_items
        self._results: dict[str, AnalysisResult] = {}
        self._order: deque[str] = deque()
        self._lock = threading.Lock()

    def add(self, result: AnalysisResult) -> AnalysisHistoryItem:
        """
        Store a result, evicting the oldest entries beyond capacity.

        Args:
            result: Analysis result to keep.

        Returns:
            AnalysisHistoryItem: Summary of the stored result.
        """
        with self._lock:
            if result.id in self._results:
                self._order.remove(result.id)
            self._results[result.id] = result
            self._order.appendleft(result.id)
            while len(self._order) > self.max_items:
                evicted = self._order.pop()
                del self._results[evicted]
                logger.debug(f"Evicted analysis {evicted} from history")
        return AnalysisHistoryItem.from_result(result)

    def get(self, result_id: str) -> Optional[AnalysisResult]:
        """Get a stored result by ID."""
        with self._lock:
            return self._results.get(result_id)

    def items(self) -> list[AnalysisHistoryItem]:
        """All history items, newest first."""
        with self._lock:
            return [AnalysisHistoryItem.from_result(self._results[i]) for i in self._order]

    def search(
        self,
        query: str = "",
        status: Optional[ConfidenceStatus] = None,
    ) -> list[AnalysisHistoryItem]:
        """
        Filter history by ID substring and status.

        Args:
            query: Case-insensitive substring of the patient ID or
                result ID. Empty matches everything.
            status: Only return items with this status.

        Returns:
            list[AnalysisHistoryItem]: Matching items, newest first.
        """
        needle = query.strip().lower()
        return [
            item
            for item in self.items()
            if (needle in item.patient_id.lower() or needle in item.id.lower())
            and (status is None or item.status == status)
        ]

    def summary(self) -> dict:
        """Aggregate totals across the whole history."""
        items = self.items()
        return {
            "count": len(items),
            "total_savings": round(sum(item.total_savings for item in items), 2),
            "total_findings": sum(item.findings_count for item in items),
        }

    def clear(self) -> None:
        """Remove all stored results."""
        with self._lock:
            self._results.clear()
            self._order.clear()
        logger.info("Analysis history cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._order)


class ActivityLog:
    """Bounded, newest-first activity log shown to users."""

    def __init__(self, max_entries: int = 500):
        self._entries: deque[LogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def add(
        self,
        log_type: LogType,
        message: str,
        details: Optional[str] = None,
    ) -> LogEntry:
        """Append an entry to the log."""
        entry = LogEntry(type=log_type, message=message, details=details)
        with self._lock:
            self._entries.appendleft(entry)
        return entry

    def entries(self, log_type: Optional[LogType] = None) -> list[LogEntry]:
        """Entries newest first, optionally filtered by type."""
        with self._lock:
            entries = list(self._entries)
        if log_type is None:
            return entries
        return [entry for entry in entries if entry.type == log_type]

    def counts(self) -> dict[str, int]:
        """Number of entries per type, plus the overall total."""
        entries = self.entries()
        counts = {t.value: 0 for t in LogType}
        for entry in entries:
            counts[entry.type.value] += 1
        counts["all"] = len(entries)
        return counts

    def export_text(self) -> str:
        """Render all entries as plain text, one entry per line."""
        return "\n".join(entry.to_text() for entry in self.entries())

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
