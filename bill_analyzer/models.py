"""
Domain records for bill parsing and analysis.

Defines the line item and bill structures produced by the parser and
the findings and analysis result produced by the anomaly analyzer.
All records are immutable once constructed.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class Severity(str, Enum):
    """Severity levels for findings."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class FindingCategory(str, Enum):
    """Categories of billing anomalies."""

    DUPLICATE = "duplicate"
    ITEMIZATION = "itemization"
    UPCODING = "upcoding"
    SURCHARGE = "surcharge"
    MATH_ERROR = "math_error"


class ConfidenceStatus(str, Enum):
    """Coarse classification of how disputable a bill appears."""

    HIGH_CONFIDENCE = "HIGH_CONFIDENCE"
    MEDIUM_CONFIDENCE = "MEDIUM_CONFIDENCE"
    LOW_CONFIDENCE = "LOW_CONFIDENCE"


# Tag carried by findings that need a human to check them
ACTION_VERIFY = "VERIFY"


@dataclass(frozen=True)
class LineItem:
    """One billed entry."""

    description: str
    amount: float
    code: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert line item to dictionary."""
        return {
            "code": self.code,
            "description": self.description,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class BillData:
    """
    Structured view of one bill.

    `total_amount` is the stated total when one was found in the text,
    otherwise the sum of the line item amounts. The two are not required
    to agree; a mismatch is reported by the analyzer.
    """

    raw_text: str
    line_items: tuple[LineItem, ...] = ()
    total_amount: float = 0.0
    provider: Optional[str] = None
    date: Optional[str] = None

    @property
    def line_item_sum(self) -> float:
        """Sum of all line item amounts."""
        return sum(item.amount for item in self.line_items)

    def to_dict(self) -> dict:
        """Convert bill data to dictionary."""
        return {
            "raw_text": self.raw_text,
            "line_items": [item.to_dict() for item in self.line_items],
            "total_amount": self.total_amount,
            "provider": self.provider,
            "date": self.date,
        }


@dataclass(frozen=True)
class Finding:
    """One detected billing anomaly."""

    id: str
    title: str
    description: str
    severity: Severity
    amount: float
    category: FindingCategory
    action_required: Optional[str] = None

    @property
    def needs_review(self) -> bool:
        """Whether a human should look at this finding."""
        return self.severity == Severity.MEDIUM or self.action_required == ACTION_VERIFY

    def to_dict(self) -> dict:
        """Convert finding to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "severity": self.severity.value,
            "amount": self.amount,
            "category": self.category.value,
            "action_required": self.action_required,
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Complete audit output for one bill."""

    id: str
    patient_id: str
    status: ConfidenceStatus
    original_total: float
    corrected_total: float
    total_savings: float
    savings_percentage: float
    findings: tuple[Finding, ...]
    anomalies_count: int
    human_review_count: int
    extracted_text: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        """Convert analysis result to a JSON-safe dictionary."""
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "status": self.status.value,
            "original_total": self.original_total,
            "corrected_total": self.corrected_total,
            "total_savings": self.total_savings,
            "savings_percentage": self.savings_percentage,
            "findings": [finding.to_dict() for finding in self.findings],
            "anomalies_count": self.anomalies_count,
            "human_review_count": self.human_review_count,
            "extracted_text": self.extracted_text,
            "timestamp": self.timestamp.isoformat(),
        }
