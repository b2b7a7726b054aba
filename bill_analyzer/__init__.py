"""
Medical bill analyzer.

Parses itemized bill text, detects billing anomalies and generates
dispute letters.
"""

from bill_analyzer.audit.anomaly_analyzer import analyze_bill
from bill_analyzer.extraction.bill_parser import parse_bill_text
from bill_analyzer.letters.dispute_letter import generate_dispute_letter
from bill_analyzer.models import (
    AnalysisResult,
    BillData,
    ConfidenceStatus,
    Finding,
    FindingCategory,
    LineItem,
    Severity,
)

__version__ = "1.0.0"

__all__ = [
    "parse_bill_text",
    "analyze_bill",
    "generate_dispute_letter",
    "AnalysisResult",
    "BillData",
    "ConfidenceStatus",
    "Finding",
    "FindingCategory",
    "LineItem",
    "Severity",
]
