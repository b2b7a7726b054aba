"""
Pydantic schemas for API request/response validation.
"""

from bill_analyzer.schemas.analysis import (
    AnalysisResultSchema,
    AnalyzeRequest,
    AnalyzeResponse,
    BillDataSchema,
    FindingSchema,
    HistoryItemSchema,
    HistorySummary,
    InsightsResponse,
    LineItemSchema,
    LogEntrySchema,
    MessageResponse,
    OCRResponse,
    OCRStatusResponse,
    SampleBillSchema,
)

__all__ = [
    "AnalysisResultSchema",
    "AnalyzeRequest",
    "AnalyzeResponse",
    "BillDataSchema",
    "FindingSchema",
    "HistoryItemSchema",
    "HistorySummary",
    "InsightsResponse",
    "LineItemSchema",
    "LogEntrySchema",
    "MessageResponse",
    "OCRResponse",
    "OCRStatusResponse",
    "SampleBillSchema",
]
