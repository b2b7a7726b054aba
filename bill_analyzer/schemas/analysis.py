"""
Analysis API Schemas

Pydantic models for analysis, OCR, history and log API payloads.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from bill_analyzer.config import settings


# =============================================================================
# REQUEST SCHEMAS
# =============================================================================

class AnalyzeRequest(BaseModel):
    """Raw bill text submitted for analysis."""
    text: str = Field(
        ...,
        max_length=settings.MAX_BILL_TEXT_CHARS,
        description="Typed, pasted or OCR-extracted bill text",
    )


# =============================================================================
# BILL SCHEMAS
# =============================================================================

class LineItemSchema(BaseModel):
    """One billed entry."""
    code: Optional[str] = Field(None, description="5-digit procedure code, if present")
    description: str
    amount: float


class BillDataSchema(BaseModel):
    """Structured view of a parsed bill."""
    raw_text: str
    line_items: List[LineItemSchema] = []
    total_amount: float = 0.0
    provider: Optional[str] = None
    date: Optional[str] = None


# =============================================================================
# RESULT SCHEMAS
# =============================================================================

class FindingSchema(BaseModel):
    """One detected billing anomaly."""
    id: str
    title: str
    description: str
    severity: str = Field(..., description="HIGH|MEDIUM|LOW")
    amount: float = Field(..., description="Estimated dollar impact")
    category: str = Field(..., description="duplicate|itemization|upcoding|surcharge|math_error")
    action_required: Optional[str] = Field(None, description="VERIFY for review-only findings")


class AnalysisResultSchema(BaseModel):
    """Complete audit output for one bill."""
    id: str
    patient_id: str
    status: str = Field(..., description="HIGH_CONFIDENCE|MEDIUM_CONFIDENCE|LOW_CONFIDENCE")
    original_total: float
    corrected_total: float
    total_savings: float
    savings_percentage: float
    findings: List[FindingSchema] = []
    anomalies_count: int = Field(..., description="Number of HIGH severity findings")
    human_review_count: int = Field(..., ge=1)
    extracted_text: str
    timestamp: datetime


class AnalyzeResponse(BaseModel):
    """Parsed bill plus its analysis."""
    bill: BillDataSchema
    result: AnalysisResultSchema


class InsightsResponse(BaseModel):
    """Optional AI insights for a stored analysis."""
    success: bool
    insights: str = ""
    error: Optional[str] = None


# =============================================================================
# OCR SCHEMAS
# =============================================================================

class OCRResponse(BaseModel):
    """Outcome of an OCR upload. On failure the client falls back to manual entry."""
    success: bool
    text: str = ""
    error: Optional[str] = None
    status: Optional[str] = Field(None, description="full|partial|none")
    rate_limited: bool = False


class OCRStatusResponse(BaseModel):
    """OCR service availability."""
    configured: bool
    rate_limited: bool


# =============================================================================
# HISTORY & LOG SCHEMAS
# =============================================================================

class HistoryItemSchema(BaseModel):
    """Summary of a stored analysis."""
    id: str
    patient_id: str
    timestamp: datetime
    status: str
    total_savings: float
    findings_count: int
    anomalies_count: int


class HistorySummary(BaseModel):
    """Totals across the stored history."""
    count: int
    total_savings: float
    total_findings: int


class LogEntrySchema(BaseModel):
    """One activity log entry."""
    id: str
    timestamp: datetime
    type: str = Field(..., description="info|warning|error|success")
    message: str
    details: Optional[str] = None


class SampleBillSchema(BaseModel):
    """A bundled sample bill."""
    name: str
    description: str
    content: str


class MessageResponse(BaseModel):
    """Generic acknowledgement."""
    message: str
