"""
Analysis API Endpoints.

Parses and analyzes bill text, and serves letters and exports for
results kept in the in-memory history.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse, Response

from bill_analyzer.api.deps import get_activity_log, get_history_store, get_ocr_service
from bill_analyzer.audit.anomaly_analyzer import analyze_bill
from bill_analyzer.config import settings
from bill_analyzer.core.exceptions import NotFoundException
from bill_analyzer.core.rate_limiter import limit_analysis, limit_default
from bill_analyzer.extraction.bill_parser import parse_bill_text
from bill_analyzer.letters.dispute_letter import generate_dispute_letter
from bill_analyzer.letters.pdf_export import render_letter_pdf
from bill_analyzer.models import AnalysisResult
from bill_analyzer.schemas.analysis import (
    AnalysisResultSchema,
    AnalyzeRequest,
    AnalyzeResponse,
    BillDataSchema,
    InsightsResponse,
)
from bill_analyzer.services.export import export_filename, findings_to_csv, result_to_json
from bill_analyzer.services.history_store import ActivityLog, HistoryStore, LogType
from bill_analyzer.services.ocr_service import OCRService

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_result_or_404(history: HistoryStore, result_id: str) -> AnalysisResult:
    result = history.get(result_id)
    if result is None:
        raise NotFoundException(f"Analysis {result_id} not found")
    return result


@router.post("", response_model=AnalyzeResponse)
@limit_analysis
def create_analysis(
    request: Request,
    payload: AnalyzeRequest,
    history: HistoryStore = Depends(get_history_store),
    activity: ActivityLog = Depends(get_activity_log),
):
    """
    Parse bill text and run the anomaly analyzer.

    The result is kept in the in-memory history so letters and exports
    can be fetched by ID afterwards.
    """
    activity.add(LogType.INFO, "Analysis started", f"{len(payload.text)} characters of bill text")

    bill = parse_bill_text(payload.text)
    result = analyze_bill(bill)
    history.add(result)

    activity.add(
        LogType.SUCCESS,
        f"Analysis {result.id} complete",
        f"{len(result.findings)} findings, ${result.total_savings:.2f} potential savings",
    )

    return AnalyzeResponse(
        bill=BillDataSchema.model_validate(bill.to_dict()),
        result=AnalysisResultSchema.model_validate(result.to_dict()),
    )


@router.get("/{result_id}", response_model=AnalysisResultSchema)
@limit_default
def get_analysis(
    request: Request,
    result_id: str,
    history: HistoryStore = Depends(get_history_store),
):
    """Get a stored analysis result."""
    result = _get_result_or_404(history, result_id)
    return AnalysisResultSchema.model_validate(result.to_dict())


@router.get("/{result_id}/letter", response_class=PlainTextResponse)
@limit_default
def get_dispute_letter(
    request: Request,
    result_id: str,
    patient_name: Optional[str] = None,
    history: HistoryStore = Depends(get_history_store),
    activity: ActivityLog = Depends(get_activity_log),
):
    """Render the dispute letter for a stored analysis as plain text."""
    result = _get_result_or_404(history, result_id)
    letter = generate_dispute_letter(
        result,
        patient_name=patient_name,
        footer=settings.LETTER_FOOTER,
    )
    activity.add(LogType.INFO, f"Dispute letter generated for {result.id}")
    return PlainTextResponse(letter)


@router.get("/{result_id}/letter.pdf")
@limit_default
def get_dispute_letter_pdf(
    request: Request,
    result_id: str,
    patient_name: Optional[str] = None,
    history: HistoryStore = Depends(get_history_store),
):
    """Render the dispute letter for a stored analysis as a PDF download."""
    result = _get_result_or_404(history, result_id)
    letter = generate_dispute_letter(
        result,
        patient_name=patient_name,
        footer=settings.LETTER_FOOTER,
    )
    return Response(
        content=render_letter_pdf(letter),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(result, "pdf")}"'
        },
    )


@router.get("/{result_id}/export")
@limit_default
def export_analysis(
    request: Request,
    result_id: str,
    export_format: Literal["json", "csv"] = Query("json", alias="format"),
    history: HistoryStore = Depends(get_history_store),
):
    """Download a stored analysis as JSON or its findings as CSV."""
    result = _get_result_or_404(history, result_id)

    if export_format == "csv":
        content, media_type = findings_to_csv(result), "text/csv"
    else:
        content, media_type = result_to_json(result), "application/json"

    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": (
                f'attachment; filename="{export_filename(result, export_format)}"'
            )
        },
    )


@router.post("/{result_id}/insights", response_model=InsightsResponse)
@limit_analysis
def get_insights(
    request: Request,
    result_id: str,
    history: HistoryStore = Depends(get_history_store),
    activity: ActivityLog = Depends(get_activity_log),
    ocr: OCRService = Depends(get_ocr_service),
):
    """Ask the AI service for extra pricing and negotiation insights."""
    result = _get_result_or_404(history, result_id)
    findings_text = "\n".join(
        f"[{f.severity.value}] {f.title}: {f.description}" for f in result.findings
    )
    insights = ocr.enhance_analysis(result.extracted_text, findings_text)
    if not insights.success:
        activity.add(LogType.WARNING, "AI insights unavailable", insights.error)
    return InsightsResponse(**insights.to_dict())
