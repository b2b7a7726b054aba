"""
OCR API Endpoints.

Accepts bill images/PDFs and returns extracted text for review before
analysis. OCR failures are not HTTP errors: the response tells the
client to fall back to manual text entry.
"""

import logging

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool

from bill_analyzer.api.deps import get_activity_log, get_ocr_service
from bill_analyzer.config import settings
from bill_analyzer.core.exceptions import (
    BadRequestException,
    PayloadTooLargeException,
    UnsupportedMediaTypeException,
)
from bill_analyzer.core.rate_limiter import limit_default, limit_ocr
from bill_analyzer.schemas.analysis import OCRResponse, OCRStatusResponse
from bill_analyzer.services.history_store import ActivityLog, LogType
from bill_analyzer.services.ocr_service import OCRService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=OCRResponse)
@limit_ocr
async def extract_bill_text(
    request: Request,
    file: UploadFile = File(...),
    activity: ActivityLog = Depends(get_activity_log),
    ocr: OCRService = Depends(get_ocr_service),
):
    """
    Extract bill text from an uploaded PDF, PNG or JPEG.

    Rejects unsupported types (415), empty files (400) and files over
    MAX_UPLOAD_BYTES (413).
    """
    content_type = (file.content_type or "").lower()
    if content_type not in settings.ALLOWED_UPLOAD_TYPES:
        raise UnsupportedMediaTypeException(
            "Unsupported file format. Please upload PDF, PNG, JPG, or JPEG."
        )

    data = await file.read()
    if not data:
        raise BadRequestException("Uploaded file is empty.")
    if len(data) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise PayloadTooLargeException(
            f"File size exceeds {limit_mb}MB limit. Please upload a smaller file."
        )

    logger.info(f"OCR upload: {file.filename} ({content_type}, {len(data)} bytes)")
    # The Gemini call blocks for up to OCR_TIMEOUT_SECONDS
    result = await run_in_threadpool(ocr.extract_text, data, content_type)

    if result.success:
        activity.add(
            LogType.SUCCESS,
            f"Text extracted from {file.filename}",
            f"{len(result.text)} characters ({result.status.value})",
        )
    else:
        activity.add(LogType.WARNING, f"OCR failed for {file.filename}", result.error)

    return OCRResponse(**result.to_dict())


@router.get("/status", response_model=OCRStatusResponse)
@limit_default
def get_ocr_status(
    request: Request,
    ocr: OCRService = Depends(get_ocr_service),
):
    """Report whether OCR is configured and currently rate limited."""
    return OCRStatusResponse(**ocr.get_status())
