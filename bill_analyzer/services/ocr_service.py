"""
OCR and insights client for the Gemini generateContent API.

Extracts raw bill text from uploaded images/PDFs and produces optional
pricing insights. Every failure is reported as an unsuccessful result so
callers can fall back to manual text entry; nothing here raises.

Rate limiting state is an explicit object with an injectable clock
instead of process-wide globals.
"""

import base64
import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

import requests

from bill_analyzer.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class TextStatus(str, Enum):
    """How much usable bill text an OCR response contained."""

    FULL = "full"
    PARTIAL = "partial"
    NONE = "none"


EXTRACTION_PROMPT = """Extract all text from this medical bill image. Preserve the structure including:
- Line items with procedure codes and amounts
- Totals and subtotals
- Provider and patient information
- Dates of service
- Any fees, surcharges, or adjustments

Format the output as plain text, maintaining the original layout. Include all dollar amounts exactly as shown. If this is not a medical bill, extract whatever text is visible."""

INSIGHTS_PROMPT = """Analyze this medical bill for additional patterns or issues:

BILL TEXT:
{bill_text}

CURRENT FINDINGS:
{findings}

Provide brief additional insights about:
1. Industry-standard pricing comparisons
2. Common billing code issues
3. Negotiation recommendations

Keep response under 200 words and focus on actionable insights."""

MAX_INSIGHT_BILL_CHARS = 2000
MAX_INSIGHT_FINDINGS_CHARS = 1000

CURRENCY_PATTERN = re.compile(r"\$[\d,]+\.?\d*")
DIGIT_PATTERN = re.compile(r"\d+")


@dataclass
class OCRResult:
    """Result of an OCR extraction attempt."""

    success: bool
    text: str = ""
    error: Optional[str] = None
    status: Optional[TextStatus] = None
    rate_limited: bool = False

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        return {
            "success": self.success,
            "text": self.text,
            "error": self.error,
            "status": self.status.value if self.status else None,
            "rate_limited": self.rate_limited,
        }


@dataclass
class InsightsResult:
    """Result of an insights request."""

    success: bool
    insights: str = ""
    error: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert result to dictionary."""
        return {
            "success": self.success,
            "insights": self.insights,
            "error": self.error,
        }


class RateLimitState:
    """
    Cool-down tracker for the upstream API.

    Once tripped, reports limited until `reset_after_seconds` have
    elapsed on the injected clock, then resets itself.
    """

    def __init__(
        self,
        reset_after_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.reset_after_seconds = reset_after_seconds
        self._clock = clock
        self._reset_at: Optional[float] = None

    def is_limited(self) -> bool:
        """Check whether calls should currently be skipped."""
        if self._reset_at is None:
            return False
        if self._clock() > self._reset_at:
            self._reset_at = None
            return False
        return True

    def trip(self) -> None:
        """Start a cool-down period."""
        self._reset_at = self._clock() + self.reset_after_seconds
        logger.warning(
            f"Upstream rate limit hit; pausing AI calls for {self.reset_after_seconds:.0f}s"
        )


def normalize_ocr_output(text: Optional[str]) -> tuple[TextStatus, str]:
    """
    Classify and trim raw OCR output.

    Args:
        text: Raw model output, possibly None.

    Returns:
        tuple[TextStatus, str]: NONE with empty text for blank output,
        FULL when the text looks like a bill (currency amounts, digits
        and more than 50 characters), PARTIAL otherwise.
    """
    if not text or not text.strip():
        return TextStatus.NONE, ""

    trimmed = text.strip()
    has_currency = bool(CURRENCY_PATTERN.search(trimmed))
    has_numbers = bool(DIGIT_PATTERN.search(trimmed))

    if has_currency and has_numbers and len(trimmed) > 50:
        return TextStatus.FULL, trimmed
    return TextStatus.PARTIAL, trimmed


class OCRService:
    """
    Gemini-backed OCR service for medical bill documents.

    Uses an injected requests session and rate limit state so both can
    be replaced in tests.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
        rate_limit: Optional[RateLimitState] = None,
    ):
        """
        Initialize the OCR service.

        Args:
            config: Application settings. Uses the global settings if None.
            session: Optional requests session for connection pooling.
            rate_limit: Shared cool-down state. A fresh one is created
                from OCR_RATE_LIMIT_RESET_SECONDS if None.
        """
        self.config = config or default_settings
        self.session = session or requests.Session()
        self.rate_limit = rate_limit or RateLimitState(
            reset_after_seconds=self.config.OCR_RATE_LIMIT_RESET_SECONDS
        )

    @property
    def is_configured(self) -> bool:
        """Check if an API key is present."""
        return bool(self.config.GEMINI_API_KEY)

    @property
    def generate_url(self) -> str:
        """Get the generateContent endpoint URL."""
        return (
            f"{self.config.GEMINI_BASE_URL}/models/"
            f"{self.config.GEMINI_MODEL}:generateContent"
        )

    def get_status(self) -> dict:
        """Get service status for display."""
        return {
            "configured": self.is_configured,
            "rate_limited": self.rate_limit.is_limited(),
        }

    def extract_text(self, data: bytes, mime_type: str) -> OCRResult:
        """
        Extract bill text from an image or PDF document.

        Args:
            data: Raw file contents.
            mime_type: MIME type of the file.

        Returns:
            OCRResult: Extracted text, or an error asking for manual entry.
        """
        if self.rate_limit.is_limited():
            return OCRResult(
                success=False,
                error="AI service temporarily unavailable. Please enter bill text manually.",
                rate_limited=True,
            )

        if not self.is_configured:
            return OCRResult(
                success=False,
                error="GEMINI_API_KEY not configured. Please enter bill text manually.",
            )

        payload = {
            "contents": [
                {
                    "parts": [
                        {"text": EXTRACTION_PROMPT},
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(data).decode("ascii"),
                            }
                        },
                    ]
                }
            ],
            "generationConfig": {"temperature": 0.1, "maxOutputTokens": 8192},
        }

        try:
            response = self._post(payload)
        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini OCR request failed: {e}")
            return OCRResult(
                success=False,
                error="Unable to process document. Please enter bill text manually.",
            )

        if response.status_code == 429:
            self.rate_limit.trip()
            return OCRResult(
                success=False,
                error="AI service rate limit reached. Continuing with manual entry mode.",
                rate_limited=True,
            )

        body = _safe_json(response)

        if response.status_code != 200:
            message = _error_message(body) or f"API request failed: {response.status_code}"
            if response.status_code == 403 or "quota" in message or "billing" in message:
                self.rate_limit.trip()
                return OCRResult(
                    success=False,
                    error="AI service quota exceeded. Please enter bill text manually.",
                    rate_limited=True,
                )
            logger.error(f"Gemini API error: {message}")
            return OCRResult(
                success=False,
                error="AI extraction unavailable. Please enter bill text manually.",
            )

        if body is None:
            return OCRResult(
                success=False,
                error="Unable to process document. Please enter bill text manually.",
            )

        if body.get("error"):
            return OCRResult(
                success=False,
                error=_error_message(body) or "AI extraction failed",
            )

        status, text = normalize_ocr_output(_first_candidate_text(body))
        if status == TextStatus.NONE:
            return OCRResult(
                success=False,
                error="No readable text found in the document. Please enter bill text manually.",
                status=status,
            )

        logger.info(f"OCR extracted {len(text)} characters (status={status.value})")
        return OCRResult(success=True, text=text, status=status)

    def enhance_analysis(self, bill_text: str, findings_text: str) -> InsightsResult:
        """
        Ask the model for additional pricing and negotiation insights.

        Args:
            bill_text: Raw bill text; truncated to 2000 characters.
            findings_text: Summary of current findings; truncated to
                1000 characters.

        Returns:
            InsightsResult: Model insights or an error description.
        """
        if self.rate_limit.is_limited():
            return InsightsResult(success=False, error="AI service temporarily unavailable")

        if not self.is_configured:
            return InsightsResult(success=False, error="GEMINI_API_KEY not configured")

        prompt = INSIGHTS_PROMPT.format(
            bill_text=bill_text[:MAX_INSIGHT_BILL_CHARS],
            findings=findings_text[:MAX_INSIGHT_FINDINGS_CHARS],
        )
        payload = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.3, "maxOutputTokens": 512},
        }

        try:
            response = self._post(payload)
        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini insights request failed: {e}")
            return InsightsResult(success=False, error=str(e))

        if response.status_code == 429:
            self.rate_limit.trip()
            return InsightsResult(success=False, error="Rate limit exceeded")

        if response.status_code != 200:
            return InsightsResult(
                success=False,
                error=f"API request failed: {response.status_code}",
            )

        body = _safe_json(response)
        if body is None:
            return InsightsResult(success=False, error="Malformed API response")
        if body.get("error"):
            return InsightsResult(success=False, error=_error_message(body))

        return InsightsResult(success=True, insights=_first_candidate_text(body) or "")

    def _post(self, payload: dict) -> requests.Response:
        return self.session.post(
            self.generate_url,
            params={"key": self.config.GEMINI_API_KEY},
            headers={"Content-Type": "application/json"},
            json=payload,
            timeout=self.config.OCR_TIMEOUT_SECONDS,
        )


def _safe_json(response: requests.Response) -> Optional[dict[str, Any]]:
    """Decode a JSON object body, or None if the body is not one."""
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _error_message(body: Optional[dict]) -> Optional[str]:
    if not body:
        return None
    error = body.get("error")
    if isinstance(error, dict):
        return error.get("message")
    if isinstance(error, str):
        return error
    return None


def _first_candidate_text(body: dict) -> Optional[str]:
    """Pull the first text part out of a generateContent response."""
    try:
        return body["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
