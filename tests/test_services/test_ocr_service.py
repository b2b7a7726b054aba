"""
Unit tests for the Gemini OCR service.

Tests OCR extraction and insights with a mocked HTTP session.
"""

import base64
from unittest.mock import MagicMock

import pytest
import requests

from bill_analyzer.config import Settings
from bill_analyzer.services.ocr_service import (
    MAX_INSIGHT_BILL_CHARS,
    MAX_INSIGHT_FINDINGS_CHARS,
    OCRResult,
    OCRService,
    RateLimitState,
    TextStatus,
    normalize_ocr_output,
)


BILL_TEXT = (
    "Provider: Metro General Hospital\n"
    "99285 EMERGENCY DEPT VISIT ....... $1,420.00\n"
    "TOTAL: $1,420.00"
)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _response(status_code: int, body=None, json_error: bool = False) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        response.json.return_value = body
    return response


def _candidate_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def ocr_config() -> Settings:
    """Create test settings with an API key."""
    return Settings(
        GEMINI_API_KEY="test-key",
        GEMINI_MODEL="gemini-test",
        GEMINI_BASE_URL="https://example.test/v1beta",
        OCR_TIMEOUT_SECONDS=15,
    )


@pytest.fixture
def mock_session():
    """Create mock requests session."""
    return MagicMock(spec=requests.Session)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ocr_service(ocr_config, mock_session, clock) -> OCRService:
    """Create OCR service with mocked session and clock."""
    return OCRService(
        config=ocr_config,
        session=mock_session,
        rate_limit=RateLimitState(reset_after_seconds=60.0, clock=clock),
    )


class TestNormalizeOcrOutput:
    """Test cases for OCR output classification."""

    def test_blank(self):
        """Test that blank output is NONE."""
        assert normalize_ocr_output(None) == (TextStatus.NONE, "")
        assert normalize_ocr_output("   \n ") == (TextStatus.NONE, "")

    def test_full(self):
        """Test that bill-like text is FULL and trimmed."""
        status, text = normalize_ocr_output(f"\n  {BILL_TEXT}  \n")

        assert status == TextStatus.FULL
        assert text == BILL_TEXT

    def test_short_text_is_partial(self):
        """Test that short text with amounts is only PARTIAL."""
        assert normalize_ocr_output("TOTAL: $45.00") == (TextStatus.PARTIAL, "TOTAL: $45.00")

    def test_no_currency_is_partial(self):
        """Test that long text without amounts is PARTIAL."""
        text = "This document contains a lot of words but not a single dollar figure 123."

        assert normalize_ocr_output(text)[0] == TextStatus.PARTIAL


class TestRateLimitState:
    """Test cases for the cool-down tracker."""

    def test_initially_not_limited(self, clock):
        """Test fresh state."""
        assert RateLimitState(clock=clock).is_limited() is False

    def test_limited_until_reset(self, clock):
        """Test that limit holds for the full cool-down period."""
        state = RateLimitState(reset_after_seconds=60.0, clock=clock)
        state.trip()

        clock.advance(60.0)
        assert state.is_limited() is True

        clock.advance(0.1)
        assert state.is_limited() is False
        assert state.is_limited() is False


class TestOCRServiceConfig:
    """Test cases for service configuration."""

    def test_generate_url(self, ocr_service):
        """Test endpoint URL construction."""
        assert (
            ocr_service.generate_url
            == "https://example.test/v1beta/models/gemini-test:generateContent"
        )

    def test_is_configured(self, ocr_service):
        """Test configured check with API key."""
        assert ocr_service.is_configured is True

    def test_not_configured(self, mock_session):
        """Test configured check without API key."""
        service = OCRService(config=Settings(GEMINI_API_KEY=""), session=mock_session)

        assert service.is_configured is False

    def test_get_status(self, ocr_service):
        """Test status dictionary."""
        assert ocr_service.get_status() == {"configured": True, "rate_limited": False}

        ocr_service.rate_limit.trip()

        assert ocr_service.get_status() == {"configured": True, "rate_limited": True}


class TestExtractText:
    """Test cases for OCR text extraction."""

    def test_success(self, ocr_service, mock_session):
        """Test successful extraction."""
        mock_session.post.return_value = _response(200, _candidate_body(BILL_TEXT))

        result = ocr_service.extract_text(b"\x89PNG data", "image/png")

        assert result == OCRResult(success=True, text=BILL_TEXT, status=TextStatus.FULL)

    def test_request_payload(self, ocr_service, mock_session):
        """Test that the file is sent inline as base64 with the API key."""
        mock_session.post.return_value = _response(200, _candidate_body(BILL_TEXT))

        ocr_service.extract_text(b"%PDF-1.4", "application/pdf")

        args, kwargs = mock_session.post.call_args
        assert args[0] == ocr_service.generate_url
        assert kwargs["params"] == {"key": "test-key"}
        assert kwargs["timeout"] == 15
        parts = kwargs["json"]["contents"][0]["parts"]
        assert parts[1]["inline_data"] == {
            "mime_type": "application/pdf",
            "data": base64.b64encode(b"%PDF-1.4").decode("ascii"),
        }
        assert kwargs["json"]["generationConfig"]["temperature"] == 0.1

    def test_partial_text(self, ocr_service, mock_session):
        """Test that short text is returned with PARTIAL status."""
        mock_session.post.return_value = _response(200, _candidate_body("Dr. Smith"))

        result = ocr_service.extract_text(b"img", "image/jpeg")

        assert result.success is True
        assert result.status == TextStatus.PARTIAL
        assert result.text == "Dr. Smith"

    def test_empty_text(self, ocr_service, mock_session):
        """Test that blank output is reported as no readable text."""
        mock_session.post.return_value = _response(200, _candidate_body("  "))

        result = ocr_service.extract_text(b"img", "image/png")

        assert result.success is False
        assert result.status == TextStatus.NONE
        assert "manually" in result.error

    def test_missing_candidates(self, ocr_service, mock_session):
        """Test that a response without candidates is handled."""
        mock_session.post.return_value = _response(200, {"candidates": []})

        result = ocr_service.extract_text(b"img", "image/png")

        assert result.success is False
        assert result.status == TextStatus.NONE

    def test_not_configured(self, mock_session):
        """Test that no request is made without an API key."""
        service = OCRService(config=Settings(GEMINI_API_KEY=""), session=mock_session)

        result = service.extract_text(b"img", "image/png")

        assert result.success is False
        assert "GEMINI_API_KEY" in result.error
        mock_session.post.assert_not_called()

    def test_http_429_trips_rate_limit(self, ocr_service, mock_session, clock):
        """Test that 429 responses pause further calls."""
        mock_session.post.return_value = _response(429, {})

        first = ocr_service.extract_text(b"img", "image/png")
        second = ocr_service.extract_text(b"img", "image/png")

        assert first.rate_limited is True
        assert second.rate_limited is True
        assert mock_session.post.call_count == 1

        clock.advance(61)
        mock_session.post.return_value = _response(200, _candidate_body(BILL_TEXT))

        assert ocr_service.extract_text(b"img", "image/png").success is True

    def test_http_403_is_quota(self, ocr_service, mock_session):
        """Test that forbidden responses are treated as quota errors."""
        mock_session.post.return_value = _response(403, {"error": {"message": "denied"}})

        result = ocr_service.extract_text(b"img", "image/png")

        assert result.rate_limited is True
        assert "quota" in result.error
        assert ocr_service.rate_limit.is_limited() is True

    def test_quota_message(self, ocr_service, mock_session):
        """Test quota detection from the error message."""
        mock_session.post.return_value = _response(
            400, {"error": {"message": "Resource has been exhausted (check quota)."}}
        )

        result = ocr_service.extract_text(b"img", "image/png")

        assert result.rate_limited is True

    def test_other_api_error(self, ocr_service, mock_session):
        """Test that other errors do not trip the rate limit."""
        mock_session.post.return_value = _response(500, json_error=True)

        result = ocr_service.extract_text(b"img", "image/png")

        assert result.success is False
        assert result.rate_limited is False
        assert ocr_service.rate_limit.is_limited() is False

    def test_error_in_success_body(self, ocr_service, mock_session):
        """Test an error object in a 200 response."""
        mock_session.post.return_value = _response(200, {"error": {"message": "bad image"}})

        result = ocr_service.extract_text(b"img", "image/png")

        assert result == OCRResult(success=False, error="bad image")

    def test_malformed_body(self, ocr_service, mock_session):
        """Test a 200 response whose body is not JSON."""
        mock_session.post.return_value = _response(200, json_error=True)

        result = ocr_service.extract_text(b"img", "image/png")

        assert result.success is False

    def test_network_error(self, ocr_service, mock_session):
        """Test network failures."""
        mock_session.post.side_effect = requests.exceptions.ConnectionError("down")

        result = ocr_service.extract_text(b"img", "image/png")

        assert result.success is False
        assert "manually" in result.error


class TestEnhanceAnalysis:
    """Test cases for insights generation."""

    def test_success(self, ocr_service, mock_session):
        """Test successful insights."""
        mock_session.post.return_value = _response(200, _candidate_body("Negotiate the CT."))

        result = ocr_service.enhance_analysis(BILL_TEXT, "Upcoding Detected")

        assert result.success is True
        assert result.insights == "Negotiate the CT."
        payload = mock_session.post.call_args.kwargs["json"]
        assert payload["generationConfig"] == {"temperature": 0.3, "maxOutputTokens": 512}

    def test_inputs_truncated(self, ocr_service, mock_session):
        """Test that long bill text and findings are truncated."""
        mock_session.post.return_value = _response(200, _candidate_body("ok"))

        ocr_service.enhance_analysis("B" * 5000, "F" * 5000)

        prompt = mock_session.post.call_args.kwargs["json"]["contents"][0]["parts"][0]["text"]
        assert "B" * MAX_INSIGHT_BILL_CHARS in prompt
        assert "B" * (MAX_INSIGHT_BILL_CHARS + 1) not in prompt
        assert "F" * MAX_INSIGHT_FINDINGS_CHARS in prompt
        assert "F" * (MAX_INSIGHT_FINDINGS_CHARS + 1) not in prompt

    def test_rate_limited(self, ocr_service, mock_session):
        """Test that no request is made while rate limited."""
        ocr_service.rate_limit.trip()

        result = ocr_service.enhance_analysis(BILL_TEXT, "")

        assert result.success is False
        mock_session.post.assert_not_called()

    def test_http_error(self, ocr_service, mock_session):
        """Test non-200 responses."""
        mock_session.post.return_value = _response(500, {})

        result = ocr_service.enhance_analysis(BILL_TEXT, "")

        assert result.error == "API request failed: 500"

    def test_http_429(self, ocr_service, mock_session):
        """Test that 429 trips the rate limit."""
        mock_session.post.return_value = _response(429, {})

        result = ocr_service.enhance_analysis(BILL_TEXT, "")

        assert result.error == "Rate limit exceeded"
        assert ocr_service.rate_limit.is_limited() is True
