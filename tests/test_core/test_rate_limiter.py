"""
Unit tests for rate limiter helpers.
"""

import json
import logging
from unittest.mock import MagicMock

import pytest
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from bill_analyzer.config import settings
from bill_analyzer.core.rate_limiter import (
    RATE_LIMITS,
    get_real_client_ip,
    rate_limit_exceeded_handler,
)


def _request(headers: dict) -> Request:
    return Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/v1/ocr",
            "headers": [(k.lower().encode(), v.encode()) for k, v in headers.items()],
            "client": ("10.0.0.9", 5050),
        }
    )


def _exceeded(detail: str, retry_after=None) -> MagicMock:
    exc = MagicMock(spec=RateLimitExceeded)
    exc.detail = detail
    exc.retry_after = retry_after
    return exc


class TestGetRealClientIp:
    """Test cases for client IP resolution."""

    def test_forwarded_for_first_hop(self):
        """Test that the first X-Forwarded-For address wins."""
        request = _request({"X-Forwarded-For": " 203.0.113.7 , 10.0.0.1", "X-Real-IP": "1.1.1.1"})

        assert get_real_client_ip(request) == "203.0.113.7"

    def test_real_ip(self):
        """Test X-Real-IP fallback."""
        assert get_real_client_ip(_request({"X-Real-IP": " 198.51.100.4 "})) == "198.51.100.4"

    def test_blank_forwarded_for_falls_through(self):
        """Test that an empty first hop does not become the key."""
        request = _request({"X-Forwarded-For": " , 10.0.0.1", "X-Real-IP": "198.51.100.4"})

        assert get_real_client_ip(request) == "198.51.100.4"

    def test_remote_address(self):
        """Test direct connections."""
        assert get_real_client_ip(_request({})) == "10.0.0.9"

    def test_untrusted_proxy_headers_ignored(self, monkeypatch):
        """Test that spoofable headers are ignored unless trusted."""
        monkeypatch.setattr(settings, "TRUST_PROXY_HEADERS", False)
        request = _request({"X-Forwarded-For": "203.0.113.7", "X-Real-IP": "1.1.1.1"})

        assert get_real_client_ip(request) == "10.0.0.9"


class TestRateLimitExceededHandler:
    """Test cases for the 429 response."""

    def test_json_body(self):
        """Test status code and body naming the exhausted limit."""
        response = rate_limit_exceeded_handler(_request({}), _exceeded("10 per 1 minute"))

        assert response.status_code == 429
        body = json.loads(response.body)
        assert body["error"] == "rate_limit_exceeded"
        assert body["limit"] == "10 per 1 minute"
        assert "Retry-After" not in response.headers

    def test_retry_after_header(self):
        """Test that a known retry delay is passed on."""
        response = rate_limit_exceeded_handler(_request({}), _exceeded("10 per 1 minute", 42))

        assert response.headers["Retry-After"] == "42"

    def test_logs_client_and_path(self, caplog):
        """Test that throttling is logged as a warning."""
        with caplog.at_level(logging.WARNING, logger="bill_analyzer.core.rate_limiter"):
            rate_limit_exceeded_handler(
                _request({"X-Real-IP": "198.51.100.4"}), _exceeded("10 per 1 minute")
            )

        assert "198.51.100.4" in caplog.text
        assert "/api/v1/ocr" in caplog.text


@pytest.mark.parametrize("name", ["analysis", "ocr", "default"])
def test_rate_limit_strings(name):
    """Test that every limit is a per-minute rule."""
    assert RATE_LIMITS[name].endswith("/minute")
