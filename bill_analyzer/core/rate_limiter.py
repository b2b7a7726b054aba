"""
Per-client request throttling for the bill analysis API.

Requests are keyed by client address through slowapi. Analysis and OCR
get their own budgets because OCR spends upstream Gemini quota.
"""

import logging
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from bill_analyzer.config import settings

logger = logging.getLogger(__name__)

# Checked in order; the first non-empty hop wins
PROXY_CLIENT_HEADERS = ("X-Forwarded-For", "X-Real-IP")


def get_real_client_ip(request: Request) -> str:
    """
    Resolve the address a request is throttled under.

    With TRUST_PROXY_HEADERS set, the first hop named by a proxy header
    is used. Otherwise, or when no header names one, the socket peer is.
    """
    if settings.TRUST_PROXY_HEADERS:
        for header in PROXY_CLIENT_HEADERS:
            first_hop = request.headers.get(header, "").split(",")[0].strip()
            if first_hop:
                return first_hop
    return get_remote_address(request)


limiter = Limiter(key_func=get_real_client_ip, enabled=settings.RATE_LIMIT_ENABLED)


RATE_LIMITS = {
    # Parsing + analysis
    "analysis": "20/minute",
    # OCR uploads call a paid upstream API
    "ocr": "10/minute",
    # General API calls
    "default": "100/minute",
}


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Answer a throttled request with a JSON 429 naming the exhausted limit."""
    client = get_real_client_ip(request)
    logger.warning(f"Rate limit {exc.detail} exhausted by {client} on {request.url.path}")

    headers = {}
    retry_after = getattr(exc, "retry_after", None)
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)

    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "limit": str(exc.detail),
            "detail": "Too many bill analyzer requests. Wait a minute before retrying.",
        },
        headers=headers,
    )


def limit_analysis(func: Callable) -> Callable:
    """Apply analysis rate limit."""
    return limiter.limit(RATE_LIMITS["analysis"])(func)


def limit_ocr(func: Callable) -> Callable:
    """Apply OCR rate limit."""
    return limiter.limit(RATE_LIMITS["ocr"])(func)


def limit_default(func: Callable) -> Callable:
    """Apply default rate limit."""
    return limiter.limit(RATE_LIMITS["default"])(func)
