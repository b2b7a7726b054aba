"""
Application configuration using Pydantic Settings.

Loads environment variables and provides typed configuration access.
"""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Medical Bill Analyzer"
    DEBUG: bool = False
    API_V1_PREFIX: str = "/api/v1"

    # Gemini OCR / insights
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.0-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    OCR_TIMEOUT_SECONDS: int = 30
    OCR_RATE_LIMIT_RESET_SECONDS: float = 60.0

    # Uploads
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_UPLOAD_TYPES: list[str] = [
        "application/pdf",
        "image/png",
        "image/jpeg",
        "image/jpg",
    ]

    # Volatile history / activity log
    HISTORY_MAX_ITEMS: int = 100
    LOG_MAX_ENTRIES: int = 500

    # Analysis requests
    MAX_BILL_TEXT_CHARS: int = 100_000

    # API rate limiting (slowapi)
    RATE_LIMIT_ENABLED: bool = True
    # Key clients by X-Forwarded-For / X-Real-IP (only behind a trusted proxy)
    TRUST_PROXY_HEADERS: bool = True

    # Dispute letters
    LETTER_FOOTER: str = "This letter was generated by Medical Bill Analyzer"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
