"""Shared utilities for FastAPI routes."""

from collections.abc import Mapping

from fastapi import HTTPException, status

from models.search_types import Category

SENSITIVE_HEADERS = {"x-api-key", "authorization", "cookie"}


def parse_category(value: str) -> Category:
    """Map a path/query category to Category, 400 on unknown values."""
    try:
        return Category(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown category '{value}'. Expected one of: "
            + ", ".join(c.value for c in Category),
        )


def redact_sensitive_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """
    Redact auth-bearing headers before logging.
    """
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS and value:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted
