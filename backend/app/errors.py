"""
HTTP error helpers shared by the routers.
"""

import anthropic
from fastapi import HTTPException

# Upstream SDK error -> (status, message, error_code)
_UPSTREAM_ERRORS: list[tuple[type, int, str, str]] = [
    (anthropic.AuthenticationError, 401, "Anthropic API key is invalid", "invalid_api_key"),
    (anthropic.RateLimitError, 429, "Too many requests to Anthropic API", "rate_limit_exceeded"),
]

_QUOTA_MESSAGE = "Anthropic API quota has been exceeded"


def error(status_code: int, message: str, error_code: str) -> HTTPException:
    """Build an HTTPException with a structured detail payload."""
    return HTTPException(
        status_code=status_code,
        detail={"detail": message, "error_code": error_code},
    )


def _is_quota_error(exc: Exception) -> bool:
    if not isinstance(exc, anthropic.APIStatusError):
        return False
    return exc.status_code == 402 or "credit balance" in str(exc).lower()


def upstream_error(exc: Exception, fallback_message: str, fallback_code: str) -> HTTPException:
    """
    Map a failure of the generation call to an HTTPException.

    Known SDK errors keep their meaning (401, 402, 429); anything else is a
    500 carrying ``fallback_message``.
    """
    for exc_type, status_code, message, error_code in _UPSTREAM_ERRORS:
        if isinstance(exc, exc_type):
            return error(status_code, message, error_code)

    if _is_quota_error(exc):
        return error(402, _QUOTA_MESSAGE, "quota_exceeded")

    return error(500, fallback_message, fallback_code)
