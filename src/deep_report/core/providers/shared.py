"""Shared helpers for HTTP-backed providers.

SECURITY: error parsing redacts API keys and bearer tokens so secrets never
reach logs, exceptions or audit files.

    - redact_secrets(text) -> str
    - parse_retry_after(response) -> Optional[float]
    - extract_error_message(response) -> str
    - extract_domain(url) -> Optional[str]
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional
from urllib.parse import urlparse

if TYPE_CHECKING:
    import httpx

# Potential API keys / bearer tokens, e.g. "api_key=abcd1234..." or "Bearer abcd1234..."
_SECRET_PATTERN = re.compile(
    r"(?i)"
    r"(?:"
    r"(?:api[_-]?key|token|bearer|authorization|secret|password)"
    r"[\s:=]+"
    r")"
    r"['\"]?([^\s'\"&]{8,})['\"]?",
)


def redact_secrets(text: str) -> str:
    """Replace the secret part of ``api_key=...``-like fragments with ``****``."""
    if not text:
        return text

    def _replace(match: re.Match[str]) -> str:
        return match.group(0).replace(match.group(1), "****")

    return _SECRET_PATTERN.sub(_replace, text)


def parse_retry_after(response: "httpx.Response") -> Optional[float]:
    """Parse a numeric ``Retry-After`` header.

    Returns:
        Seconds to wait, or None if the header is missing or not a number
    """
    retry_after = response.headers.get("Retry-After")
    if retry_after:
        try:
            return float(retry_after)
        except ValueError:
            pass
    return None


def extract_error_message(response: "httpx.Response") -> str:
    """Extract a short, redacted error message from an HTTP error response.

    Tries the ``{"error": {"message": ...}}``, ``{"error": "..."}`` and
    ``{"message": ...}`` shapes before falling back to the raw body.
    """
    try:
        data = response.json()
    except ValueError:
        text = response.text[:200] if response.text else "Unknown error"
        return redact_secrets(text)

    if not isinstance(data, dict):
        return redact_secrets(response.text[:200])
    error_field = data.get("error")
    if isinstance(error_field, dict):
        msg = error_field.get("message", str(error_field))
    elif isinstance(error_field, str):
        msg = error_field
    else:
        msg = data.get("message", response.text[:200])
    return redact_secrets(str(msg)[:200])


def extract_domain(url: str) -> Optional[str]:
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    return parsed.netloc or None
