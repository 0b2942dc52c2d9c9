"""Application errors carrying an HTTP status and a translatable user message."""

import re
from typing import Any, Dict, Optional, Tuple


class AppError(Exception):
    """
    Base error.

    `diagnostic` is the raw detail for server logs; `message_key` is the i18n
    key of the message that crosses the HTTP boundary.
    """

    status_code: int = 500
    default_message_key: str = "error.download_failed"

    def __init__(
        self,
        diagnostic: str = "",
        message_key: Optional[str] = None,
        **params: Any,
    ):
        self.diagnostic = diagnostic
        self.message_key = message_key or self.default_message_key
        self.params: Dict[str, Any] = params
        super().__init__(diagnostic or self.message_key)


class ValidationError(AppError):
    """Missing or invalid request field, unknown platform, URL/platform mismatch."""
    status_code = 400
    default_message_key = "error.invalid_request"


class ExtractionError(AppError):
    """yt-dlp failed, timed out, overflowed its buffer or produced nothing usable."""
    status_code = 500
    default_message_key = "error.download_failed"

    @classmethod
    def from_diagnostic(cls, diagnostic: str) -> "ExtractionError":
        return cls(diagnostic, message_key=describe_failure(diagnostic))


class NoUrlFound(ExtractionError):
    """Extractor output had no http(s) line."""


class HandleNotFound(AppError):
    """Unknown or expired proxy link."""
    status_code = 404
    default_message_key = "error.link_expired"


class UpstreamError(AppError):
    """Fetching the media host failed before any byte was sent."""
    status_code = 502
    default_message_key = "error.upstream_failed"


class ProxyForbidden(AppError):
    status_code = 403
    default_message_key = "error.proxy_forbidden"


# Checked in order, first match wins. Each needle must start at a word boundary.
FAILURE_PATTERNS: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("private video", "video is private"), "error.private"),
    (("sign in", "login required", "log in", "age-restricted", "confirm your age", "inappropriate"),
     "error.login_required"),
    (("copyright", "blocked", "not available in your country", "geo restrict"), "error.blocked"),
    (("video unavailable", "is unavailable", "has been removed"), "error.unavailable"),
    (("timed out", "timeout"), "error.timeout"),
    (("not found", "404"), "error.not_found"),
)

_COMPILED_PATTERNS = [
    (re.compile("|".join(r"\b" + re.escape(n) for n in needles), re.IGNORECASE), key)
    for needles, key in FAILURE_PATTERNS
]


def describe_failure(diagnostic: str) -> str:
    """Map yt-dlp stderr text to a user message key"""
    text = diagnostic or ""
    for pattern, key in _COMPILED_PATTERNS:
        if pattern.search(text):
            return key
    return ExtractionError.default_message_key
