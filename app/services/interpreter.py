from typing import List, Optional

from app.config.settings import config
from app.models.internal import ExtractionResult
from app.utils.exceptions import NoUrlFound
from app.utils.filename import fallback_title, sanitize_filename


def _lines(captured_output: str) -> List[str]:
    return [line.strip() for line in (captured_output or "").splitlines() if line.strip()]


def _is_url(line: str) -> bool:
    return line.lower().startswith(("http://", "https://"))


def resolve_title(raw_title: Optional[str], prefix: str) -> str:
    """Sanitized title, or a unique fallback name when nothing usable is left"""
    title = sanitize_filename(raw_title or "", max_length=config.download.title_max_length)
    return title or fallback_title(prefix)


def interpret(captured_output: str, platform: str = "download") -> ExtractionResult:
    """
    Parse yt-dlp stdout.

    The media URL is the first line starting with http(s)://. The title is the
    last non-empty line that is not a URL; when there is none, a fallback name
    built from `platform` is used.
    """
    lines = _lines(captured_output)

    media_url = next((line for line in lines if _is_url(line)), None)
    if media_url is None:
        snippet = (captured_output or "")[:200]
        raise NoUrlFound(f"No download URL found in extractor output: {snippet!r}")

    prefix = getattr(platform, "value", platform)
    raw_title = next((line for line in reversed(lines) if not _is_url(line)), None)
    return ExtractionResult(media_url=media_url, title=resolve_title(raw_title, prefix))
