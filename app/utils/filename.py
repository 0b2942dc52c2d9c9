import re
import secrets
import time
import unicodedata
from urllib.parse import quote

UNSAFE_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f\x7f]')
WHITESPACE = re.compile(r'\s+')

WINDOWS_RESERVED = {
    'CON', 'PRN', 'AUX', 'NUL',
    'COM1', 'COM2', 'COM3', 'COM4', 'COM5', 'COM6', 'COM7', 'COM8', 'COM9',
    'LPT1', 'LPT2', 'LPT3', 'LPT4', 'LPT5', 'LPT6', 'LPT7', 'LPT8', 'LPT9'
}


def sanitize_filename(name: str, max_length: int = 80) -> str:
    """
    Sanitize a title or filename for cross-platform compatibility.
    Idempotent; the result may be empty.
    """
    name = unicodedata.normalize("NFKC", name or "")
    name = UNSAFE_CHARS.sub('_', name)
    name = WHITESPACE.sub(' ', name)
    name = name[:max_length].strip(' .')

    if name.upper() in WINDOWS_RESERVED:
        name = f"_{name}"

    return name


def fallback_title(prefix: str) -> str:
    """Unique default name, e.g. youtube_1700000000_a1b2c3"""
    return f"{prefix}_{int(time.time())}_{secrets.token_hex(3)}"


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name"""
    ascii_name = filename.encode("ascii", "ignore").decode().replace('"', "") or "download"
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"
