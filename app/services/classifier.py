import re
from typing import Dict, Optional, Tuple

from app.models.internal import Platform

_SCHEME = r'^(?:https?://)?'

PLATFORM_PATTERNS: Dict[Platform, Tuple[re.Pattern, ...]] = {
    Platform.YOUTUBE: (
        re.compile(_SCHEME + r'(?:www\.|m\.)?(?:youtube\.com|youtu\.be)/\S+', re.IGNORECASE),
    ),
    Platform.FACEBOOK: (
        re.compile(_SCHEME + r'(?:www\.|m\.|web\.)?(?:facebook\.com|fb\.watch)/\S+', re.IGNORECASE),
    ),
    Platform.INSTAGRAM: (
        re.compile(_SCHEME + r'(?:www\.)?instagram\.com/(?:p|reels?|tv)/\S+', re.IGNORECASE),
    ),
}


def classify(raw_url, platform) -> bool:
    """True iff `platform` is supported and `raw_url` matches one of its patterns. Never raises."""
    if not isinstance(raw_url, str):
        return False

    if not isinstance(platform, Platform):
        platform = Platform.parse(platform)
    patterns = PLATFORM_PATTERNS.get(platform, ())

    url = raw_url.strip()
    return any(pattern.match(url) for pattern in patterns)


def detect_platform(raw_url: str) -> Optional[Platform]:
    """First platform whose patterns accept the URL"""
    for platform in PLATFORM_PATTERNS:
        if classify(raw_url, platform):
            return platform
    return None
