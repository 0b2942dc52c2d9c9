from typing import Optional
from urllib.parse import urlparse

from app.config.settings import config


def get_locale(accept_language: Optional[str] = None) -> str:
    """Pick the first supported locale from an Accept-Language header"""
    if not accept_language:
        return config.i18n.default_locale

    for lang in accept_language.split(","):
        locale = lang.strip().split(";")[0].split("-")[0].lower()
        if locale in config.i18n.supported_locales:
            return locale

    return config.i18n.default_locale


def safe_url_for_log(url: str) -> str:
    """URL without query string or credentials (signed CDN URLs carry tokens)"""
    try:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.hostname:
            return url[:100]
        base_url = f"{parsed.scheme}://{parsed.hostname}{parsed.path}"
        return f"{base_url}?..." if parsed.query else base_url
    except ValueError:
        return "invalid_url"
