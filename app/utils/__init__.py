from .filename import content_disposition, fallback_title, sanitize_filename
from .hash import hash_stable

__all__ = ["content_disposition", "fallback_title", "hash_stable", "sanitize_filename"]
