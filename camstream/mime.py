"""MIME type guessing by file extension."""

from __future__ import annotations

import string

__all__ = ["guess_mime_type"]

_FALLBACK = "application/misc"

_MIME_TYPES = {
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "text/javascript",
    "txt": "text/plain",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "ico": "image/x-icon",
    "bmp": "image/bmp",
    "svg": "image/svg+xml",
    "swf": "application/x-shockwave-flash",
    "cab": "application/x-shockwave-flash",
    "jar": "application/java-archive",
    "json": "application/json",
}

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)


def guess_mime_type(path: str) -> str:
    """Return the MIME type for ``path`` from its extension (ASCII case-insensitive)."""
    dot = path.rfind(".")
    if dot < 0 or "/" in path[dot:]:
        return _FALLBACK
    ext = path[dot + 1:].translate(_ASCII_LOWER)
    return _MIME_TYPES.get(ext, _FALLBACK)