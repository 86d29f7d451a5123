"""Helpers for reading query parameters of HTTP requests."""

from __future__ import annotations

import string
from collections.abc import Iterable, Mapping
from urllib.parse import quote

__all__ = ["uri_get_true", "uri_get_string"]

_ASCII_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)

Params = Mapping[str, str] | Iterable[tuple[str, str]]


def _ascii_lower(text: str) -> str:
    return text.translate(_ASCII_LOWER)


def _find_param(params: Params, key: str) -> str | None:
    """Return the first value whose name matches ``key`` (ASCII case-insensitive)."""
    pairs = params.items() if isinstance(params, Mapping) else params
    wanted = _ascii_lower(key)
    for name, value in pairs:
        if _ascii_lower(name) == wanted:
            return value
    return None


def uri_get_true(params: Params, key: str) -> bool:
    """Tell whether parameter ``key`` is set to a true value.

    A value is true if it starts with ``1`` or is ``true`` or ``yes``
    in any letter case. A missing parameter is false.
    """
    value = _find_param(params, key)
    if value is None:
        return False
    return value.startswith("1") or _ascii_lower(value) in ("true", "yes")


def uri_get_string(params: Params, key: str) -> str | None:
    """Return parameter ``key`` percent-encoded for safe reuse, or None if absent.

    Everything except ASCII letters, digits and ``-._~`` is encoded.
    """
    value = _find_param(params, key)
    if value is None:
        return None
    return quote(value, safe="")