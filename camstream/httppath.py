"""Normalisation of HTTP request paths."""

from __future__ import annotations

__all__ = ["simplify_request_path"]


def simplify_request_path(path: str) -> str:
    """Collapse ``//``, ``/./`` and ``/../`` in a request path.

    Leading spaces are dropped, a leading ``./`` or ``../`` is removed and
    ``..`` never climbs above the root, so the result cannot escape it.
    A trailing slash (or trailing ``.``/``..`` component) is kept as ``/``.
    """
    if not path:
        return ""

    def char_at(index: int) -> str:
        return path[index] if index < len(path) else ""

    pos = len(path) - len(path.lstrip(" "))

    if char_at(pos) == ".":
        if char_at(pos + 1) in ("/", ""):
            pos += 1
        elif char_at(pos + 1) == "." and char_at(pos + 2) in ("/", ""):
            pos += 2

    out: list[str] = []
    slash = 0
    pre1 = ""
    ch = char_at(pos)
    pos += 1

    while ch:
        pre2 = pre1
        pre1 = ch
        ch = char_at(pos)
        out.append(pre1)
        pos += 1

        if ch not in ("/", ""):
            continue

        token_len = len(out) - slash
        if token_len == 3 and pre2 == "." and pre1 == "." and out[slash] == "/":
            # "/../" or "/.." at the end: drop the previous component
            end = slash
            if end > 0:
                end -= 1
                while end > 0 and out[end] != "/":
                    end -= 1
            if not ch:
                end += 1  # keep the trailing slash
            del out[end:]
        elif token_len == 1 or (pre2 == "/" and pre1 == "."):
            # "//" or "/./" or "/" / "/." at the end
            end = slash
            if not ch:
                end += 1
            del out[end:]
        slash = len(out)

    return "".join(out)