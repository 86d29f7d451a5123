"""Lookup of static files below a root directory."""

from __future__ import annotations

import logging
import os
import stat

from camstream.httppath import simplify_request_path

__all__ = ["find_static_file_path"]

_log = logging.getLogger(__name__)


def find_static_file_path(root_path: str, request_path: str) -> str | None:
    """Resolve ``request_path`` to a readable regular file under ``root_path``.

    Directories resolve to their ``index.html``. Symlinks are not followed.
    Returns the file path, or None if there is no such servable file.
    """
    simplified = simplify_request_path(request_path)
    if not simplified:
        _log.debug("HTTP: Invalid request path %s to static", request_path)
        return None

    path = f"{root_path}/{simplified}"

    try:
        st = os.lstat(path)
        if stat.S_ISDIR(st.st_mode):
            _log.debug(
                "HTTP: Requested static path %s is a directory, trying %s/index.html",
                path, path,
            )
            path += "/index.html"
            st = os.lstat(path)
    except OSError as err:
        _log.debug("HTTP: Can't stat() static path %s: %s", path, err)
        return None

    if not stat.S_ISREG(st.st_mode):
        _log.debug("HTTP: Not a regular file: %s", path)
        return None

    if not os.access(path, os.R_OK):
        _log.debug("HTTP: Can't access() R_OK file %s", path)
        return None

    return path