"""Creation of listening sockets for the HTTP server."""

from __future__ import annotations

import logging
import os
import socket
from collections.abc import MutableMapping

__all__ = ["SocketBindError", "bind_unix", "bind_systemd"]

_log = logging.getLogger(__name__)

# sizeof(sockaddr_un.sun_path) - 1 on Linux
_MAX_SUN_PATH = 107
_LISTEN_BACKLOG = 128
_LISTEN_FDS_START = 3


class SocketBindError(Exception):
    """A listening socket could not be set up."""


def bind_unix(path: str, rm: bool = False, mode: int = 0) -> socket.socket:
    """Create a non-blocking UNIX stream socket listening on ``path``.

    With ``rm`` an old socket file is removed first; a non-zero ``mode``
    is applied to the socket file. Raises SocketBindError on failure.
    """
    if len(os.fsencode(path)) > _MAX_SUN_PATH:
        raise SocketBindError(f"HTTP: UNIX socket path is too long; max={_MAX_SUN_PATH}")

    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.setblocking(False)
    try:
        if rm:
            try:
                os.unlink(path)
            except FileNotFoundError:
                pass
            except OSError as err:
                raise SocketBindError(f"HTTP: Can't remove old UNIX socket {path!r}: {err}") from err
        try:
            sock.bind(path)
        except OSError as err:
            raise SocketBindError(f"HTTP: Can't bind HTTP to UNIX socket {path!r}: {err}") from err
        if mode:
            try:
                os.chmod(path, mode)
            except OSError as err:
                raise SocketBindError(
                    f"HTTP: Can't set permissions {mode:o} to UNIX socket {path!r}: {err}"
                ) from err
        try:
            sock.listen(_LISTEN_BACKLOG)
        except OSError as err:
            raise SocketBindError(f"HTTP: Can't listen UNIX socket {path!r}: {err}") from err
    except SocketBindError as err:
        _log.error("%s", err)
        sock.close()
        raise
    return sock


def _listen_fds(environ: MutableMapping[str, str]) -> int:
    """Count sockets passed by the service manager and clear its variables."""
    try:
        pid_text = environ.get("LISTEN_PID")
        fds_text = environ.get("LISTEN_FDS")
        if pid_text is None or fds_text is None:
            return 0
        try:
            pid = int(pid_text)
            count = int(fds_text)
        except ValueError:
            return 0
        if pid != os.getpid() or count <= 0:
            return 0
        return count
    finally:
        for name in ("LISTEN_PID", "LISTEN_FDS", "LISTEN_FDNAMES"):
            environ.pop(name, None)


def bind_systemd(environ: MutableMapping[str, str] | None = None) -> socket.socket:
    """Take the first socket handed over by socket activation.

    Extra passed sockets are closed. Raises SocketBindError if none is available.
    """
    if environ is None:
        environ = os.environ
    count = _listen_fds(environ)
    if count < 1:
        _log.error("HTTP: No available systemd sockets")
        raise SocketBindError("HTTP: No available systemd sockets")

    for extra in range(1, count):
        try:
            os.close(_LISTEN_FDS_START + extra)
        except OSError:
            pass

    try:
        sock = socket.socket(fileno=_LISTEN_FDS_START)
    except OSError as err:
        _log.error("HTTP: Can't use systemd socket: %s", err)
        raise SocketBindError(f"HTTP: Can't use systemd socket: {err}") from err
    sock.setblocking(False)
    return sock