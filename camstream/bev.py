"""Description of buffered connection events."""

from __future__ import annotations

import enum
import os

__all__ = ["BufferEvent", "format_event_reason"]

_MAX_ERROR_TEXT = 1023


class BufferEvent(enum.IntFlag):
    """Event bits reported for a buffered connection."""

    READING = 0x01
    WRITING = 0x02
    EOF = 0x10
    ERROR = 0x20
    TIMEOUT = 0x40
    CONNECTED = 0x80


_REASON_NAMES = (
    (BufferEvent.READING, "reading"),
    (BufferEvent.WRITING, "writing"),
    (BufferEvent.ERROR, "error"),
    (BufferEvent.TIMEOUT, "timeout"),
    (BufferEvent.EOF, "eof"),
)


def format_event_reason(what: int, error_code: int) -> str:
    """Describe a connection event as ``"<error text> (<flag>,<flag>...)"``."""
    flags = BufferEvent(what) if isinstance(what, BufferEvent) else int(what)
    names = ",".join(name for bit, name in _REASON_NAMES if flags & bit)
    return f"{os.strerror(error_code)[:_MAX_ERROR_TEXT]} ({names})"