from __future__ import annotations

import os
import platform
import socket
from typing import TextIO


def os_name() -> str:
    return platform.system() or "Unknown"


def hostname() -> str:
    try:
        return socket.gethostname() or "Unknown"
    except OSError:
        return "Unknown"


def machine_type() -> str:
    return platform.machine() or os_name()


def supports_ansi(stream: TextIO) -> bool:
    """True for a TTY whose TERM is set and is not 'dumb'."""
    isatty = getattr(stream, "isatty", None)
    if isatty is None or not isatty():
        return False
    term = os.environ.get("TERM", "")
    return bool(term) and term != "dumb"
