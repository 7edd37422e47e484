"""Coloured console messages and optional debug tracing."""

from __future__ import annotations

import inspect
import os
import sys
from enum import IntEnum
from pathlib import Path
from typing import TextIO

DEBUG_ENV_VAR = "CHIPEMU_DEBUG"

_PREFIXES = {
    0: "\033[30;101m ►\033[3mERROR:\033[0m ",
    1: "\033[30;103m ►\033[3mWARNING:\033[0m ",
    2: "\033[30;104m ►\033[3mINFORMATION:\033[0m ",
}


class MessageType(IntEnum):
    """Severity of a console message."""

    ERROR = 0
    WARNING = 1
    INFORMATION = 2


def _normalise(kind: int) -> MessageType:
    try:
        return MessageType(kind)
    except ValueError:
        return MessageType.INFORMATION


def format_message(kind: int, text: str) -> str:
    """Return ``text`` with the coloured prefix for ``kind``.

    Any kind that is neither an error nor a warning is shown as information.
    """
    return _PREFIXES[_normalise(kind)] + text


def write_message(kind: int, text: str, *, stream: TextIO | None = None) -> None:
    """Write a formatted message and a newline to ``stream`` (stdout by default)."""
    out = sys.stdout if stream is None else stream
    out.write(format_message(kind, text) + "\n")


def debug(text: str) -> str | None:
    """Trace ``text`` to stderr with the caller's location when debugging is on.

    Debugging is on when the ``CHIPEMU_DEBUG`` environment variable is ``1``.
    Returns the line written, or ``None`` when nothing was written.
    """
    if os.environ.get(DEBUG_ENV_VAR) != "1":
        return None
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    if caller is not None:
        location = (
            f"{Path(caller.f_code.co_filename).name}:{caller.f_lineno}:"
            f"{caller.f_code.co_name}()"
        )
    else:
        location = "?:0:?()"
    line = f"\033[30;106m ►\033[3mDEBUG \033[97;105m {location} \033[m {text}"
    sys.stderr.write(line + "\n")
    return line