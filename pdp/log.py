"""Console logging with timestamped, coloured headers and ``{}`` formatting."""

from __future__ import annotations

import enum
import inspect
import sys
import threading
from datetime import datetime

from pdp.text import format_pack

__all__ = [
    "Level",
    "get_basename",
    "level_to_string",
    "set_console_log_level",
    "should_log_at",
    "format_header",
    "log",
    "log_unformatted",
    "trace",
    "info",
    "warning",
    "error",
    "critical",
]

# Safeguard against blasting the terminal with output.
MAX_UNFORMATTED_LENGTH = 65535


class Level(enum.IntEnum):
    """Log message severity."""

    TRACE = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    CRIT = 4
    OFF = 5


_LEVEL_NAMES = {
    Level.TRACE: "\x1b[37mtrace\x1b[0m",
    Level.INFO: "\x1b[32minfo\x1b[0m",
    Level.WARN: "\x1b[33m\x1b[1mwarning\x1b[0m",
    Level.ERROR: "\x1b[31m\x1b[1merror\x1b[0m",
    Level.CRIT: "\x1b[1m\x1b[41mcritical\x1b[0m",
}

_console_level = Level.INFO
_level_lock = threading.Lock()


def get_basename(path: str) -> str:
    """Return the part of a path-like string after its last ``/``."""
    return path.rpartition("/")[2]


def level_to_string(level: Level) -> str:
    """Return the ANSI-coloured name of a log level."""
    try:
        return _LEVEL_NAMES[Level(level)]
    except (KeyError, ValueError):
        raise ValueError(f"no printable name for log level {level!r}") from None


def set_console_log_level(level: Level) -> None:
    """Change the process-wide level of console messages.

    Trace messages cannot be switched on this way.
    """
    global _console_level
    level = Level(level)
    if level == Level.TRACE:
        raise ValueError("trace level logging cannot be enabled at run time")
    with _level_lock:
        _console_level = level


def should_log_at(level: Level) -> bool:
    """Tell whether a message of ``level`` reaches the console."""
    return _console_level <= Level(level)


def format_header(
    filename: str, line: int, level: Level, now: datetime | None = None
) -> str:
    """Build the ``[time] [level] [file:line] `` prefix of a log line."""
    if now is None:
        now = datetime.now()
    milli = now.microsecond // 1000
    stamp = (
        f"{now.year}-{now.month:02d}-{now.day:02d} "
        f"{now.hour:02d}:{now.minute:02d}:{now.second:02d}.{milli:03d}"
    )
    return f"[{stamp}] [{level_to_string(level)}] [{filename}:{line}] "


def log(filename: str, line: int, level: Level, fmt: str, *args: object) -> str | None:
    """Format and write one log line; return it, or None when filtered out."""
    if not should_log_at(level):
        return None
    text = format_header(filename, line, level) + format_pack(fmt, *args) + "\n"
    log_unformatted(text)
    return text


def log_unformatted(text: str) -> None:
    """Write ``text`` to stdout as is, cut to at most 65535 bytes."""
    data = text.encode("utf-8")
    if len(data) > MAX_UNFORMATTED_LENGTH:
        text = data[:MAX_UNFORMATTED_LENGTH].decode("utf-8", errors="ignore")
    try:
        sys.stdout.write(text)
        sys.stdout.flush()
    except (OSError, ValueError):
        # Nothing sensible to do about a failed console write.
        pass


def _log_from_caller(level: Level, fmt: str, args: tuple[object, ...]) -> str | None:
    frame = inspect.currentframe()
    caller = frame.f_back.f_back if frame is not None and frame.f_back else None
    if caller is None:
        filename, line = "???", 0
    else:
        filename, line = get_basename(caller.f_code.co_filename), caller.f_lineno
    del frame, caller
    return log(filename, line, level, fmt, *args)


def trace(fmt: str, *args: object) -> str | None:
    """Log at trace level, tagged with the caller's file and line."""
    return _log_from_caller(Level.TRACE, fmt, args)


def info(fmt: str, *args: object) -> str | None:
    """Log at info level, tagged with the caller's file and line."""
    return _log_from_caller(Level.INFO, fmt, args)


def warning(fmt: str, *args: object) -> str | None:
    """Log at warning level, tagged with the caller's file and line."""
    return _log_from_caller(Level.WARN, fmt, args)


def error(fmt: str, *args: object) -> str | None:
    """Log at error level, tagged with the caller's file and line."""
    return _log_from_caller(Level.ERROR, fmt, args)


def critical(fmt: str, *args: object) -> str | None:
    """Log at critical level, tagged with the caller's file and line."""
    return _log_from_caller(Level.CRIT, fmt, args)