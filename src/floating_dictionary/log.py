"""Logging configuration using structlog.

One line per event on stderr, with a clock, a 3-letter level, the short id of
the capture session when there is one, and key=value context:
    21:04:11 INF capture backend selected backend=freedesktop-portal
    21:04:15 DBG [3f2a9c1b] ocr candidate language=eng confidence=0.91
    21:04:16 WRN [3f2a9c1b] translation attempt failed attempt=1 err=timeout
    21:04:16 ERR [3f2a9c1b] session failed err=ProtocolMismatch

Recognized text may span lines or contain quotes, so such values are written
as JSON strings to keep every event on a single line.
"""

import json
import logging
import sys
from datetime import datetime
from typing import TextIO

import structlog

_LEVEL_ABBREVIATIONS = {
    "debug": "DBG",
    "info": "INF",
    "warning": "WRN",
    "error": "ERR",
    "critical": "CRT",
}


def _add_clock_and_level(logger, method_name, event_dict):
    """Stamp the wall clock (HH:MM:SS) and the abbreviated level."""
    level = event_dict.get("level", method_name)
    event_dict["level"] = _LEVEL_ABBREVIATIONS.get(level, level.upper()[:3])
    event_dict["timestamp"] = datetime.now().strftime("%H:%M:%S")
    return event_dict


def format_value(value) -> str:
    """Render one context value for the console line."""
    if isinstance(value, str):
        if not value or any(c.isspace() or c in '"=' for c in value):
            return json.dumps(value, ensure_ascii=False)
        return value
    return str(value)


def _render_line(logger, method_name, event_dict):
    """Render 'timestamp LEVEL [session] event key=value ...'."""
    parts = [event_dict.pop("timestamp", ""), event_dict.pop("level", "???")]
    session = event_dict.pop("session", None)
    if session:
        parts.append(f"[{session}]")
    parts.append(str(event_dict.pop("event", "")))
    parts.extend(
        f"{key}={format_value(value)}"
        for key, value in event_dict.items()
        if not key.startswith("_")
    )
    return " ".join(parts)


def configure(level: str = "INFO", debug: bool = False, stream: TextIO | None = None) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        debug: If True, sets level to DEBUG.
        stream: Where lines go, stderr by default so stdout stays free for
            shell pipelines wrapping the tool.
    """
    if debug:
        level = "DEBUG"

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            _add_clock_and_level,
            _render_line,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level.upper(), logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger() -> structlog.BoundLogger:
    """Module-level logger; context is bound per call or per session."""
    return structlog.get_logger()


def session_logger(session_id: str) -> structlog.BoundLogger:
    """Get a logger bound to a capture session.

    Only the first 8 hex digits of the id are kept, which is enough to tell
    sessions apart in a terminal.
    """
    return structlog.get_logger().bind(session=session_id[:8])
