"""Logging setup for Gridlight.

Configurable via environment variables (the ``GRIDLIGHT_`` form wins):
- GRIDLIGHT_LOG_LEVEL / LOG_LEVEL: DEBUG, INFO, WARNING, ERROR. Default: INFO
- GRIDLIGHT_LOG_FORMAT / LOG_FORMAT: 'text' or 'json'. Default: text

Usage:
    from gridlight.logging_config import configure_logging
    configure_logging()  # once, at process start
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from typing import Any, ClassVar

_NAMESPACE = "gridlight"

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime", "taskName"}


def _env(name: str, default: str) -> str:
    return os.environ.get(f"GRIDLIGHT_{name}") or os.environ.get(name) or default


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Simulation loggers pass per-tick counters through ``extra=``; those end up
    under the ``extra`` key.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno == logging.DEBUG or record.levelno >= logging.ERROR:
            payload["source"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        extra = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
        if extra:
            payload["extra"] = extra

        return json.dumps(payload, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable formatter: ``TIMESTAMP LEVEL [logger] message``.

    The ``gridlight.`` prefix is stripped from logger names, and DEBUG/ERROR
    lines carry their ``file:line``.
    """

    LEVEL_COLORS: ClassVar[dict[str, str]] = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET: ClassVar[str] = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        """Initialize formatter.

        Args:
            use_colors: Color level names (only honoured when stderr is a TTY).
        """
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]

        level = f"{record.levelname:8s}"
        if self.use_colors:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        name = record.name.removeprefix(f"{_NAMESPACE}.")
        line = f"{timestamp} {level} [{name}] {record.getMessage()}"

        if record.levelno == logging.DEBUG or record.levelno >= logging.ERROR:
            line += f" ({record.filename}:{record.lineno})"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def get_log_level() -> int:
    """Resolve the log level from the environment.

    Unknown names fall back to INFO. ``WARN`` is accepted as an alias.

    Returns:
        Logging level constant (e.g., logging.INFO).
    """
    name = _env("LOG_LEVEL", "INFO").upper()
    if name == "WARN":
        name = "WARNING"
    level = logging.getLevelNamesMapping().get(name)
    if level is None or name == "NOTSET":
        return logging.INFO
    return level


def get_log_format() -> str:
    """Resolve the output format ('text' or 'json') from the environment."""
    name = _env("LOG_FORMAT", "text").lower()
    return name if name in ("text", "json") else "text"


def configure_logging(
    level: int | None = None,
    format_type: str | None = None,
    use_colors: bool = True,
) -> None:
    """Install a single stderr handler on the ``gridlight`` logger.

    Safe to call more than once; previous handlers are replaced.

    Args:
        level: Log level. If None, read from the environment.
        format_type: 'text' or 'json'. If None, read from the environment.
        use_colors: Whether to color text output.
    """
    if level is None:
        level = get_log_level()
    if format_type is None:
        format_type = get_log_format()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        JSONFormatter() if format_type == "json" else TextFormatter(use_colors=use_colors)
    )

    for logger_name in (_NAMESPACE, "uvicorn.access"):
        target = logging.getLogger(logger_name)
        target.handlers.clear()
        target.addHandler(handler)
        target.setLevel(level)
        target.propagate = False

    logging.getLogger(_NAMESPACE).debug(
        "Logging configured: level=%s, format=%s",
        logging.getLevelName(level),
        format_type,
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``gridlight`` namespace.

    Args:
        name: Module name (typically __name__).
    """
    if name != _NAMESPACE and not name.startswith(f"{_NAMESPACE}."):
        name = f"{_NAMESPACE}.{name}"
    return logging.getLogger(name)
