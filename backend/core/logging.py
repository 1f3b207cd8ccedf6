"""structlog setup shared by the API server and the test suites.

Output is controlled by two environment variables:

- LOG_FORMAT: ``json`` renders one JSON object per line; ``console`` or
  unset renders human-readable lines.
- LOG_LEVEL: DEBUG, INFO (default), WARNING, ERROR or CRITICAL.

Every event passes through ``_redact_credentials`` so bearer tokens,
passwords and the signing secret are masked before any renderer sees them.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

LOG_FILE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
REDACTED = "[redacted]"

_LOG_FORMATS = ("json", "console", "")
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_SENSITIVE_KEYS = frozenset({"token", "password", "password_hash", "authorization", "jwt_secret"})
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def _redact_credentials(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    for key in event_dict.keys() & _SENSITIVE_KEYS:
        event_dict[key] = REDACTED
    return event_dict


def _serialize_enums(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Log enum members (device types, message types) by value."""
    for key, value in event_dict.items():
        if isinstance(value, Enum):
            event_dict[key] = value.value
    return event_dict


@dataclass(frozen=True)
class LogOptions:
    json: bool
    level: int

    @classmethod
    def from_env(cls) -> LogOptions:
        fmt = os.environ.get("LOG_FORMAT", "").lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"Invalid LOG_FORMAT={fmt!r}. Must be 'json', 'console', or unset.")
        level = os.environ.get("LOG_LEVEL", "INFO").upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"Invalid LOG_LEVEL={level!r}. Must be one of {', '.join(_LOG_LEVELS)}.")
        return cls(json=fmt == "json", level=getattr(logging, level))


def configure_structlog(*, timestamps: bool = True) -> None:
    """Route structlog events into stdlib logging through a ProcessorFormatter.

    Rendering (and exception formatting) happens in the handler's formatter,
    so a traceback is rendered once per handler.
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
    ]
    if timestamps:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors += [
        _redact_credentials,
        _serialize_enums,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _formatter(*, json_mode: bool, colors: bool = False) -> logging.Formatter:
    renderer = structlog.processors.JSONRenderer() if json_mode else structlog.dev.ConsoleRenderer(colors=colors)
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def _is_test() -> bool:
    return "pytest" in sys.modules


def _open_log_file(log_dir: Path | str, formatter: logging.Formatter) -> tuple[Path, logging.Handler]:
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{datetime.now(tz=UTC).strftime(LOG_FILE_TIMESTAMP_FORMAT)}.log"
    handler = logging.FileHandler(path)
    handler.setFormatter(formatter)
    return path, handler


def setup_logging(log_dir: Path | str | None = None, level: int | None = None) -> Path | None:
    """Configure logging to stdout, plus a timestamped file in log_dir when given.

    Returns the log file path, or None when no file was opened. Test runs
    never open a file.
    """
    options = LogOptions.from_env()
    configure_structlog()

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(options.level if level is None else level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(_formatter(json_mode=options.json, colors=sys.stdout.isatty()))
    root.addHandler(console)

    if log_dir is None or _is_test():
        return None
    path, handler = _open_log_file(log_dir, _formatter(json_mode=options.json))
    root.addHandler(handler)
    return path
