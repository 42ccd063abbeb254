"""Logging setup built on Loguru.

Features:
- **Console output**: Human-readable, coloured lines with inline context
- **JSON output**: One JSON object per line for log collectors
- **Standard library integration**: Captures logs from uvicorn and friends

The formatter is chosen from ``settings.log_config.log_formatter_type``;
settings default it to ``console`` in development and ``json`` elsewhere.
"""

from __future__ import annotations

import inspect
import logging
import re
import sys
from collections.abc import Callable
from typing import Any, Final, Protocol, cast

import orjson
from loguru import logger


class _LoggingState:
    """Simple state holder to track if logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str:
        """Logging level."""
        ...

    @property
    def log_formatter_type(self) -> str | None:
        """Log formatter type."""
        ...


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def debug(self) -> bool:
        """Debug mode flag."""
        ...

    @property
    def log_config(self) -> LogConfigProtocol:
        """Log configuration."""
        ...


DEFAULT_FORMATTER: Final[str] = "console"
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

# Same pattern Loguru uses to find colour markup in a format template
_MARKUP_TAG: Final[re.Pattern[str]] = re.compile(r"(\\*)(</?(?:[fb]g\s)?[^<>\s]*>)")

# Standard LogRecord attributes that are not user context
_STDLIB_SKIP_FIELDS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "stack_info",
        "exc_text",
        "color_message",
        "taskName",
    }
)


def _escape(text: str) -> str:
    """Escape braces and colour tags so Loguru renders ``text`` literally.

    Backslashes in front of a tag are doubled as well, since Loguru halves them.
    """
    text = text.replace("{", "{{").replace("}", "}}")
    return _MARKUP_TAG.sub(lambda m: m.group(1) * 2 + "\\" + m.group(2), text)


def _format_extra_field(key: str, value: object) -> str | None:
    """Format an extra field as ``key=value``, truncating long values.

    Returns:
        str | None: Formatted field or None if the value cannot be rendered.
    """
    try:
        str_value = str(value)
    except (AttributeError, TypeError, ValueError):
        return None
    if len(str_value) > MAX_FIELD_VALUE_LENGTH:
        str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(str(key))}={_escape(str_value)}"


def format_console(record: dict[str, Any]) -> str:
    """Format a record for the console with its extra fields inline.

    Args:
        record: Loguru record to format.

    Returns:
        str: Loguru format template for this record.
    """
    parts = [
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
        "<level>{level: <8}</level>",
        "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
    ]

    extra = record.get("extra", {})
    context = [
        formatted
        for key, value in extra.items()
        if not key.startswith("_") and value is not None
        if (formatted := _format_extra_field(key, value))
    ]
    if context:
        parts.append(" ".join(f"[<dim>{field}</dim>]" for field in context))

    parts.append(_escape(str(record.get("message", ""))))
    template = " | ".join(parts) + "\n"
    if record.get("exception"):
        template += "{exception}"
    return template


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format log record as a single JSON line.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }

    if extra := record.get("extra", {}):
        log_entry.update({k: v for k, v in extra.items() if not k.startswith("_")})

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return orjson.dumps(log_entry, default=str).decode() + "\n"


LOG_FORMATTERS: dict[str, Callable[[dict[str, Any]], str] | None] = {
    "console": None,
    "json": serialize_for_json,
}


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if (
                key not in logging.LogRecord.__dict__
                and not key.startswith("_")
                and key not in _STDLIB_SKIP_FIELDS
            )
        }

        logger.opt(depth=depth, exception=record.exc_info).bind(**extra).log(
            level, record.getMessage()
        )


def _structured_sink(formatter: Callable[[dict[str, Any]], str]) -> Callable[..., None]:
    def sink(message: object) -> None:
        sys.stdout.write(formatter(cast("Any", message).record))
        sys.stdout.flush()

    return sink


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru with the configured formatter.

    Args:
        settings: Application settings containing log configuration.

    Note:
        This function ensures it's only called once using module state.
    """
    if _state.configured:
        return

    logger.remove()

    formatter_type = settings.log_config.log_formatter_type or DEFAULT_FORMATTER
    formatter = LOG_FORMATTERS.get(formatter_type)

    if formatter is None:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console),
            level=settings.log_config.log_level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )
    else:
        logger.add(
            _structured_sink(formatter),
            level=settings.log_config.log_level,
            enqueue=True,
            diagnose=False,
            backtrace=False,
        )

    # Route standard library logging (uvicorn included) through Loguru
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        uvicorn_logger = logging.getLogger(logger_name)
        uvicorn_logger.handlers = [InterceptHandler()]
        uvicorn_logger.propagate = False

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True
