"""Structured logging configuration for pagetrack.

Every module obtains its logger through :func:`get_logger` and logs events as
snake_case keys with keyword context, for example::

    logger.info("config_store_write", path=str(path), active=True)

:func:`setup_logging` wires structlog onto the standard library so uvicorn and
application output share the same handlers. Console output goes through rich
in development and JSON lines are used otherwise.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler


_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso", utc=True),
    structlog.processors.StackInfoRenderer(),
]

# Handlers installed by setup_logging, closed when it runs again
_installed_handlers: list[logging.Handler] = []


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to ``name``."""
    return structlog.stdlib.get_logger(name)


def _resolve_format(log_format: str) -> str:
    """Pick the concrete renderer for ``auto``: rich on a TTY, JSON otherwise."""
    if log_format != "auto":
        return log_format
    return "rich" if sys.stderr.isatty() else "json"


def setup_logging(
    level: str = "INFO",
    log_format: str = "auto",
    log_file: str | Path | None = None,
    configure_uvicorn: bool = True,
) -> None:
    """Configure structlog and the standard logging module.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: ``rich``, ``json``, ``plain`` or ``auto``
        log_file: Optional path of a file receiving JSON log lines
        configure_uvicorn: Whether uvicorn loggers should use our handlers
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    resolved = _resolve_format(log_format)

    structlog.configure(
        processors=[
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    console_processors: list[Any] = [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta
    ]
    if resolved == "json":
        console_processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        console_processors.append(
            structlog.dev.ConsoleRenderer(colors=resolved == "rich")
        )

    console_formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_SHARED_PROCESSORS,
        processors=console_processors,
    )

    handlers: list[logging.Handler] = []
    if resolved == "rich":
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_level=False,
            show_path=False,
            rich_tracebacks=True,
            markup=False,
        )
    else:
        console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(console_formatter)
    handlers.append(console_handler)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                foreign_pre_chain=_SHARED_PROCESSORS,
                processors=[
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    structlog.processors.JSONRenderer(),
                ],
            )
        )
        handlers.append(file_handler)

    root = logging.getLogger()
    for old_handler in _installed_handlers:
        old_handler.close()
    _installed_handlers.clear()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    _installed_handlers.extend(handlers)
    root.setLevel(log_level)

    if configure_uvicorn:
        for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            uvicorn_logger = logging.getLogger(logger_name)
            uvicorn_logger.handlers.clear()
            uvicorn_logger.propagate = True
            uvicorn_logger.setLevel(log_level)

    get_logger(__name__).debug(
        "logging_configured", level=level.upper(), format=resolved, file=log_file
    )
