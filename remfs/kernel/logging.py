"""Logging configuration for remfs using Loguru.

Examples
--------
Basic usage:

>>> from remfs.kernel.logging import get_logger
>>> logger = get_logger(__name__)
>>> logger.info("Index loaded", entries=12)

Configure logging globally::

    from remfs.kernel.logging import configure_logging
    configure_logging(level="DEBUG", format="rich")
"""

from __future__ import annotations

import logging
import os
import sys
from contextlib import suppress
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger
from rich.logging import RichHandler

if TYPE_CHECKING:
    import types

    from loguru import Logger

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json", "structured", "rich"]

_CURRENT_CONFIG: dict | None = None
_HANDLER_IDS: list[int] = []


def configure_logging(
    level: LogLevel = "INFO",
    format: LogFormat = "structured",
    output_file: str | Path | None = None,
    use_color: bool = True,
    include_timestamp: bool = True,
    force_reconfigure: bool = False,
    enable_stdlib_bridge: bool = False,
) -> None:
    """Configure global logging for remfs.

    Idempotent: calling it again with the same settings does not add
    handlers.

    Parameters
    ----------
    level : LogLevel, default="INFO"
        Minimum log level to output
    format : LogFormat, default="structured"
        - "console": plain single-line output
        - "json": serialized records for log aggregation
        - "structured": colored loguru format with module/function/line
        - "rich": Rich console handler
    output_file : str | Path | None, default=None
        Optional file to also write JSON logs to
    use_color : bool, default=True
        Use ANSI colors in structured format (auto-disabled for non-TTY)
    include_timestamp : bool, default=True
        Include timestamp in log output
    force_reconfigure : bool, default=False
        Reconfigure even if the settings did not change
    enable_stdlib_bridge : bool, default=False
        Route stdlib logging (httpx, httpcore) through loguru
    """
    global _CURRENT_CONFIG

    current_config = {
        "level": level,
        "format": format,
        "output_file": str(output_file) if output_file else None,
        "use_color": use_color,
        "include_timestamp": include_timestamp,
        "enable_stdlib_bridge": enable_stdlib_bridge,
    }

    if not force_reconfigure and current_config == _CURRENT_CONFIG:
        return

    if _CURRENT_CONFIG is None:
        # loguru's built-in stderr sink logs everything at DEBUG
        with suppress(ValueError):
            logger.remove(0)

    # Only remove handlers we added; pytest and embedding apps may own others
    for handler_id in _HANDLER_IDS:
        with suppress(ValueError):
            logger.remove(handler_id)
    _HANDLER_IDS.clear()

    if format == "rich":
        rich_handler = RichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=include_timestamp,
            show_level=True,
            show_path=True,
        )
        _HANDLER_IDS.append(logger.add(sink=rich_handler, level=level, format="{message}"))

    elif format == "json":
        _HANDLER_IDS.append(logger.add(sink=sys.stderr, level=level, serialize=True))

    elif format == "structured":
        colorize = use_color and sys.stderr.isatty()
        timestamp_fmt = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> " if include_timestamp else ""
        color_level = "<level>{level: <8}</level>" if colorize else "{level: <8}"
        structured_format = (
            f"{timestamp_fmt}[{color_level}]"
            "<cyan>{name}:{function}:{line}</cyan> | <level>{message}</level>"
        )
        _HANDLER_IDS.append(
            logger.add(
                sink=sys.stderr,
                level=level,
                format=structured_format,
                colorize=colorize,
            )
        )

    else:  # console
        timestamp_fmt = "{time:YYYY-MM-DD HH:mm:ss} " if include_timestamp else ""
        _HANDLER_IDS.append(
            logger.add(
                sink=sys.stderr,
                level=level,
                format=f"{timestamp_fmt}{{level: <8}} | {{name}} | {{message}}",
                colorize=False,
            )
        )

    if output_file:
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        _HANDLER_IDS.append(
            logger.add(
                sink=output_path,
                level=level,
                serialize=True,
                rotation="10 MB",
                retention="1 week",
            )
        )

    if enable_stdlib_bridge:
        enable_stdlib_logging_bridge()

    _CURRENT_CONFIG = current_config


@lru_cache(maxsize=256)
def get_logger(name: str) -> Logger:
    """Get a logger bound with the given module name.

    Parameters
    ----------
    name : str
        Logger name, typically ``__name__`` of the calling module

    Returns
    -------
    loguru.Logger
        Logger instance bound with ``module=name``

    Notes
    -----
    If configure_logging() has not been called yet, defaults are applied
    from ``REMFS_LOG_LEVEL`` and ``REMFS_LOG_FORMAT``.
    """
    _ensure_configured()
    return logger.bind(module=name)


def enable_stdlib_logging_bridge() -> None:
    """Redirect stdlib logging records (httpx, httpcore) to Loguru."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            level: str | int
            try:
                level = logger.level(record.levelname).name
            except ValueError:
                level = record.levelno

            frame: types.FrameType | None = sys._getframe(6)
            depth = 6
            while frame and frame.f_code.co_filename == logging.__file__:
                frame = frame.f_back
                depth += 1

            logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)


def _ensure_configured() -> None:
    """Apply a default configuration on first use."""
    if _CURRENT_CONFIG is None:
        level = os.getenv("REMFS_LOG_LEVEL", "WARNING").upper()
        format_type = os.getenv("REMFS_LOG_FORMAT", "structured").lower()
        configure_logging(level=level, format=format_type)  # type: ignore[arg-type]


__all__ = ["configure_logging", "enable_stdlib_logging_bridge", "get_logger"]
