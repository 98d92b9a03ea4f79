"""structlog setup for redmine-cli.

Log records go to stderr so that stdout only carries command output. The
CLI calls ``setup_logging`` once per invocation, after settings are loaded.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog
from structlog.types import Processor

if TYPE_CHECKING:
    from redmine_cli.config import LoggingConfig

_SHARED_PROCESSORS: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _renderer(log_format: str) -> list[Processor]:
    if log_format == "json":
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())]


def resolve_level(config: LoggingConfig, debug: bool = False) -> int:
    """Return the numeric level, with ``--debug`` taking precedence."""
    if debug:
        return logging.DEBUG
    return logging.getLevelName(config.level.upper())


def setup_logging(config: LoggingConfig | None = None, debug: bool = False) -> None:
    """Route structlog through the standard library root logger on stderr.

    Args:
        config: Logging section of the settings; defaults when None.
        debug: Log everything, whatever ``config.level`` says.
    """
    if config is None:
        from redmine_cli.config import LoggingConfig

        config = LoggingConfig()

    level = resolve_level(config, debug)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file is not None:
        config.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(config.file))

    # force: a second invocation in the same process replaces the handlers
    logging.basicConfig(format="%(message)s", level=level, handlers=handlers, force=True)

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, *_renderer(config.format)],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: object) -> None:
    """Attach key/value pairs to every following log record."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


__all__ = [
    "setup_logging",
    "resolve_level",
    "get_logger",
    "bind_context",
    "clear_context",
]
