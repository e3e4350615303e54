"""Logging configuration using structlog.

Events from pvdash and from the HTTP stack share one processor chain. The
console renders for humans on a TTY and as JSON otherwise; the rotating log
file is always JSON so fallback warnings can be grepped by operation and
installation.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

from pvdash.config.settings import Settings

# Third-party loggers that log every request at INFO
HTTP_LOGGERS = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _formatter(renderer: structlog.types.Processor) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.dict_tracebacks,
            renderer,
        ],
    )


def configure_logging(settings: Settings) -> None:
    """Configure structlog and standard logging.

    Args:
        settings: Application settings containing logging configuration.
    """
    log_level = getattr(logging, settings.log_level)

    # Console goes to stderr so command output stays clean
    console_handler = logging.StreamHandler(sys.stderr)
    if sys.stderr.isatty():
        console_handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=True)))
    else:
        console_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    handlers: list[logging.Handler] = [console_handler]

    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            filename=log_path,
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
        )
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        handlers.append(file_handler)

    logging.basicConfig(level=log_level, handlers=handlers, force=True)

    # DashboardClient already logs each request with its operation context
    http_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@contextmanager
def command_context(command: str, **context: Any) -> Iterator[None]:
    """Bind a CLI command to every event logged while it runs.

    The binding lives in contextvars, so it reaches provider and client
    events, including those logged from tasks started by asyncio.gather.
    The outcome is logged with the command's duration.
    """
    logger = structlog.get_logger("pvdash.cli")
    start = time.perf_counter()
    with structlog.contextvars.bound_contextvars(command=command, **context):
        try:
            yield
        except Exception as e:
            logger.error(
                "Command failed",
                duration_seconds=round(time.perf_counter() - start, 3),
                error=str(e),
            )
            raise
        logger.info("Command completed", duration_seconds=round(time.perf_counter() - start, 3))
