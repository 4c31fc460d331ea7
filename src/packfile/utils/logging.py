"""structlog setup shared by the library and the packfile CLI."""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional, TextIO, cast

import structlog
from structlog.dev import ConsoleRenderer
from structlog.stdlib import BoundLogger
from structlog.types import Processor


def _coerce_level(level: str | int) -> int:
    """Translate a string/int level into the numeric logging level."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if isinstance(resolved, str):
            raise ValueError(f"Invalid log level: {level}")
        return int(resolved)
    return int(level)


def _pre_chain() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def configure_logging(
    level: str | int = "INFO",
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Route structlog through stdlib logging with JSON or console rendering.

    Args:
        level: Root log level name or number
        json_output: JSON lines if True, colourless console output otherwise
        stream: Destination, defaults to stderr so stdout stays free for
                extracted entry content
    """
    numeric_level = _coerce_level(level)

    structlog.configure(
        processors=[
            *_pre_chain(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: Processor = (
        structlog.processors.JSONRenderer()
        if json_output
        else ConsoleRenderer(colors=False)
    )
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=renderer,
            foreign_pre_chain=_pre_chain(),
        )
    )

    logging.basicConfig(level=numeric_level, handlers=[handler], force=True)
    logging.captureWarnings(True)


def get_logger(name: str) -> BoundLogger:
    """
    Return a lazily configured logger with service metadata bound.

    Module-level loggers are created at import time, before the CLI calls
    configure_logging(), so binding must not resolve the configuration early.
    """
    from packfile import __version__

    return cast(
        BoundLogger,
        structlog.get_logger(
            name,
            service_name=os.getenv("SERVICE_NAME", "packfile"),
            version=os.getenv("APP_VERSION", __version__),
        ),
    )


@contextmanager
def log_context(**kwargs: Any) -> Iterator[None]:
    """Bind contextual data (e.g. pack_path) for the duration of a block."""
    if not kwargs:
        yield
        return

    saved = structlog.contextvars.get_contextvars()
    structlog.contextvars.bind_contextvars(**kwargs)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*kwargs)
        restore = {key: saved[key] for key in kwargs if key in saved}
        if restore:
            structlog.contextvars.bind_contextvars(**restore)
