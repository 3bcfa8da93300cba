"""structlog configuration for envfill's own loggers.

The library logs through stdlib loggers under ``envfill``: debug events
for each override and a warning for each ambiguous key. Applications
that want them rendered call :func:`configure_logging` once at startup.

Only the ``envfill`` logger is touched. The root logger and any handler
the host application attached elsewhere are left as they are.

Two output modes:
- Human (default): colored console output to stderr
- JSON (``log_json=True``): structured JSON lines to stderr
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

LOGGER_NAME = "envfill"
HANDLER_NAME = "envfill.structlog"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Route ``envfill`` records through a structlog ``ProcessorFormatter``.

    Calling it again replaces the handler installed by the previous call;
    handlers added by anyone else stay attached.

    Args:
        verbose: Emit DEBUG records (one per override). When False, only WARNING+.
        log_json: Use JSON renderer instead of console renderer.
        stream: Output stream; defaults to ``sys.stderr`` at call time.

    Returns:
        The installed handler.
    """
    out = stream if stream is not None else sys.stderr

    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=out.isatty())

    # structlog loggers created by the host keep their own pipeline.
    if not structlog.is_configured():
        structlog.configure(
            processors=[
                *_SHARED_PROCESSORS,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )

    handler = logging.StreamHandler(out)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    envfill_logger = logging.getLogger(LOGGER_NAME)
    for existing in list(envfill_logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            envfill_logger.removeHandler(existing)
            existing.close()
    envfill_logger.addHandler(handler)
    envfill_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    envfill_logger.propagate = False
    return handler
