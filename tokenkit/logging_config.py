"""
Logging setup for the ``tokenkit`` logger namespace.

Every tokenkit module logs through stdlib ``logging.getLogger(__name__)``.
Hosts that already configure logging need nothing from here; hosts that
want tokenkit's records rendered on their own call :func:`setup_logging`,
which attaches a structlog formatter to the ``tokenkit`` logger only and
leaves the root logger untouched.
"""

import logging
import sys
from typing import IO, Optional

import structlog

from .config import settings

LOGGER_NAMESPACE = "tokenkit"


class _TokenkitHandler(logging.StreamHandler):
    """Marks the handler installed here so repeated setup replaces it."""


def _renderer(level: int) -> structlog.types.Processor:
    if level == logging.DEBUG:
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging(
    log_level: Optional[str] = None,
    stream: Optional[IO[str]] = None,
    propagate: bool = False,
) -> logging.Logger:
    """Render tokenkit's log records with structlog.

    Args:
        log_level: Override log level (default: from settings.log_level)
        stream: Where records are written (default: stdout)
        propagate: Also pass records on to the host's root handlers

    Returns:
        The configured ``tokenkit`` logger
    """
    level = getattr(logging, (log_level or settings.log_level).upper(), logging.INFO)

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if level != logging.DEBUG:
        pre_chain.append(structlog.processors.format_exc_info)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=pre_chain,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(level),
        ],
    )

    handler = _TokenkitHandler(stream or sys.stdout)
    handler.setFormatter(formatter)

    logger = logging.getLogger(LOGGER_NAMESPACE)
    for existing in [h for h in logger.handlers if isinstance(h, _TokenkitHandler)]:
        logger.removeHandler(existing)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = propagate
    return logger
