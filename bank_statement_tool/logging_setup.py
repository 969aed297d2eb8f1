"""
Logging setup for the bank_statement_tool package.

Library modules only call ``logging.getLogger(__name__)``. Entry points (the CLI)
call ``configure_logging`` once to attach a stream handler to the package logger.
"""

import logging
import sys
from typing import IO, Optional, Union

from .config import LOG_FORMAT, LOG_LEVEL

PACKAGE_LOGGER = 'bank_statement_tool'
_configured = False


def _parse_level(level: Union[int, str, None]) -> int:
    if isinstance(level, int):
        return level
    name = (level or LOG_LEVEL).strip().upper()
    if name.isdigit():
        return int(name)
    value = getattr(logging, name, None)
    return value if isinstance(value, int) else logging.INFO


def configure_logging(level: Union[int, str, None] = None,
                      stream: Optional[IO[str]] = None) -> None:
    """Attach a single StreamHandler to the package logger (idempotent)."""
    global _configured
    if _configured:
        return

    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(_parse_level(level))
    logger.propagate = False
    _configured = True
