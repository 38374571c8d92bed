"""
Logging helpers for lovebuild.

All modules log through children of the ``lovebuild`` logger:

    from lovebuild.logging import get_logger
    log = get_logger('encoder')
"""
import logging
import sys
from typing import Optional

ROOT_LOGGER = 'lovebuild'


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the lovebuild logger, or a named child of it."""
    if not name:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f'{ROOT_LOGGER}.{name}')


def configure_logging(verbose: int = 0, quiet: int = 0) -> logging.Logger:
    """Install a single stderr handler on the lovebuild logger.

    Args:
        verbose: Verbosity count; 1+ enables DEBUG output
        quiet: Quietness count; 1 shows warnings only, 2+ errors only

    Returns:
        The configured root lovebuild logger
    """
    level = logging.INFO
    if quiet >= 2:
        level = logging.ERROR
    elif quiet >= 1:
        level = logging.WARNING
    elif verbose >= 1:
        level = logging.DEBUG

    logger = get_logger()
    logger.setLevel(level)
    logger.propagate = False

    handler = logging.StreamHandler(stream=sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter('%(message)s'))

    logger.handlers.clear()
    logger.addHandler(handler)
    return logger
