"""
Logging configuration for EPA Partition.

Every module obtains its logger through ``get_logger(__name__)`` so that all
package output hangs off the ``epa_partition`` logger and can be configured
in one place.

Usage:
    from epa_partition.utils.logging_config import get_logger, setup_logging

    setup_logging("DEBUG")
    logger = get_logger(__name__)
"""

import logging
from typing import Optional, Union

PACKAGE_LOGGER = "epa_partition"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the package namespace."""
    if not name:
        return logging.getLogger(PACKAGE_LOGGER)
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: Optional[Union[int, str]] = None, fmt: str = DEFAULT_FORMAT
) -> logging.Logger:
    """
    Configure the package logger.

    Installs at most one StreamHandler, so calling this repeatedly only
    adjusts the level.

    Args:
        level: Level name or number. Falls back to ``EPA_LOG_LEVEL`` and then
            ``WARNING``.
        fmt: Format string for the handler.

    Returns:
        The configured package logger

    Raises:
        ValueError: If the level name is not a known logging level
    """
    if level is None:
        from ..config import config

        level = config.log_level
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    has_handler = any(getattr(h, "_epa_handler", False) for h in logger.handlers)
    if not has_handler:
        handler = logging.StreamHandler()
        handler._epa_handler = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(fmt=fmt, datefmt="%H:%M:%S"))
        logger.addHandler(handler)
    return logger
