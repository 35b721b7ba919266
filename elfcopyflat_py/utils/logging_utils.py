"""Logging utilities to centralize logging configuration."""

import logging
import sys

LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'
DATE_FORMAT = '%Y-%m-%dT%H:%M:%S'


def configure_logging(level: int = logging.WARNING) -> None:
    """Install a stderr handler on the root logger, once."""
    if logging.getLogger().handlers:
        return
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )
