"""
Logging setup shared by the CLI and the HTTP server.
"""

import logging

from .constants import LOG_FORMAT


def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging for an entry point.
    
    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        force=True
    )
