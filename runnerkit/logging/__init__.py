"""Logging utilities."""

from .utils import DEFAULT_FORMAT, configure_console_logging, setup_file_logger

__all__ = [
    "DEFAULT_FORMAT",
    "configure_console_logging",
    "setup_file_logger",
]
