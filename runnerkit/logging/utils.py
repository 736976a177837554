# Copyright (c) Meta Platforms, Inc. and affiliates.
# Modifications copyright (c) 2025 Logan Martel.
# Adapted from https://github.com/meta-pytorch/KernelAgent (Apache-2.0).

"""Logging helpers (console setup, rotating file logs)."""

from __future__ import annotations

import logging

from logging.handlers import RotatingFileHandler
from pathlib import Path

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_console_logging(level: int | str = logging.INFO) -> None:
    """Install a basic stderr handler unless the host already did."""

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=DEFAULT_FORMAT)
    else:
        root.setLevel(level)


def setup_file_logger(
    log_file: Path, name: str = "runnerkit", level: int | str = logging.INFO
) -> logging.Logger:
    """Configure a rotating file logger (idempotent per file).

    ``level`` is set on the named logger as well as the file handler, so
    it also bounds what that logger propagates to the console.
    """

    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger = logging.getLogger(name)
    logger.setLevel(level)
    marker = str(log_file)
    if not any(
        isinstance(handler, RotatingFileHandler)
        and getattr(handler, "_runnerkit_tag", None) == marker
        for handler in logger.handlers
    ):
        handler = RotatingFileHandler(
            log_file, maxBytes=2_000_000, backupCount=3
        )
        handler.setLevel(level)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        handler._runnerkit_tag = marker  # type: ignore[attr-defined]
        logger.addHandler(handler)
    return logger
