"""
Logging setup for the stpcable command line.

Library modules log under ``stpcable.<module>`` and never configure handlers
themselves; :func:`setup_logging` is called once by ``python -m stpcable``.
Diagnostics raised while reading a file are also echoed here through
:class:`stpcable.errors.DiagnosticCollector`, so ``--log-file`` captures the
same warnings the summary prints.
"""
from __future__ import annotations

import logging
import sys
from typing import Optional

LOGGER_NAME = "stpcable"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def _drop_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Route ``stpcable`` records to stderr and, optionally, to ``log_file``.

    Calling it again replaces the previous handlers, closing any open log file.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    _drop_handlers(logger)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    # stdout carries the command's report
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.debug("Logging initialized (level %s%s)", logging.getLevelName(level),
                 f", file {log_file}" if log_file else "")
    return logger
