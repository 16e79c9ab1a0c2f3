"""
Logging configuration for Column Mapper.

Modules obtain their logger via ``get_logger("<module>")``.  The pipeline
calls ``configure_logging`` when it is constructed; the first call installs
the handlers and later calls only adjust the level, so several pipelines
with different ``log_level`` settings can coexist in one process.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional, Union


NAMESPACE = "column_mapper"

LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_handlers: list[logging.Handler] = []


def configure_logging(
    level: int = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
) -> logging.Logger:
    """Set up the ``column_mapper`` namespace logger and return it.

    Parameters
    ----------
    level:
        Minimum severity to emit.
    log_file:
        If provided on the first call, a ``FileHandler`` is added alongside
        the console handler.
    """
    root = logging.getLogger(NAMESPACE)
    root.setLevel(level)

    if _handlers:
        for handler in _handlers:
            handler.setLevel(level)
        return root

    root.propagate = False
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    _handlers.append(console)

    if log_file:
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setFormatter(formatter)
        _handlers.append(fh)

    for handler in _handlers:
        handler.setLevel(level)
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a child logger under the ``column_mapper`` namespace."""
    return logging.getLogger(f"{NAMESPACE}.{name}")
