"""
Logging Configuration for Earth Transforms.

This module provides the logger factory used by every package in the
library. Projection constructors report their decoded parameters at
DEBUG level, lookups that are about to fail are reported at WARNING, and
one-time resource loading is reported at INFO.

Per-point transform failures are only ever logged at DEBUG so that bulk
grid transforms stay quiet and fast.
"""

import logging
import sys


# Configure root logger for the package
def get_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Get a logger configured for the earth transform library.

    Parameters
    ----------
    name : str
        Logger name (typically __name__).
    level : int
        Logging level.

    Returns
    -------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger


def report_parameters(logger: logging.Logger, title: str, lines) -> str:
    """Log a projection parameter report and return it as text.

    Parameters
    ----------
    logger : logging.Logger
        Destination logger; the report is emitted at DEBUG level.
    title : str
        Projection title, e.g. ``"LAMBERT CONFORMAL CONIC"``.
    lines : iterable of (str, str)
        Label and formatted value pairs.

    Returns
    -------
    str
        The report, one parameter per line.
    """
    rows = [f"{title} PROJECTION PARAMETERS:"]
    rows.extend(f"   {label}: {value}" for label, value in lines)
    if logger.isEnabledFor(logging.DEBUG):
        for row in rows:
            logger.debug(row)
    return "\n".join(rows)
