"""
treeopt logging setup.

All library output goes through :func:`get_logger`, which returns loggers
under the ``treeopt`` hierarchy. The package only attaches a
``logging.NullHandler`` and leaves levels alone, so records propagate to
whatever handlers the host application configured.

Applications without their own logging setup can call
:func:`configure_logging` to get a console handler (and optionally a file).

Environment variables read by :func:`configure_logging`
-------------------------------------------------------
TREEOPT_LOG_LEVEL
    DEBUG / INFO (default) / WARNING / ERROR
TREEOPT_LOG_FILE
    Optional path; plain-text log lines are appended to it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

_ROOT = "treeopt"
_CONFIGURED = False

_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"


class _ColorFormatter(logging.Formatter):
    """Adds ANSI colour to level names when writing to a TTY."""

    def __init__(self, fmt: str, use_color: bool = True) -> None:
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        if self.use_color:
            color = _COLORS.get(record.levelno, "")
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{color}{record.levelname}{_RESET}"
        return super().format(record)


def _library_root() -> logging.Logger:
    root = logging.getLogger(_ROOT)
    if not any(isinstance(h, logging.NullHandler) for h in root.handlers):
        root.addHandler(logging.NullHandler())
    return root


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """
    Attach console (and optional file) handlers to the ``treeopt`` logger.

    Only the first call has an effect; later calls return the same logger.

    Parameters
    ----------
    level : int or str, optional
        Logger level. Defaults to ``TREEOPT_LOG_LEVEL``, else INFO.

    Returns
    -------
    logging.Logger
        The ``treeopt`` logger.
    """
    global _CONFIGURED
    root = _library_root()
    if _CONFIGURED:
        return root
    _CONFIGURED = True

    if level is None:
        level = os.environ.get("TREEOPT_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(level)

    fmt = "%(levelname)s %(name)s: %(message)s"
    use_color = hasattr(sys.stderr, "isatty") and sys.stderr.isatty()
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_ColorFormatter(fmt, use_color=use_color))
    root.addHandler(console)

    log_file = os.environ.get("TREEOPT_LOG_FILE")
    if log_file:
        fh = logging.FileHandler(log_file, mode="a")
        fh.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(fh)

    # handled here only, not forwarded to the host root handlers
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the ``treeopt`` hierarchy.

    Parameters
    ----------
    name : str
        Typically ``__name__`` of the calling module. A leading ``treeopt.``
        prefix is not duplicated.

    Returns
    -------
    logging.Logger
        A logger with no handlers or level of its own.
    """
    _library_root()
    if name == _ROOT or name.startswith(_ROOT + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT}.{name}")
