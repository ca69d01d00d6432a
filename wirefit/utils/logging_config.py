"""Logging setup shared by the toy driver and any host application.

Library modules only ever call logging.getLogger(__name__); handlers are
installed once, by the entrypoint, through setup_logging().

Line format (console and file):

    2026-10-19T13:45:12.345Z | INFO     | wirefit.rl_agent.checkpoint | app=toy_bandit seed=0 | Saved ...

The key=value block comes from push_context() and is omitted when empty.
Context lives in a contextvars.ContextVar, so threads and tasks can tag
their own records without touching each other's.

Calling setup_logging() again replaces the handlers it installed earlier
instead of stacking new ones.
"""

import contextvars
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from .fs import ensure_dir


_context_var: contextvars.ContextVar = contextvars.ContextVar('wirefit_log_context', default={})

_installed: List[logging.Handler] = []

_LEVEL_COLORS = {
    logging.DEBUG: '\033[36m',
    logging.INFO: '\033[32m',
    logging.WARNING: '\033[33m',
    logging.ERROR: '\033[31m',
    logging.CRITICAL: '\033[35m',
}
_RESET = '\033[0m'


class ContextFormatter(logging.Formatter):
    """UTC timestamp, level, logger name, pushed context, message.

    Parameters
    ----------
    use_color : bool
        Color the level name; ignored unless stderr is a terminal
    """

    def __init__(self, use_color: bool = False):
        super().__init__()
        self.use_color = use_color and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        level = f"{record.levelname:8s}"
        if self.use_color:
            level = f"{_LEVEL_COLORS.get(record.levelno, '')}{level}{_RESET}"

        timestamp = stamp.strftime('%Y-%m-%dT%H:%M:%S.') + f"{stamp.microsecond // 1000:03d}Z"
        fields = [timestamp, level, record.name]
        context = _context_var.get()
        if context:
            fields.append(' '.join(f"{k}={v}" for k, v in context.items()))
        fields.append(record.getMessage())

        line = ' | '.join(fields)
        if record.exc_info:
            line += '\n' + self.formatException(record.exc_info)
        return line


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    *,
    color: bool = True,
    context: Optional[Dict[str, Any]] = None
) -> List[logging.Handler]:
    """Install a stderr handler (and optionally a file handler) on the root logger.

    Parameters
    ----------
    log_level : str
        "DEBUG", "INFO", "WARNING", "ERROR" or "CRITICAL"
    log_file : str, optional
        Append records to this file as well; parent directories are created
    color : bool
        Color level names on a terminal, default True
    context : dict, optional
        Fields pushed with push_context() before returning

    Returns
    -------
    list of logging.Handler
        The handlers now installed

    Examples
    --------
    >>> setup_logging("DEBUG", "outputs/logs/bandit.log", context={"app": "toy_bandit"})
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ContextFormatter(use_color=color))
    _installed.append(console)

    if log_file:
        ensure_dir(Path(log_file).parent)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(ContextFormatter(use_color=False))
        _installed.append(file_handler)

    for handler in _installed:
        root.addHandler(handler)
    root.setLevel(level)
    logging.captureWarnings(True)

    if context:
        push_context(**context)

    return list(_installed)


def get_logger(name: str) -> logging.Logger:
    """Get logger by name (typically __name__)."""
    return logging.getLogger(name)


def push_context(**fields) -> None:
    """Attach key=value fields to every later record in this context."""
    _context_var.set({**_context_var.get(), **fields})


def pop_context(keys: Optional[List[str]] = None) -> None:
    """Drop the given context keys, or all of them when keys is None."""
    if keys is None:
        _context_var.set({})
        return
    _context_var.set({k: v for k, v in _context_var.get().items() if k not in keys})
