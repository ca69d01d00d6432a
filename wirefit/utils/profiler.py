"""Lightweight wall-clock timing.

Provides:
    - timer(): Context manager for wall-clock timing with optional sink

Used to measure the wire adjuster's gradient-descent solve, which is the
only part of an update whose cost varies (bounded by the iteration cap).
"""

import logging
import time
from contextlib import contextmanager
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@contextmanager
def timer(name: str, sink: Optional[Callable[[str, float], None]] = None):
    """Context manager for wall-clock timing.

    Parameters
    ----------
    name : str
        Timer name (for logging/display)
    sink : Optional[Callable[[str, float], None]]
        Optional callback(name, elapsed_seconds).
        If None, logs at DEBUG level.

    Examples
    --------
    >>> with timer("wire_fit"):
    ...     result = adjuster.fit_with_report(target, action, wires)

    >>> timings = {}
    >>> with timer("wire_fit", sink=timings.__setitem__):
    ...     ...
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if sink is not None:
            sink(name, elapsed)
        else:
            logger.debug("%s: %.6f s", name, elapsed)
