"""
Logging utilities for svlocus.

Library modules only ever call ``logging.getLogger(__name__)``; handlers are
installed once by the entry point through :func:`setup_logging`, which sends
records to a rich console and optionally to a plain-text log file.
"""

import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from functools import wraps
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "setup_logging",
    "timed",
    "log_call",
]

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_console = Console(stderr=True)


def setup_logging(verbose: bool = False, log_file: str | Path | None = None) -> None:
    """
    Configure logging for svlocus.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
        log_file: Optional path to also write logs to.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    handlers: list[logging.Handler] = [
        RichHandler(
            console=_console,
            rich_tracebacks=True,
            markup=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


@contextmanager
def timed(operation: str, logger: logging.Logger | None = None) -> Iterator[None]:
    """
    Log the wall time of the enclosed block at DEBUG.

    Example:
        with timed("Assembling cluster", logger):
            contigs = assembler.assemble_reads(reads)
    """
    log = logger or logging.getLogger(__name__)
    start = time.perf_counter()
    log.debug("Starting: %s", operation)
    try:
        yield
    finally:
        log.debug("Completed: %s (%.3fs)", operation, time.perf_counter() - start)


def log_call(logger: logging.Logger | None = None) -> Callable:
    """
    Decorator logging entry, exit and elapsed time of a call at DEBUG.

    Failures are logged at ERROR and re-raised unchanged.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = logger or logging.getLogger(func.__module__)
            log.debug("Calling %s", func.__qualname__)
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                log.error("%s failed: %s", func.__qualname__, e)
                raise
            log.debug("%s completed (%.3fs)", func.__qualname__, time.perf_counter() - start)
            return result

        return wrapper

    return decorator
