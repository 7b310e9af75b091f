"""
Logging utilities for vcfseek.

Provides centralized logging configuration with dual output:
- Structured logging via Python logging module
- Rich console output for interactive use
"""

import asyncio
import logging
import time
from collections.abc import Callable
from contextlib import contextmanager
from functools import wraps
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "setup_logging",
    "timed",
    "log_call",
]

# Module-level console for rich output, on stderr so query output stays clean
_console = Console(stderr=True)


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """
    Configure logging for vcfseek.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise WARNING.
        log_file: Optional path to write logs to file.
    """
    log_level = logging.DEBUG if verbose else logging.WARNING

    handlers: list[logging.Handler] = [
        RichHandler(
            console=_console,
            rich_tracebacks=True,
            markup=False,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=handlers,
        force=True,
    )


@contextmanager
def timed(operation: str, logger: logging.Logger | None = None):
    """
    Context manager for timing operations.

    Args:
        operation: Description of the operation being timed.
        logger: Logger to use. If None, uses this module's logger.

    Example:
        with timed("Loading index", logger):
            index = open_index(buffer)
    """
    log = logger or logging.getLogger(__name__)
    start = time.perf_counter()
    log.debug("Starting: %s", operation)
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        log.debug("Completed: %s (%.3fs)", operation, elapsed)


def log_call(logger: logging.Logger | None = None) -> Callable:
    """
    Decorator to log calls of a coroutine function with timing.

    Args:
        logger: Logger to use. If None, uses function's module logger.

    Example:
        @log_call()
        async def variants(self, contig: str, pos: int, end: int) -> list:
            ...
    """

    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"log_call expects a coroutine function, got {func.__name__}")

        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            log = logger or logging.getLogger(func.__module__)
            log.debug("Calling %s", func.__qualname__)
            start = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                log.error("%s failed: %s", func.__qualname__, e)
                raise
            log.debug("%s completed (%.3fs)", func.__qualname__, time.perf_counter() - start)
            return result

        return wrapper

    return decorator
