"""
Logging utilities for vcfparser.

Library modules only call ``logging.getLogger(__name__)``; applications
(such as the ``vcfparser`` command) call :func:`setup_logging` once to route
the package's records, and ``ConsistencyWarning`` warnings, to a Rich console.
"""

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from rich.console import Console
from rich.logging import RichHandler

__all__ = [
    "Timer",
    "setup_logging",
    "timed",
]

PACKAGE_LOGGER = "vcfparser"
WARNINGS_LOGGER = "py.warnings"

# Log output goes to stderr so command output on stdout stays clean
_console = Console(stderr=True)


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """
    Attach handlers to the ``vcfparser`` and ``py.warnings`` loggers.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        verbose: If True, set log level to DEBUG. Otherwise INFO.
        log_file: Optional path to also write plain-text logs to.
    """
    log_level = logging.DEBUG if verbose else logging.INFO

    rich_handler = RichHandler(
        console=_console,
        rich_tracebacks=True,
        markup=False,
        show_path=verbose,
        log_time_format="[%X]",
    )
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    handlers: list[logging.Handler] = [rich_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        handlers.append(file_handler)

    for name in (PACKAGE_LOGGER, WARNINGS_LOGGER):
        logger = logging.getLogger(name)
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        for handler in handlers:
            logger.addHandler(handler)
        logger.setLevel(log_level)

    # warnings.warn(...) -> "py.warnings" logger
    logging.captureWarnings(True)


@dataclass
class Timer:
    """Wall-clock duration of a :func:`timed` block; ``elapsed`` is set on exit."""

    operation: str
    elapsed: float = 0.0


@contextmanager
def timed(operation: str, logger: logging.Logger | None = None) -> Iterator[Timer]:
    """
    Time a block and log its start and duration at DEBUG.

    Example:
        with timed("Parsing calls.vcf", logger) as timer:
            parser.parse()
        print(timer.elapsed)
    """
    log = logger or logging.getLogger(__name__)
    timer = Timer(operation)
    start = time.perf_counter()
    log.debug("Starting: %s", operation)
    try:
        yield timer
    finally:
        timer.elapsed = time.perf_counter() - start
        log.debug("Completed: %s (%.3fs)", operation, timer.elapsed)
