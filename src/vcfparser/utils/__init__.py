"""
Utility modules for vcfparser.

Provides logging and timing helpers shared by the CLI.
"""

from .logging import Timer, setup_logging, timed

__all__ = [
    "Timer",
    "setup_logging",
    "timed",
]
