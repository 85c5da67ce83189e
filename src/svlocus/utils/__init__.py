"""
Utility modules for svlocus.

Provides logging and timing helpers shared by the CLI and the library.
"""

from .logging import log_call, setup_logging, timed

__all__ = [
    "log_call",
    "setup_logging",
    "timed",
]
