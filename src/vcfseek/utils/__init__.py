"""
Utility modules for vcfseek.

Provides logging, timing, and other shared utilities.
"""

from .logging import log_call, setup_logging, timed

__all__ = [
    "log_call",
    "setup_logging",
    "timed",
]
