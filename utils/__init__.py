"""
Utility modules for the pronunciation scoring tools.
"""

from .logging import setup_logging, AttemptLogger, LOG_FORMAT

__all__ = [
    'setup_logging',
    'AttemptLogger',
    'LOG_FORMAT'
]
