"""
Configuration settings for the pronunciation scoring command line.
"""

import os
import logging

# Project paths
PROJECT_ROOT = os.path.dirname(os.path.abspath(__file__))
LOG_DIR = os.path.join(PROJECT_ROOT, "logs")

# Logging configuration
LOG_CONFIG = {
    "level": logging.INFO,
    "file": None,  # console only unless --log-file is given
    "attempt_log": os.path.join(LOG_DIR, "attempts.json"),
}

# Exit codes
EXIT_CODES = {
    "SUCCESS": 0,
    "GENERAL_ERROR": 1,
    "ARGUMENT_ERROR": 2,
    "DECODE_ERROR": 3,
    "UNSUPPORTED_ERROR": 4,
    "OPTIONS_ERROR": 5
}
