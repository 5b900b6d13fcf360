"""
Logging utilities for the pronunciation scoring tools.
"""

import os
import logging
import json
from datetime import datetime
from typing import Optional, Dict, Any, List

from pronunciation.base import ScoreResult, OptionsError

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(log_file: Optional[str] = None, level: int = logging.INFO) -> None:
    """
    Set up logging configuration.

    Args:
        log_file: Path to log file (optional)
        level: Logging level
    """
    # Create formatter
    formatter = logging.Formatter(LOG_FORMAT)

    # Create console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(console_handler)

    # Add file handler if log file is specified
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


class AttemptLogger:
    """
    Records scored attempts and writes them out as a JSON log.
    """

    def __init__(self, log_path: str):
        """
        Initialize attempt logger.

        Args:
            log_path: JSON file the entries are appended to

        Raises:
            OptionsError: Existing log file is unreadable or not a JSON list
        """
        self.log_path = log_path
        self.logger = logging.getLogger("pronunciation.attempts")
        self.log_entries: List[Dict[str, Any]] = []

        # Keep entries of earlier runs
        if os.path.exists(log_path):
            try:
                with open(log_path, 'r') as f:
                    entries = json.load(f)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                raise OptionsError(f"Unable to read attempt log {log_path}: {e}", field="attempt_log") from e
            if not isinstance(entries, list):
                raise OptionsError(f"Attempt log {log_path} must contain a JSON list", field="attempt_log")
            self.log_entries = entries

    def log_attempt(self, user_source: str, attempt_number: int,
                    result: Optional[ScoreResult] = None, error: Optional[Exception] = None) -> None:
        """
        Record one attempt.

        Args:
            user_source: Description of the learner recording
            attempt_number: 1-based attempt number
            result: Score, if scoring succeeded
            error: Error, if scoring failed
        """
        entry = {
            "timestamp": datetime.now().isoformat(),
            "source": user_source,
            "attempt": attempt_number,
            "status": "scored" if result is not None else "error",
        }
        if result is not None:
            entry["result"] = result.to_dict()
            self.logger.debug(f"Attempt {attempt_number} on {user_source}: {result.similarity}")
        if error is not None:
            entry["error"] = str(error)
            self.logger.error(f"Attempt {attempt_number} on {user_source}: {error}")

        self.log_entries.append(entry)

    def save_json_log(self) -> None:
        """Save log entries to JSON file."""
        log_dir = os.path.dirname(self.log_path)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        with open(self.log_path, 'w') as f:
            json.dump(self.log_entries, f, indent=2)

        self.logger.info(f"Saved attempt log to {self.log_path}")
