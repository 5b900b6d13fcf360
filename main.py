#!/usr/bin/env python3
"""
Main entry point for scoring pronunciation recordings from the command line.
"""

import sys
import json
import argparse
import logging
from typing import List, Optional

from config import LOG_CONFIG, EXIT_CODES
from utils.logging import setup_logging, AttemptLogger
from pronunciation import (
    PronunciationScorer, ScoringOptions,
    ScoringError, DecodeError, CapabilityError, OptionsError,
    load_options, resolve_options
)

# Set up logger
logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments
    """
    parser = argparse.ArgumentParser(description="Score a pronunciation attempt against a reference recording")

    parser.add_argument("user", help="Learner recording (path or URL)")
    parser.add_argument("--reference", help="Reference recording (path or URL); fallback scoring if omitted")
    parser.add_argument("--attempt", type=int, default=1, help="Attempt number, 1-based (default: 1)")
    parser.add_argument("--expected-duration", type=float, default=1.5,
                        help="Expected duration in seconds for fallback scoring (default: 1.5)")

    # Scoring options
    options_group = parser.add_argument_group('Scoring Options')
    options_group.add_argument("--config", help="YAML or JSON file with scoring options")
    options_group.add_argument("--passing-threshold", type=float, help="Passing threshold (0-100)")
    options_group.add_argument("--excellent-threshold", type=float, help="Excellent threshold (0-100)")
    options_group.add_argument("--min-duration-ratio", type=float, help="Minimum accepted duration ratio")
    options_group.add_argument("--max-duration-ratio", type=float, help="Maximum accepted duration ratio")
    options_group.add_argument("--segments", type=int, help="Number of energy segments")

    # Output
    parser.add_argument("--log-file", help="Write logs to this file as well as the console")
    parser.add_argument("--attempt-log", nargs="?", const=LOG_CONFIG["attempt_log"],
                        help="Append the result to a JSON attempt log")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    return parser.parse_args(argv)


def build_options(args: argparse.Namespace) -> ScoringOptions:
    """
    Combine the options file and command-line overrides.

    Args:
        args: Parsed arguments

    Returns:
        ScoringOptions
    """
    base = load_options(args.config) if args.config else None

    overrides = {
        "passing_threshold": args.passing_threshold,
        "excellent_threshold": args.excellent_threshold,
        "min_duration_ratio": args.min_duration_ratio,
        "max_duration_ratio": args.max_duration_ratio,
        "analysis_segments": args.segments,
    }
    overrides = {key: value for key, value in overrides.items() if value is not None}
    return resolve_options(overrides, base=base)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        int: Exit code
    """
    # Parse arguments
    args = parse_arguments(argv)

    # Set up logging
    log_level = logging.DEBUG if args.verbose else LOG_CONFIG["level"]
    setup_logging(log_file=args.log_file or LOG_CONFIG["file"], level=log_level)

    attempt_logger = None

    try:
        if args.attempt_log:
            attempt_logger = AttemptLogger(args.attempt_log)
        options = build_options(args)
        scorer = PronunciationScorer(options=options)

        if args.reference:
            result = scorer.score(args.user, args.reference, args.attempt)
        else:
            logger.info("No reference recording given, using fallback scoring")
            result = scorer.score_fallback(args.user, args.expected_duration, args.attempt)
    except OptionsError as e:
        logger.error(e.message)
        return EXIT_CODES["OPTIONS_ERROR"]
    except CapabilityError as e:
        logger.error(e.message)
        return EXIT_CODES["UNSUPPORTED_ERROR"]
    except DecodeError as e:
        logger.error(e.message)
        if attempt_logger:
            attempt_logger.log_attempt(args.user, args.attempt, error=e)
            attempt_logger.save_json_log()
        return EXIT_CODES["DECODE_ERROR"]
    except ScoringError as e:
        logger.error(e.message)
        return EXIT_CODES["GENERAL_ERROR"]

    if attempt_logger:
        attempt_logger.log_attempt(args.user, args.attempt, result=result)
        attempt_logger.save_json_log()

    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_CODES["SUCCESS"]


if __name__ == "__main__":
    sys.exit(main())
