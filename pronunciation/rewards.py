"""XP rewards for passing attempts."""

from .base import OptionsError
from .config import (
    OptionsLike, resolve_options,
    FIRST_TRY_EXCELLENT_XP, XP_REWARDS
)


def validate_attempt_number(attempt_number: int) -> None:
    """Attempt numbers are 1-based integers."""
    if isinstance(attempt_number, bool) or not isinstance(attempt_number, int) or attempt_number < 1:
        raise OptionsError(f"attempt_number must be a positive integer, got {attempt_number!r}",
                           field="attempt_number")


def calculate_xp_reward(similarity: float, attempt_number: int, options: OptionsLike = None) -> int:
    """
    XP awarded for an attempt.

    - Below the passing threshold: 0
    - First attempt: 15 if excellent, otherwise 10
    - Second attempt: 7
    - Third and later attempts: 5

    Args:
        similarity: Overall similarity (0-100)
        attempt_number: 1-based attempt number supplied by the caller
        options: Scoring options or overrides

    Returns:
        XP reward
    """
    validate_attempt_number(attempt_number)
    opts = resolve_options(options)

    if similarity < opts.passing_threshold:
        return 0

    if attempt_number == 1 and similarity >= opts.excellent_threshold:
        return FIRST_TRY_EXCELLENT_XP

    return XP_REWARDS.get(attempt_number, XP_REWARDS[max(XP_REWARDS)])
