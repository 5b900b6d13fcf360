"""
Configuration for the pronunciation scoring engine.
Holds the tunable constants, the validated ScoringOptions model and
loading of options files in YAML or JSON format.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .base import OptionsError

logger = logging.getLogger(__name__)


# Weights of the sub-scores in the overall similarity (must sum to 1.0)
DURATION_WEIGHT = 0.25
ENERGY_WEIGHT = 0.50
RHYTHM_WEIGHT = 0.25

# Feedback classifier
ALMOST_THERE_THRESHOLD = 60
QUIET_PEAK_RATIO = 0.3
SLOW_DOWN_RATIO = 1.3

# XP per attempt number for a passing score; attempts past the table get the last entry
FIRST_TRY_EXCELLENT_XP = 15
XP_REWARDS = {
    1: 10,
    2: 7,
    3: 5,
}

# Fallback scorer bands
FALLBACK_CONFIDENCE = 50
FALLBACK_DURATION_BANDS = (
    # (low ratio, high ratio, score); first band containing the ratio wins
    (0.75, 1.5, 100),
    (0.5, 2.0, 75),
)
FALLBACK_DURATION_FLOOR = 50
FALLBACK_VOLUME_BANDS = (
    # (minimum exclusive peak amplitude, score)
    (0.1, 100),
    (0.05, 75),
)
FALLBACK_VOLUME_FLOOR = 50
SPEECH_ZCR_RANGE = (500.0, 10000.0)
SPEECH_ZCR_SCORE = 100
NON_SPEECH_ZCR_SCORE = 70
DEFAULT_EXPECTED_DURATION = 1.5

# Feature extraction
ENVELOPE_EPSILON = 1e-9
REFERENCE_PEAK_FLOOR = 0.001

# Decoding
HTTP_TIMEOUT = 30.0
DECODE_WORKERS = 2


class ScoringOptions(BaseModel):
    """Thresholds and analysis resolution for a scoring call."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    min_duration_ratio: float = Field(default=0.5, gt=0)
    max_duration_ratio: float = Field(default=2.0, gt=0)
    passing_threshold: float = Field(default=70, ge=0, le=100)
    excellent_threshold: float = Field(default=90, ge=0, le=100)
    analysis_segments: int = Field(default=10, ge=1)

    @model_validator(mode="after")
    def validate_ranges(self):
        if self.min_duration_ratio >= self.max_duration_ratio:
            raise ValueError("min_duration_ratio must be lower than max_duration_ratio")
        if self.passing_threshold > self.excellent_threshold:
            raise ValueError("passing_threshold cannot exceed excellent_threshold")
        return self


DEFAULT_OPTIONS = ScoringOptions()

OptionsLike = Union[None, ScoringOptions, Mapping[str, Any]]


def resolve_options(options: OptionsLike = None, base: Optional[ScoringOptions] = None) -> ScoringOptions:
    """
    Merge caller overrides onto the defaults.

    Args:
        options: None, a ScoringOptions instance or a mapping of overrides
            (snake_case or camelCase keys)
        base: Options the overrides are merged onto (DEFAULT_OPTIONS if None)

    Returns:
        Validated ScoringOptions

    Raises:
        OptionsError: If the overrides are malformed
    """
    base = base or DEFAULT_OPTIONS
    if options is None:
        return base
    if isinstance(options, ScoringOptions):
        return options
    if not isinstance(options, Mapping):
        raise OptionsError(f"Options must be a mapping, got {type(options).__name__}")

    merged: Dict[str, Any] = base.model_dump()
    for key, value in options.items():
        merged[_field_name(key)] = value

    try:
        return ScoringOptions(**merged)
    except ValidationError as e:
        error = e.errors()[0]
        loc = error.get('loc') or ()
        field = _field_name(str(loc[0])) if loc else None
        raise OptionsError(f"Invalid scoring options: {error['msg']}", field=field) from e


def _field_name(key: str) -> str:
    """Map a camelCase alias back to its field name; unknown keys pass through."""
    for name, info in ScoringOptions.model_fields.items():
        if key == info.alias:
            return name
    return key


def load_options(config_path: Union[str, Path]) -> ScoringOptions:
    """
    Load scoring options from a YAML or JSON file.

    The overrides may sit at the top level or under a ``scoring`` key.

    Args:
        config_path: Path to configuration file

    Returns:
        Validated ScoringOptions
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise OptionsError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise OptionsError(f"Unable to read configuration file {config_path}: {e}") from e

    try:
        if config_path.suffix == '.json':
            raw_config = json.loads(content)
        else:
            raw_config = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise OptionsError(f"Unable to parse configuration file {config_path}: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise OptionsError(f"Configuration file {config_path} must contain a mapping")

    overrides = raw_config.get('scoring', raw_config)
    logger.debug(f"Loaded scoring options from {config_path}: {overrides}")
    return resolve_options(overrides)
