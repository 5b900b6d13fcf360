"""
Pronunciation Scoring Module.

Compares a learner recording with a reference pronunciation using coarse
acoustic features and reports:
- A similarity score with duration, energy and rhythm breakdown
- A feedback category explaining the main problem
- An XP reward for passing attempts
"""

from .base import (
    # Data classes
    DecodedAudio,
    FeatureProfile,
    ComparisonResult,
    ScoreAnalysis,
    ScoreResult,
    FeedbackKey,

    # Decoder interface
    AudioDecoder,

    # Exceptions
    ScoringError,
    DecodeError,
    SourceUnavailableError,
    UnsupportedFormatError,
    CapabilityError,
    OptionsError
)

from .config import (
    ScoringOptions,
    DEFAULT_OPTIONS,
    resolve_options,
    load_options
)

from .decoding import (
    SoundFileDecoder,
    decode_pair,
    is_scoring_supported
)

from .features import extract_features
from .comparison import compare_profiles, envelope_similarity, resample_envelope
from .feedback import classify_feedback
from .rewards import calculate_xp_reward
from .fallback import score_profile_fallback

from .engine import (
    PronunciationScorer,
    score_pronunciation,
    score_pronunciation_fallback
)

from .session import ScoringSession, SessionState

__all__ = [
    # Data classes
    'DecodedAudio',
    'FeatureProfile',
    'ComparisonResult',
    'ScoreAnalysis',
    'ScoreResult',
    'FeedbackKey',

    # Decoding
    'AudioDecoder',
    'SoundFileDecoder',
    'decode_pair',
    'is_scoring_supported',

    # Configuration
    'ScoringOptions',
    'DEFAULT_OPTIONS',
    'resolve_options',
    'load_options',

    # Components
    'extract_features',
    'compare_profiles',
    'envelope_similarity',
    'resample_envelope',
    'classify_feedback',
    'calculate_xp_reward',
    'score_profile_fallback',

    # Engine
    'PronunciationScorer',
    'score_pronunciation',
    'score_pronunciation_fallback',
    'ScoringSession',
    'SessionState',

    # Exceptions
    'ScoringError',
    'DecodeError',
    'SourceUnavailableError',
    'UnsupportedFormatError',
    'CapabilityError',
    'OptionsError'
]

# Version info
__version__ = '1.0.0'
