"""
Base classes and data types for the pronunciation scoring engine.
Provides the value types passed between components, the error taxonomy
and the decoder interface.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, Union, BinaryIO
import os

import numpy as np


# Anything the decoding adapter accepts: a path, a URL, raw bytes or a binary stream
AudioSource = Union[str, os.PathLike, bytes, bytearray, memoryview, BinaryIO]


class FeedbackKey(Enum):
    """Feedback category reported for an attempt."""
    EXCELLENT = "excellent"
    GOOD = "good"
    ALMOST_THERE = "almostThere"
    TRY_SLOWER = "trySlower"
    TRY_LOUDER = "tryLouder"
    TOO_SHORT = "tooShort"
    TOO_LONG = "tooLong"
    NEEDS_WORK = "needsWork"


@dataclass(frozen=True, eq=False)
class DecodedAudio:
    """Decoded sample buffer of a single source."""
    sample_rate: int
    channel_samples: np.ndarray
    duration_seconds: float
    channels: int = 1

    @classmethod
    def from_samples(cls, samples: np.ndarray, sample_rate: int) -> "DecodedAudio":
        """
        Build a buffer from raw samples.

        Args:
            samples: 1-D mono samples or a 2-D (frames, channels) array
            sample_rate: Sample rate in Hz

        Returns:
            DecodedAudio holding the first channel as float32
        """
        samples = np.asarray(samples)
        channels = 1
        if samples.ndim == 2:
            channels = samples.shape[1]
            samples = samples[:, 0]
        samples = samples.astype(np.float32, copy=False)
        duration = len(samples) / sample_rate if sample_rate > 0 else 0.0
        return cls(
            sample_rate=int(sample_rate),
            channel_samples=samples,
            duration_seconds=float(duration),
            channels=channels,
        )


@dataclass(frozen=True, eq=False)
class FeatureProfile:
    """Compact acoustic description of one recording."""
    duration_seconds: float
    energy_segments: np.ndarray
    peak_amplitude: float
    zero_crossing_rate: float
    spectral_centroid: float
    envelope: np.ndarray


@dataclass(frozen=True)
class ComparisonResult:
    """Raw (unrounded) sub-scores of a profile comparison plus overall similarity."""
    similarity: int
    duration_score: float
    energy_score: float
    rhythm_score: float


@dataclass(frozen=True)
class ScoreAnalysis:
    """Per-aspect breakdown reported with a score."""
    duration_score: int
    energy_score: int
    rhythm_score: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "durationScore": self.duration_score,
            "energyScore": self.energy_score,
            "rhythmScore": self.rhythm_score,
        }


@dataclass(frozen=True)
class ScoreResult:
    """Result of scoring one attempt. The only value handed back to callers."""
    similarity: int
    confidence: int
    passed: bool
    excellent: bool
    analysis: ScoreAnalysis
    feedback_key: FeedbackKey
    xp_reward: int
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        """Export using the camelCase field names the host application expects."""
        return {
            "similarity": self.similarity,
            "confidence": self.confidence,
            "passed": self.passed,
            "excellent": self.excellent,
            "analysis": self.analysis.to_dict(),
            "feedbackKey": self.feedback_key.value,
            "xpReward": self.xp_reward,
        }


class AudioDecoder(ABC):
    """
    Interface of the platform decoding facility.
    Implementations must be re-entrant: two sources of one call are decoded
    concurrently on the same decoder instance.
    """

    @abstractmethod
    def decode(self, source: AudioSource) -> DecodedAudio:
        """
        Decode a source into a sample buffer.

        Args:
            source: Path, URL, bytes or binary stream

        Returns:
            DecodedAudio

        Raises:
            SourceUnavailableError: Source could not be read or fetched
            UnsupportedFormatError: Payload rejected by the decoder
        """
        pass

    def is_available(self) -> bool:
        """
        Whether the decoding facility exists on this platform.

        Returns:
            True if decode() can be called
        """
        return True


# Exception classes for error handling

class ScoringError(Exception):
    """Base exception for scoring errors."""

    def __init__(self, message: str, recoverable: bool = False):
        self.message = message
        self.recoverable = recoverable
        super().__init__(self.message)


class DecodeError(ScoringError):
    """Exception for sources that could not be turned into samples."""

    kind = "decode"

    def __init__(self, source: Any, reason: str):
        message = f"Failed to decode audio from {describe_source(source)}: {reason}"
        super().__init__(message, recoverable=False)
        self.source = source
        self.reason = reason


class SourceUnavailableError(DecodeError):
    """Source is unreachable or unreadable."""

    kind = "unavailable"


class UnsupportedFormatError(DecodeError):
    """Decoder rejected the payload."""

    kind = "unsupported_format"


class CapabilityError(ScoringError):
    """Platform has no decoding facility."""

    kind = "unsupported"

    def __init__(self, reason: str):
        super().__init__(f"Pronunciation scoring is not supported: {reason}", recoverable=False)
        self.reason = reason


class OptionsError(ScoringError):
    """Exception for malformed options or call arguments."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, recoverable=False)
        self.field = field


def describe_source(source: Any) -> str:
    """Short printable description of an audio source for log and error messages."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return f"<{len(source)} bytes>"
    if isinstance(source, (str, os.PathLike)):
        return repr(os.fspath(source))
    return f"<{type(source).__name__}>"
