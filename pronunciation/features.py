"""
Feature extraction: reduces a decoded buffer to a FeatureProfile.
"""

import logging

import numpy as np

from .base import DecodedAudio, FeatureProfile
from .config import ENVELOPE_EPSILON

logger = logging.getLogger(__name__)


def segment_energy(samples: np.ndarray, segments: int) -> np.ndarray:
    """
    RMS energy of `segments` equal windows; the last window takes the remainder.

    Args:
        samples: Mono samples
        segments: Number of windows

    Returns:
        Array of `segments` RMS values (0 for empty windows)
    """
    if segments < 1:
        raise ValueError(f"segments must be >= 1, got {segments}")

    window = len(samples) // segments
    energy = np.zeros(segments, dtype=np.float64)
    for i in range(segments):
        start = i * window
        end = len(samples) if i == segments - 1 else start + window
        frame = samples[start:end].astype(np.float64)
        if frame.size:
            energy[i] = np.sqrt(np.mean(frame ** 2))
    return energy


def count_zero_crossings(samples: np.ndarray) -> int:
    """Number of adjacent sample pairs with opposite signs (zeros do not cross)."""
    if samples.size < 2:
        return 0
    samples = samples.astype(np.float64)
    return int(np.count_nonzero(samples[:-1] * samples[1:] < 0))


def approximate_spectral_centroid(samples: np.ndarray, sample_rate: int) -> float:
    """
    Amplitude-weighted mean of a linear 0..sample_rate/2 axis laid over sample index.

    This is a time-domain stand-in for a spectral centroid, not an FFT-based one.
    """
    magnitude = np.abs(samples.astype(np.float64))
    total = magnitude.sum()
    if total <= 0:
        return 0.0
    frequencies = np.arange(len(samples), dtype=np.float64) / len(samples) * (sample_rate / 2)
    return float(np.dot(frequencies, magnitude) / total)


def normalize_envelope(energy: np.ndarray) -> np.ndarray:
    """Scale energies by their maximum so the loudest segment is 1 (all zeros stay zero)."""
    peak = float(energy.max()) if energy.size else 0.0
    if peak <= 0:
        peak = ENVELOPE_EPSILON
    return energy / peak


def extract_features(audio: DecodedAudio, segments: int = 10) -> FeatureProfile:
    """
    Extract the feature profile of a buffer.

    Only the first channel is analysed.

    Args:
        audio: Decoded audio
        segments: Number of energy segments

    Returns:
        FeatureProfile
    """
    samples = np.asarray(audio.channel_samples)
    if samples.ndim == 2:
        samples = samples[:, 0]

    energy = segment_energy(samples, segments)
    peak = float(np.max(np.abs(samples))) if samples.size else 0.0
    crossings = count_zero_crossings(samples)
    zcr = crossings / audio.duration_seconds if audio.duration_seconds > 0 else 0.0

    profile = FeatureProfile(
        duration_seconds=float(audio.duration_seconds),
        energy_segments=energy,
        peak_amplitude=peak,
        zero_crossing_rate=float(zcr),
        spectral_centroid=approximate_spectral_centroid(samples, audio.sample_rate),
        envelope=normalize_envelope(energy),
    )
    logger.debug(
        f"Profile: duration={profile.duration_seconds:.3f}s peak={peak:.4f} "
        f"zcr={profile.zero_crossing_rate:.1f} centroid={profile.spectral_centroid:.1f}"
    )
    return profile
