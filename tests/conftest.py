"""
Pytest fixtures for pronunciation scoring tests.
"""
import io
import os
import sys

import numpy as np
import pytest
import soundfile as sf

# Add project root to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from pronunciation.base import AudioDecoder, DecodedAudio, FeatureProfile, SourceUnavailableError


def make_tone(duration: float = 1.0, sample_rate: int = 16000, frequency: float = 220.0,
              amplitude: float = 0.5, shaped: bool = True) -> np.ndarray:
    """Sine tone, optionally under a Hann window so its energy envelope is not flat."""
    n = int(duration * sample_rate)
    t = np.arange(n) / sample_rate
    tone = amplitude * np.sin(2 * np.pi * frequency * t + 0.1)
    if shaped:
        tone = tone * np.hanning(n)
    return tone.astype(np.float32)


def to_wav_bytes(samples: np.ndarray, sample_rate: int = 16000) -> bytes:
    buffer = io.BytesIO()
    sf.write(buffer, samples, sample_rate, format='WAV', subtype='FLOAT')
    return buffer.getvalue()


def make_profile(duration: float = 1.0, peak: float = 0.5, zcr: float = 1000.0,
                 envelope=(0.2, 0.6, 1.0, 0.6, 0.2)) -> FeatureProfile:
    envelope = np.asarray(envelope, dtype=np.float64)
    return FeatureProfile(
        duration_seconds=duration,
        energy_segments=envelope * peak,
        peak_amplitude=peak,
        zero_crossing_rate=zcr,
        spectral_centroid=0.0,
        envelope=envelope,
    )


class InMemoryDecoder(AudioDecoder):
    """Decoder serving pre-built buffers by name."""

    def __init__(self, buffers=None, available: bool = True):
        self.buffers = buffers or {}
        self.available = available
        self.requested = []

    def decode(self, source):
        self.requested.append(source)
        if source not in self.buffers:
            raise SourceUnavailableError(source, "no such buffer")
        return self.buffers[source]

    def is_available(self) -> bool:
        return self.available


@pytest.fixture
def sample_rate():
    """Standard sample rate for tests."""
    return 16000


@pytest.fixture
def tone():
    """Factory for synthetic tones."""
    return make_tone


@pytest.fixture
def wav_bytes():
    """Factory encoding samples as an in-memory WAV file."""
    return to_wav_bytes


@pytest.fixture
def profile():
    """Factory for hand-built feature profiles."""
    return make_profile


@pytest.fixture
def shaped_audio(sample_rate):
    """One second of Hann-shaped tone as a decoded buffer."""
    return DecodedAudio.from_samples(make_tone(1.0, sample_rate), sample_rate)


@pytest.fixture
def decoder_factory():
    """Factory for in-memory decoders."""
    return InMemoryDecoder
