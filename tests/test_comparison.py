"""
Tests for profile comparison.
"""

import numpy as np
import pytest

from pronunciation.comparison import (
    resample_envelope, align_envelopes, envelope_similarity,
    duration_ratio, duration_score, rhythm_score, compare_profiles, round_half_up
)
from pronunciation.config import ScoringOptions, DURATION_WEIGHT, ENERGY_WEIGHT, RHYTHM_WEIGHT


class TestResampling:
    """Test envelope alignment."""

    def test_resample_keeps_endpoints(self):
        resampled = resample_envelope(np.array([0.0, 1.0, 0.0, 0.5]), 7)
        assert len(resampled) == 7
        assert resampled[0] == 0.0
        assert resampled[-1] == pytest.approx(0.5)

    def test_resample_interpolates_linearly(self):
        resampled = resample_envelope(np.array([0.0, 0.2, 0.4, 0.6, 0.8]), 3)
        assert np.allclose(resampled, [0.0, 0.4, 0.8])

    def test_resample_stays_in_unit_range(self):
        rng = np.random.default_rng(7)
        short = rng.random(10)
        long = rng.random(20)
        first, second = align_envelopes(short, long)
        assert len(first) == len(second) == 10
        for values in (first, second):
            assert values.min() >= 0.0
            assert values.max() <= 1.0

    def test_alignment_is_symmetric(self):
        a = np.linspace(0, 1, 10)
        b = np.abs(np.sin(np.linspace(0, 3, 20)))
        a1, b1 = align_envelopes(a, b)
        b2, a2 = align_envelopes(b, a)
        assert np.allclose(a1, a2)
        assert np.allclose(b1, b2)


class TestEnvelopeSimilarity:
    """Test correlation-based similarity."""

    def test_identical_envelopes(self):
        envelope = np.array([0.1, 0.5, 1.0, 0.4])
        assert envelope_similarity(envelope, envelope) == pytest.approx(100.0)

    def test_inverted_envelopes(self):
        envelope = np.array([0.0, 0.5, 1.0])
        assert envelope_similarity(envelope, 1.0 - envelope) == pytest.approx(0.0)

    def test_zero_variance_scores_zero(self):
        flat = np.ones(5)
        shaped = np.array([0.1, 0.5, 1.0, 0.5, 0.1])
        assert envelope_similarity(flat, shaped) == 0.0
        assert envelope_similarity(shaped, flat) == 0.0

    def test_symmetric_under_swap(self):
        rng = np.random.default_rng(3)
        a = rng.random(10)
        b = rng.random(20)
        assert envelope_similarity(a, b) == pytest.approx(envelope_similarity(b, a))


class TestSubScores:
    """Test duration and rhythm sub-scores."""

    @pytest.mark.parametrize("ratio,expected", [
        (1.0, 100.0),
        (1.5, 75.0),
        (0.5, 75.0),
        (2.0, 50.0),
        (0.4, 40.0),
        (3.0, 0.0),
    ])
    def test_duration_score_curve(self, ratio, expected):
        assert duration_score(ratio, ScoringOptions()) == pytest.approx(expected)

    def test_duration_ratio_zero_reference(self, profile):
        assert duration_ratio(profile(duration=1.0), profile(duration=0.0)) == 0.0

    def test_rhythm_score(self, profile):
        assert rhythm_score(profile(zcr=1500), profile(zcr=1000)) == pytest.approx(50.0)
        assert rhythm_score(profile(zcr=1000), profile(zcr=1000)) == pytest.approx(100.0)
        assert rhythm_score(profile(zcr=5000), profile(zcr=1000)) == pytest.approx(0.0)

    def test_rhythm_score_zero_reference_rate(self, profile):
        # reference rate of 0 is treated as 1
        assert rhythm_score(profile(zcr=0.5), profile(zcr=0.0)) == pytest.approx(50.0)


class TestCompareProfiles:
    """Test the weighted comparison."""

    def test_weights_sum_to_one(self):
        assert DURATION_WEIGHT + ENERGY_WEIGHT + RHYTHM_WEIGHT == pytest.approx(1.0)

    def test_identical_profiles(self, profile):
        result = compare_profiles(profile(), profile())
        assert result.similarity == 100
        assert result.duration_score == pytest.approx(100.0)
        assert result.rhythm_score == pytest.approx(100.0)

    def test_weighted_similarity(self, profile):
        # ratio 2/3: duration 83.33, energy 100, rhythm 100 -> 95.83
        result = compare_profiles(profile(duration=1.0), profile(duration=1.5))
        assert result.duration_score == pytest.approx(100 - (1 / 3) * 50)
        assert result.similarity == 96

    def test_similarity_is_clamped_integer(self, profile):
        result = compare_profiles(profile(duration=10.0, zcr=9000, envelope=(1.0, 0.5, 0.0)),
                                  profile(duration=1.0, zcr=1000, envelope=(0.0, 0.5, 1.0)))
        assert isinstance(result.similarity, int)
        assert result.similarity == 0

    def test_similarity_symmetric_for_matching_timing(self, profile):
        a = profile(envelope=(0.1, 0.9, 1.0, 0.3, 0.2, 0.0, 0.4, 0.8, 0.6, 0.2))
        b = profile(envelope=np.linspace(0.0, 1.0, 20))
        assert compare_profiles(a, b).similarity == compare_profiles(b, a).similarity

    def test_mismatched_segment_counts(self, profile):
        a = profile(envelope=np.linspace(0.0, 1.0, 10))
        b = profile(envelope=np.linspace(0.0, 1.0, 20))
        assert compare_profiles(a, b).energy_score == pytest.approx(100.0)


def test_round_half_up():
    assert round_half_up(72.5) == 73
    assert round_half_up(72.49) == 72
    assert round_half_up(0.5) == 1
