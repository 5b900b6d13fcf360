"""
Tests for the decoding adapter.
"""

import io
import sys
import threading
from unittest.mock import patch, MagicMock

import numpy as np
import pytest
import requests
import soundfile as sf

from pronunciation.base import (
    AudioDecoder, DecodedAudio, DecodeError,
    SourceUnavailableError, UnsupportedFormatError
)
from pronunciation.decoding import SoundFileDecoder, decode_pair, is_scoring_supported


class TestSoundFileDecoder:
    """Test decoding of the supported source kinds."""

    def test_decode_bytes(self, tone, wav_bytes, sample_rate):
        samples = tone(0.5, sample_rate)
        audio = SoundFileDecoder().decode(wav_bytes(samples, sample_rate))

        assert audio.sample_rate == sample_rate
        assert audio.duration_seconds == pytest.approx(0.5)
        assert np.allclose(audio.channel_samples, samples)

    def test_decode_stream(self, tone, wav_bytes, sample_rate):
        stream = io.BytesIO(wav_bytes(tone(0.25, sample_rate), sample_rate))
        audio = SoundFileDecoder().decode(stream)
        assert audio.duration_seconds == pytest.approx(0.25)

    def test_decode_path_and_file_url(self, tmp_path, tone, sample_rate):
        path = tmp_path / "attempt.wav"
        sf.write(str(path), tone(0.5, sample_rate), sample_rate)

        decoder = SoundFileDecoder()
        from_path = decoder.decode(path)
        from_str = decoder.decode(str(path))
        from_url = decoder.decode(path.as_uri())

        assert from_path.duration_seconds == pytest.approx(0.5)
        assert np.array_equal(from_path.channel_samples, from_str.channel_samples)
        assert np.array_equal(from_path.channel_samples, from_url.channel_samples)

    def test_decode_stereo_keeps_first_channel(self, tone, wav_bytes, sample_rate):
        left = tone(0.5, sample_rate)
        stereo = np.stack([left, np.zeros_like(left)], axis=1)
        audio = SoundFileDecoder().decode(wav_bytes(stereo, sample_rate))

        assert audio.channels == 2
        assert audio.channel_samples.ndim == 1
        assert np.allclose(audio.channel_samples, left)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceUnavailableError) as exc_info:
            SoundFileDecoder().decode(tmp_path / "missing.wav")
        assert exc_info.value.kind == "unavailable"

    def test_garbage_payload(self):
        with pytest.raises(UnsupportedFormatError) as exc_info:
            SoundFileDecoder().decode(b"definitely not an audio file" * 10)
        assert exc_info.value.kind == "unsupported_format"
        assert isinstance(exc_info.value, DecodeError)

    def test_unsupported_source_type(self):
        with pytest.raises(SourceUnavailableError):
            SoundFileDecoder().decode(12345)

    @patch('pronunciation.decoding.requests.get')
    def test_decode_url(self, mock_get, tone, wav_bytes, sample_rate):
        response = MagicMock()
        response.content = wav_bytes(tone(0.5, sample_rate), sample_rate)
        mock_get.return_value.__enter__.return_value = response

        audio = SoundFileDecoder(timeout=5).decode("https://cdn.example.com/ref.wav")

        assert audio.duration_seconds == pytest.approx(0.5)
        mock_get.assert_called_once_with("https://cdn.example.com/ref.wav", timeout=5)

    @patch('pronunciation.decoding.requests.get')
    def test_url_http_error(self, mock_get):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        mock_get.return_value.__enter__.return_value = response

        with pytest.raises(SourceUnavailableError):
            SoundFileDecoder().decode("https://cdn.example.com/missing.wav")

    @patch('pronunciation.decoding.requests.get')
    def test_url_connection_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(SourceUnavailableError):
            SoundFileDecoder().decode("http://localhost:1/ref.wav")

    def test_soundfile_closed_after_failure(self):
        buffer = io.BytesIO()
        sf.write(buffer, np.zeros(100, dtype=np.float32), 8000, format='WAV')
        opened = []
        original = sf.SoundFile

        def tracking_soundfile(*args, **kwargs):
            sound_file = original(*args, **kwargs)
            opened.append(sound_file)
            return sound_file

        with patch('soundfile.SoundFile', side_effect=tracking_soundfile):
            with patch.object(original, 'read', side_effect=RuntimeError("read failed")):
                with pytest.raises(UnsupportedFormatError):
                    SoundFileDecoder().decode(buffer.getvalue())

        assert len(opened) == 1
        assert opened[0].closed


class TestCapabilityProbe:
    """Test is_scoring_supported."""

    def test_soundfile_available(self):
        assert is_scoring_supported() is True

    def test_soundfile_missing(self):
        with patch.dict(sys.modules, {'soundfile': None}):
            assert SoundFileDecoder().is_available() is False

    def test_custom_decoder(self, decoder_factory):
        assert is_scoring_supported(decoder_factory(available=False)) is False
        assert is_scoring_supported(decoder_factory(available=True)) is True


class RecordingDecoder(AudioDecoder):
    """Decoder that fails for sources starting with 'bad' and records finished decodes."""

    def __init__(self):
        self.finished = []
        self._lock = threading.Lock()

    def decode(self, source):
        try:
            if source.startswith("bad"):
                raise SourceUnavailableError(source, "unreachable")
            return DecodedAudio.from_samples(np.ones(100, dtype=np.float32), 100)
        finally:
            with self._lock:
                self.finished.append(source)


class TestDecodePair:
    """Test concurrent decoding of both sources."""

    def test_both_decoded(self):
        decoder = RecordingDecoder()
        user, reference = decode_pair(decoder, "user.wav", "ref.wav")
        assert user.duration_seconds == pytest.approx(1.0)
        assert reference.duration_seconds == pytest.approx(1.0)
        assert sorted(decoder.finished) == ["ref.wav", "user.wav"]

    def test_reference_failure_fails_call(self):
        decoder = RecordingDecoder()
        with pytest.raises(SourceUnavailableError):
            decode_pair(decoder, "user.wav", "bad-ref.wav")
        assert sorted(decoder.finished) == ["bad-ref.wav", "user.wav"]

    def test_user_failure_reported_first(self):
        decoder = RecordingDecoder()
        with pytest.raises(SourceUnavailableError) as exc_info:
            decode_pair(decoder, "bad-user.wav", "bad-ref.wav")
        assert exc_info.value.source == "bad-user.wav"
