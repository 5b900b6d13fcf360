"""
Decoding adapter: turns paths, URLs and in-memory payloads into sample buffers.
"""

import io
import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Tuple
from urllib.parse import urlparse
from urllib.request import url2pathname

import requests

from .base import (
    AudioDecoder, AudioSource, DecodedAudio,
    SourceUnavailableError, UnsupportedFormatError, describe_source
)
from .config import HTTP_TIMEOUT, DECODE_WORKERS

logger = logging.getLogger(__name__)


class SoundFileDecoder(AudioDecoder):
    """
    Decoder backed by libsndfile through the soundfile package.
    Handles every container libsndfile was built with (WAV, FLAC, OGG, MP3 on recent builds).
    """

    def __init__(self, timeout: float = HTTP_TIMEOUT):
        """
        Initialize decoder.

        Args:
            timeout: Timeout in seconds for fetching URL sources
        """
        self.timeout = timeout

    def is_available(self) -> bool:
        try:
            import soundfile as sf
        except (ImportError, OSError) as e:
            # OSError: the wrapper is installed but libsndfile itself is missing
            logger.warning(f"soundfile unavailable: {e}")
            return False
        return bool(sf.available_formats())

    def decode(self, source: AudioSource) -> DecodedAudio:
        import soundfile as sf

        logger.debug(f"Decoding {describe_source(source)}")
        payload = self._read_payload(source)

        try:
            with sf.SoundFile(io.BytesIO(payload)) as sound_file:
                sample_rate = sound_file.samplerate
                samples = sound_file.read(dtype='float32', always_2d=True)
        except (sf.LibsndfileError, RuntimeError, TypeError, ValueError) as e:
            logger.warning(f"Decoder rejected {describe_source(source)}: {e}")
            raise UnsupportedFormatError(source, str(e)) from e

        if samples.shape[0] == 0:
            raise UnsupportedFormatError(source, "decoded audio contains no samples")

        audio = DecodedAudio.from_samples(samples, sample_rate)
        logger.debug(
            f"Decoded {describe_source(source)}: {audio.duration_seconds:.3f}s, "
            f"{audio.sample_rate}Hz, {audio.channels} channel(s)"
        )
        return audio

    def _read_payload(self, source: AudioSource) -> bytes:
        """Read the raw encoded bytes of a source."""
        if isinstance(source, (bytes, bytearray, memoryview)):
            return bytes(source)

        if hasattr(source, 'read'):
            try:
                payload = source.read()
            except OSError as e:
                raise SourceUnavailableError(source, str(e)) from e
            if not isinstance(payload, (bytes, bytearray)):
                raise UnsupportedFormatError(source, "stream did not return bytes")
            return bytes(payload)

        if isinstance(source, (str, os.PathLike)):
            location = os.fspath(source)
            scheme = urlparse(location).scheme.lower() if isinstance(location, str) else ''
            if scheme in ('http', 'https'):
                return self._fetch_url(location)
            if scheme == 'file':
                location = url2pathname(urlparse(location).path)
            return self._read_file(location)

        raise SourceUnavailableError(source, f"unsupported source type {type(source).__name__}")

    def _fetch_url(self, url: str) -> bytes:
        try:
            with requests.get(url, timeout=self.timeout) as response:
                response.raise_for_status()
                return response.content
        except requests.RequestException as e:
            logger.error(f"Failed to fetch audio from {url}: {e}")
            raise SourceUnavailableError(url, str(e)) from e

    def _read_file(self, path) -> bytes:
        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            logger.error(f"Failed to read audio file {path}: {e}")
            raise SourceUnavailableError(path, str(e)) from e


def decode_pair(decoder: AudioDecoder, user_source: AudioSource,
                reference_source: AudioSource) -> Tuple[DecodedAudio, DecodedAudio]:
    """
    Decode the user and reference sources concurrently.

    Both decodes run to completion before anything is returned; if either
    fails the error is raised (user source first) and no buffers are returned.

    Args:
        decoder: Decoder used for both sources
        user_source: Learner recording
        reference_source: Reference pronunciation

    Returns:
        Tuple of (user audio, reference audio)
    """
    with ThreadPoolExecutor(max_workers=DECODE_WORKERS, thread_name_prefix="decode") as executor:
        user_future = executor.submit(decoder.decode, user_source)
        reference_future = executor.submit(decoder.decode, reference_source)

        user_error = user_future.exception()
        reference_error = reference_future.exception()

    if user_error is not None:
        raise user_error
    if reference_error is not None:
        raise reference_error

    return user_future.result(), reference_future.result()


def is_scoring_supported(decoder: Optional[AudioDecoder] = None) -> bool:
    """
    Capability probe for hosts: whether a decoding facility exists.

    Args:
        decoder: Decoder to probe (SoundFileDecoder if None)

    Returns:
        True if scoring can run on this platform
    """
    decoder = decoder or SoundFileDecoder()
    return decoder.is_available()