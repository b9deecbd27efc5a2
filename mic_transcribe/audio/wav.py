"""WAV file output for captured audio."""

import logging
import wave
from pathlib import Path

from .utils import SAMPLE_WIDTH, TARGET_SAMPLE_RATE, audio_duration

logger = logging.getLogger(__name__)


def save_wav(path: str | Path, audio_data: bytes, sample_rate: int = TARGET_SAMPLE_RATE) -> float:
    """
    Write mono 16-bit PCM audio to a WAV file.

    Args:
        path: Destination file path
        audio_data: Raw 16-bit PCM audio bytes
        sample_rate: Sample rate of audio_data in Hz

    Returns:
        Duration of the saved audio in seconds
    """
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(1)
        wf.setsampwidth(SAMPLE_WIDTH)
        wf.setframerate(sample_rate)
        wf.writeframes(audio_data)

    duration = audio_duration(audio_data, sample_rate)
    logger.info(f"Saved audio: {path} ({duration:.1f}s)")
    return duration
