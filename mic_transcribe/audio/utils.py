"""Audio utility functions for resampling and format conversion."""

from math import gcd

import numpy as np
from scipy import signal

# Audio settings (LINEAR16 mono, as sent to the recognizer)
TARGET_SAMPLE_RATE = 16000
CHUNK_DURATION_MS = 100
SAMPLE_WIDTH = 2  # bytes per int16 sample


def resample_audio(audio_data: bytes, from_rate: int, to_rate: int) -> bytes:
    """
    Resample audio using polyphase filtering.

    Args:
        audio_data: Raw 16-bit PCM audio bytes
        from_rate: Source sample rate in Hz
        to_rate: Target sample rate in Hz

    Returns:
        Resampled audio as bytes
    """
    if from_rate == to_rate or not audio_data:
        return audio_data

    audio_np = np.frombuffer(audio_data, dtype=np.int16).astype(np.float32)

    g = gcd(from_rate, to_rate)
    resampled = signal.resample_poly(audio_np, to_rate // g, from_rate // g)

    return np.clip(resampled, -32768, 32767).astype(np.int16).tobytes()


def stereo_to_mono(audio_data: bytes) -> bytes:
    """
    Convert stereo audio to mono by averaging channels.

    Args:
        audio_data: Stereo 16-bit PCM audio bytes (interleaved L/R)

    Returns:
        Mono audio as bytes
    """
    stereo = np.frombuffer(audio_data, dtype=np.int16)
    left = stereo[0::2]
    right = stereo[1::2]
    mono = ((left.astype(np.int32) + right.astype(np.int32)) // 2).astype(np.int16)
    return mono.tobytes()


def calculate_chunk_size(sample_rate: int, duration_ms: int = CHUNK_DURATION_MS) -> int:
    """Calculate chunk size in samples for given duration."""
    return int(sample_rate * duration_ms / 1000)


def audio_duration(audio_data: bytes, sample_rate: int = TARGET_SAMPLE_RATE) -> float:
    """Duration in seconds of mono 16-bit PCM audio."""
    return len(audio_data) / (sample_rate * SAMPLE_WIDTH)
