"""Audio capture module for mic-transcribe."""

from .capture import MicrophoneCapture, is_stereo_mix
from .devices import get_default_microphone_info, list_devices
from .utils import (
    CHUNK_DURATION_MS,
    TARGET_SAMPLE_RATE,
    audio_duration,
    calculate_chunk_size,
    resample_audio,
    stereo_to_mono,
)
from .wav import save_wav

__all__ = [
    "CHUNK_DURATION_MS",
    "TARGET_SAMPLE_RATE",
    "MicrophoneCapture",
    "audio_duration",
    "calculate_chunk_size",
    "get_default_microphone_info",
    "is_stereo_mix",
    "list_devices",
    "resample_audio",
    "save_wav",
    "stereo_to_mono",
]
