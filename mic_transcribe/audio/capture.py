"""Microphone capture producing LINEAR16 blocks for the recognizer."""

import logging
from collections.abc import Callable

from .utils import CHUNK_DURATION_MS, TARGET_SAMPLE_RATE, calculate_chunk_size, resample_audio, stereo_to_mono

logger = logging.getLogger(__name__)


def is_stereo_mix(device_name: str) -> bool:
    """Whether a device is a stereo mix (what-you-hear) input."""
    return "立体声混音" in device_name or "stereo mix" in device_name.lower()


class MicrophoneCapture:
    """Capture audio from a microphone using PyAudio."""

    def __init__(
        self,
        callback: Callable[[bytes], None],
        device_index: int | None = None,
        on_error: Callable[[Exception], None] | None = None,
        chunk_ms: int = CHUNK_DURATION_MS,
    ):
        """
        Initialize microphone capture.

        Args:
            callback: Function to call with captured audio data (16-bit PCM, mono, 16kHz)
            device_index: Specific input device index, or None for default
            on_error: Called once if the capture callback fails; the stream is aborted
            chunk_ms: Block duration in milliseconds
        """
        self.callback = callback
        self.on_error = on_error
        self.device_index = device_index
        self.chunk_ms = chunk_ms
        self.running = False
        self.pyaudio_instance = None
        self.stream = None
        self.capture_rate = TARGET_SAMPLE_RATE
        self.capture_channels = 1
        self._device_name = "Microphone"

    @property
    def source_name(self) -> str:
        return f"🎤 {self._device_name}"

    def start(self) -> bool:
        """Open the input device and start the callback stream. Returns True on success."""
        try:
            import pyaudio

            self.pyaudio_instance = pyaudio.PyAudio()

            if self.device_index is not None:
                device_info = self.pyaudio_instance.get_device_info_by_index(self.device_index)
            else:
                device_info = self.pyaudio_instance.get_default_input_device_info()

            self._device_name = device_info["name"]
            native_rate = int(device_info["defaultSampleRate"])
            max_channels = int(device_info["maxInputChannels"])
            if max_channels < 1:
                raise RuntimeError(f"Device '{self._device_name}' has no input channels")

            self.capture_channels = 2 if (is_stereo_mix(self._device_name) and max_channels >= 2) else 1
            self.capture_rate = native_rate

            chunk_size = calculate_chunk_size(native_rate, self.chunk_ms)

            logger.info(f"Microphone: {self._device_name}")
            logger.info(f"Rate: {native_rate}Hz → {TARGET_SAMPLE_RATE}Hz, Channels: {self.capture_channels}")

            self.stream = self.pyaudio_instance.open(
                format=pyaudio.paInt16,
                channels=self.capture_channels,
                rate=native_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=chunk_size,
                stream_callback=self._audio_callback,
            )

            self.running = True
            self.stream.start_stream()
            logger.info("Microphone capture started")
            return True

        except ImportError:
            logger.error("pyaudio not installed. Run: pip install 'mic-transcribe[audio]'")
            self.stop()
            return False
        except Exception as e:
            logger.error(f"Microphone start failed: {e}")
            self.stop()
            return False

    def _audio_callback(self, in_data, frame_count, time_info, status):
        import pyaudio

        if not self.running:
            return (None, pyaudio.paComplete)

        if status:
            logger.debug(f"Input status flags: {status:#x}")

        try:
            audio_data = in_data

            if self.capture_channels == 2:
                audio_data = stereo_to_mono(audio_data)

            audio_data = resample_audio(audio_data, self.capture_rate, TARGET_SAMPLE_RATE)

            self.callback(audio_data)

        except Exception as e:
            logger.error(f"Mic callback error: {e}")
            self.running = False
            if self.on_error:
                self.on_error(e)
            return (None, pyaudio.paAbort)

        return (None, pyaudio.paContinue)

    def stop(self):
        """Stop capture and release the device. Safe to call more than once."""
        was_running = self.running
        self.running = False

        if self.stream:
            try:
                self.stream.stop_stream()
                self.stream.close()
            except OSError as e:
                logger.warning(f"Error closing input stream: {e}")
            self.stream = None

        if self.pyaudio_instance:
            self.pyaudio_instance.terminate()
            self.pyaudio_instance = None

        if was_running:
            logger.info("Microphone capture stopped")
