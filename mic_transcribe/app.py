#!/usr/bin/env python3
"""
Mic Transcribe - live microphone transcription with Google Cloud Speech-to-Text

Captures audio from the microphone, streams it to the Speech-to-Text
streaming API and prints results as they arrive. Interim hypotheses overwrite
the current console line; final results are printed as "Result: ..." lines.

Any failure (device, network, service error) is logged and ends the process
with exit status 1. There is no reconnection: when the service closes the
stream (for instance at its duration limit) the program exits.

Usage:
  python -m mic_transcribe                      # Default microphone, en-US
  python -m mic_transcribe --language de-DE     # Other language
  python -m mic_transcribe --list-devices       # Show available devices
"""

import argparse
import asyncio
import logging
import signal
import sys
import threading
from datetime import datetime
from pathlib import Path

from . import __version__
from .asr import RecognitionError, StreamingRecognizer, TranscriptResult
from .audio import MicrophoneCapture, get_default_microphone_info, list_devices, save_wav
from .config import get_display_info, get_recognition_config
from .output import ConsolePrinter
from .transcript import Transcript
from .utils import set_log_level, setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


class MicTranscribe:
    """Main application class coordinating audio capture, recognition and output."""

    def __init__(
        self,
        language: str | None = None,
        model: str | None = None,
        device_index: int | None = None,
        interim_results: bool | None = None,
        enable_punctuation: bool | None = None,
        show_times: bool = False,
        credentials_file: str | None = None,
        output_path: str | Path | None = None,
        debug_save_audio: bool = False,
        speech_client=None,
    ):
        """
        Initialize Mic Transcribe.

        Args:
            language: Recognition language code (e.g., 'en-US'); env default if None
            model: Recognition model name; service default if None
            device_index: Specific input device index
            interim_results: Show interim hypotheses; env default if None
            enable_punctuation: Automatic punctuation; env default if None
            show_times: Prefix final results with their end offset in ms
            credentials_file: Service-account JSON for the speech client
            output_path: Write the final transcript here on exit
            debug_save_audio: Save captured audio on exit
            speech_client: SpeechAsyncClient to use instead of creating one
        """
        self.config = get_recognition_config(
            language=language,
            model=model,
            interim_results=interim_results,
            enable_punctuation=enable_punctuation,
        )
        self.device_index = device_index
        self.output_path = Path(output_path) if output_path else None

        # State
        self.running = False
        self.exit_code = EXIT_OK
        self._closed = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._recognize_task: asyncio.Task | None = None

        # Audio
        self.audio_capture: MicrophoneCapture | None = None

        # Debug
        self.debug_save_audio = debug_save_audio
        self.debug_audio_chunks: list[bytes] = []

        # Output
        self.transcript = Transcript()
        self.printer = ConsolePrinter(show_interim=self.config["interim_results"], show_times=show_times)

        self.recognizer = StreamingRecognizer(
            language=self.config["language"],
            sample_rate=self.config["sample_rate"],
            interim_results=self.config["interim_results"],
            model=self.config["model"],
            enable_punctuation=self.config["enable_punctuation"],
            on_result=self._on_result,
            client=speech_client,
            credentials_file=credentials_file,
            max_queue=self.config["max_queue"],
        )

    def _on_audio_data(self, audio_bytes: bytes):
        """Handle audio data from capture (runs on the capture thread)."""
        if self.debug_save_audio:
            self.debug_audio_chunks.append(audio_bytes)

        self.recognizer.queue_audio(audio_bytes)

    def _on_capture_error(self, error: Exception):
        """Capture failed mid-stream: cancel recognition and exit with failure."""
        logger.error(f"Audio capture failed: {error}")
        self.exit_code = EXIT_FAILURE
        if self._loop is None:
            return
        try:
            self._loop.call_soon_threadsafe(self._cancel_recognition)
        except RuntimeError:
            logger.debug("Event loop closed, recognition already ended")

    def _cancel_recognition(self):
        if self._recognize_task and not self._recognize_task.done():
            self._recognize_task.cancel()

    def _on_result(self, result: TranscriptResult):
        """Handle a transcript result from the recognizer."""
        self.transcript.update(result)
        self.printer.show(result)

    def _start_audio_capture(self) -> bool:
        """Start audio capture."""
        self.audio_capture = MicrophoneCapture(
            callback=self._on_audio_data,
            device_index=self.device_index,
            on_error=self._on_capture_error,
            chunk_ms=self.config["chunk_ms"],
        )
        return self.audio_capture.start()

    def _stop_audio_capture(self):
        """Stop audio capture."""
        if self.audio_capture:
            self.audio_capture.stop()
            self.audio_capture = None

    def _save_debug_audio(self):
        """Save captured audio to WAV file for debugging."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"debug_audio_{timestamp}.wav"
        try:
            duration = save_wav(filename, b"".join(self.debug_audio_chunks), self.config["sample_rate"])
            print(f"\n💾 Debug audio saved: {filename} ({duration:.1f}s)")
        except OSError as e:
            logger.error(f"Failed to save debug audio: {e}")

    def _save_transcript(self):
        """Write the finalized transcript to output_path."""
        try:
            self.output_path.write_text(self.transcript.get_text(finals_only=True) + "\n", encoding="utf-8")
            logger.info(f"Transcript saved: {self.output_path}")
        except OSError as e:
            logger.error(f"Failed to save transcript: {e}")

    def close(self):
        """Release resources and write outputs. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True

        logger.info("Closing Mic Transcribe...")
        self.running = False

        self._stop_audio_capture()
        self.recognizer.stop()
        self.printer.finish()

        if self.output_path:
            self._save_transcript()

        if self.debug_save_audio and self.debug_audio_chunks:
            self._save_debug_audio()

        logger.info(f"Transcribed {self.transcript.final_count} utterance(s)")

    def _signal_handler(self, signum, frame):
        """First signal ends the audio stream so pending finals arrive; a second one aborts."""
        if not self.running:
            raise KeyboardInterrupt
        logger.info(f"Received signal {signum}, finishing stream...")
        self.running = False
        self.recognizer.finish()

    def _install_signal_handlers(self) -> dict:
        if threading.current_thread() is not threading.main_thread():
            return {}
        previous = {}
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, self._signal_handler)
        return previous

    async def _run_async(self) -> int:
        """Open the stream, start capture, and read results until the stream ends."""
        self._loop = asyncio.get_running_loop()
        self.recognizer.open()

        if not self._start_audio_capture():
            logger.error("Audio capture failed")
            return EXIT_FAILURE
        if self.exit_code == EXIT_FAILURE:
            return EXIT_FAILURE

        logger.info(f"Listening: {self.audio_capture.source_name}")

        self._recognize_task = asyncio.create_task(self.recognizer.run())
        try:
            await self._recognize_task
        except asyncio.CancelledError:
            if self.exit_code != EXIT_FAILURE:
                raise
            logger.info("Recognition cancelled after capture failure")
            return EXIT_FAILURE
        except RecognitionError as e:
            logger.error(f"Recognition failed: {e}")
            return EXIT_FAILURE

        logger.info("Stream closed")
        return self.exit_code

    def run(self) -> int:
        """Run the application. Returns the process exit status."""
        self.running = True
        previous = self._install_signal_handlers()
        try:
            return asyncio.run(self._run_async())
        except KeyboardInterrupt:
            logger.info("Interrupted")
            return EXIT_INTERRUPTED
        except Exception as e:
            logger.exception(f"Transcription failed: {e}")
            return EXIT_FAILURE
        finally:
            for signum, handler in previous.items():
                signal.signal(signum, handler)
            self.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description=f"Mic Transcribe v{__version__}")
    parser.add_argument("--language", help="Recognition language code (default: STT_LANGUAGE or en-US)")
    parser.add_argument("--model", help="Recognition model, e.g. 'latest_long' (default: service default)")
    parser.add_argument("--device", type=int, help="Microphone device index")
    parser.add_argument("--list-devices", action="store_true", help="List available audio devices")
    parser.add_argument(
        "--no-interim", action="store_true", help="Only print final results (no interim hypotheses)"
    )
    parser.add_argument("--no-punctuation", action="store_true", help="Disable automatic punctuation")
    parser.add_argument(
        "--timestamps", action="store_true", help="Prefix results with their end offset in ms"
    )
    parser.add_argument(
        "--credentials",
        help="Service-account JSON file (default: Application Default Credentials)",
    )
    parser.add_argument("--output", help="Write the final transcript to this file on exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--debug-save-audio", action="store_true", help="Save captured audio on exit"
    )
    args = parser.parse_args()

    setup_logging()

    if args.list_devices:
        list_devices()
        return

    if args.debug:
        set_log_level("DEBUG")

    cfg = get_recognition_config(
        language=args.language,
        model=args.model,
        interim_results=False if args.no_interim else None,
        enable_punctuation=False if args.no_punctuation else None,
    )

    # Print startup banner (ASCII only for Windows console compatibility)
    print("+======================================+")
    print(f"|        Mic Transcribe v{__version__}         |")
    print("+======================================+")
    print(f"Recognition: {get_display_info(cfg)}")
    if args.device is not None:
        print(f"Audio: [Mic] Device {args.device}")
    else:
        default_mic = get_default_microphone_info()
        print("Audio: [Mic] " + (f"Default ({default_mic['name']})" if default_mic else "Default microphone"))
    if args.output:
        print(f"Transcript file: {args.output}")
    if args.debug:
        print("Debug: ENABLED")
    print()
    print("Tip: Press Ctrl+C to stop (twice to abort)")
    print()

    app = MicTranscribe(
        language=cfg["language"],
        model=cfg["model"],
        device_index=args.device,
        interim_results=cfg["interim_results"],
        enable_punctuation=cfg["enable_punctuation"],
        show_times=args.timestamps,
        credentials_file=args.credentials,
        output_path=args.output,
        debug_save_audio=args.debug_save_audio,
    )
    sys.exit(app.run())


if __name__ == "__main__":
    main()
