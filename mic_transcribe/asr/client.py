"""Streaming recognition client for Google Cloud Speech-to-Text."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from google.api_core import exceptions as core_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import speech
from google.rpc import code_pb2

from ..audio.utils import TARGET_SAMPLE_RATE
from .result import TranscriptResult

logger = logging.getLogger(__name__)

# Status codes the service answers with once a stream runs past its duration limit
STREAM_LIMIT_CODES = (code_pb2.INVALID_ARGUMENT, code_pb2.OUT_OF_RANGE)


class RecognitionError(Exception):
    """Streaming recognition failed. `code` is the google.rpc status code when known."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class StreamingRecognizer:
    """Bidirectional streaming client: audio blocks up, transcript results down."""

    def __init__(
        self,
        language: str = "en-US",
        sample_rate: int = TARGET_SAMPLE_RATE,
        interim_results: bool = True,
        model: str | None = None,
        enable_punctuation: bool = True,
        on_result: Callable[[TranscriptResult], None] | None = None,
        client=None,
        credentials_file: str | None = None,
        max_queue: int = 100,
    ):
        """
        Initialize the recognizer.

        Args:
            language: BCP-47 language code sent in the stream config
            sample_rate: Sample rate of the LINEAR16 audio being sent
            interim_results: Ask the service for interim (non-final) hypotheses
            model: Recognition model name, or None for the service default
            enable_punctuation: Ask the service for automatic punctuation
            on_result: Callback for every transcript result
            client: SpeechAsyncClient to use; created on run() if None
            credentials_file: Service-account JSON used when creating the client
            max_queue: Audio blocks buffered before new blocks are dropped
        """
        self.language = language
        self.sample_rate = sample_rate
        self.interim_results = interim_results
        self.model = model
        self.enable_punctuation = enable_punctuation
        self.on_result = on_result
        self.client = client
        self.credentials_file = credentials_file
        self.max_queue = max_queue

        self.running = False
        self.loop: asyncio.AbstractEventLoop | None = None
        self.audio_queue: asyncio.Queue | None = None
        self.chunks_sent = 0
        self.responses_received = 0
        self._finished = False

    @property
    def recognition_config(self) -> speech.RecognitionConfig:
        config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            language_code=self.language,
            enable_automatic_punctuation=self.enable_punctuation,
        )
        if self.model:
            config.model = self.model
        return config

    @property
    def streaming_config(self) -> speech.StreamingRecognitionConfig:
        """Config sent once, as the first request of the stream."""
        return speech.StreamingRecognitionConfig(
            config=self.recognition_config,
            interim_results=self.interim_results,
        )

    def open(self):
        """Bind to the running event loop and create the audio queue."""
        self.loop = asyncio.get_running_loop()
        self.audio_queue = asyncio.Queue(maxsize=self.max_queue)
        self._finished = False
        self.running = True

    def queue_audio(self, audio_data: bytes):
        """
        Queue audio data for sending. Safe to call from the capture thread.

        Args:
            audio_data: Raw 16-bit PCM audio bytes (mono, sample_rate)
        """
        if not audio_data or self.loop is None or self.audio_queue is None:
            return
        try:
            self.loop.call_soon_threadsafe(self._put_audio, audio_data)
        except RuntimeError:
            logger.debug("Event loop closed, dropping audio chunk")

    def finish(self):
        """End the request stream. Safe to call from any thread."""
        if self.loop is None or self.audio_queue is None:
            return
        try:
            self.loop.call_soon_threadsafe(self._end_stream)
        except RuntimeError:
            logger.debug("Event loop closed, stream already ended")

    def stop(self):
        """Stop the recognizer."""
        self.running = False
        self.finish()

    def _put_audio(self, audio_data: bytes):
        if self._finished:
            return
        try:
            self.audio_queue.put_nowait(audio_data)
        except asyncio.QueueFull:
            logger.warning("Audio queue full, dropping audio chunk")

    def _end_stream(self):
        if self._finished:
            return
        self._finished = True
        if self.audio_queue.full():
            self.audio_queue.get_nowait()
        self.audio_queue.put_nowait(None)

    async def _requests(self) -> AsyncIterator[speech.StreamingRecognizeRequest]:
        """Config request first, then one request per audio block until finish()."""
        yield speech.StreamingRecognizeRequest(streaming_config=self.streaming_config)

        while True:
            audio_data = await self.audio_queue.get()
            if audio_data is None:
                logger.debug(f"Audio stream finished after {self.chunks_sent} chunks")
                return
            self.chunks_sent += 1
            yield speech.StreamingRecognizeRequest(audio_content=audio_data)

    def _create_client(self):
        try:
            if self.credentials_file:
                return speech.SpeechAsyncClient.from_service_account_file(self.credentials_file)
            return speech.SpeechAsyncClient()
        except (auth_exceptions.GoogleAuthError, OSError, ValueError) as e:
            raise RecognitionError(f"Cannot create speech client: {e}") from e

    async def run(self):
        """
        Stream audio and deliver results until the service ends the stream.

        Returns normally at end of stream.

        Raises:
            RecognitionError: The call failed or a response carried an error status.
        """
        if self.audio_queue is None:
            self.open()
        if self.client is None:
            self.client = self._create_client()

        logger.info(f"Opening recognition stream ({self.language}, {self.sample_rate}Hz)")
        try:
            responses = await self.client.streaming_recognize(requests=self._requests())
            async for response in responses:
                self.responses_received += 1
                self._process_response(response)
        except core_exceptions.GoogleAPICallError as e:
            if isinstance(e, (core_exceptions.InvalidArgument, core_exceptions.OutOfRange)):
                logger.warning("Speech recognition request exceeded the streaming time limit")
            status = e.grpc_status_code
            raise RecognitionError(
                f"Cannot stream results: {e}", code=status.value[0] if status is not None else None
            ) from e
        finally:
            self.running = False

        logger.info(
            f"Recognition stream closed by service "
            f"({self.chunks_sent} chunks sent, {self.responses_received} responses)"
        )

    def _process_response(self, response):
        """Process one StreamingRecognizeResponse."""
        error = response.error
        if error is not None and error.code:
            if error.code in STREAM_LIMIT_CODES:
                logger.warning("Speech recognition request exceeded the streaming time limit")
            raise RecognitionError(f"Could not recognize: {error.message}", code=error.code)

        result = TranscriptResult.from_response(response)
        if result is None:
            if response.speech_event_type:
                logger.debug(f"Speech event: {response.speech_event_type.name}")
            return

        logger.debug(f"Received {result}")
        if self.on_result:
            self.on_result(result)
