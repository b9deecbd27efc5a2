"""
Unit tests for the streaming recognition client.

Tests the StreamingRecognizer class including:
- Stream configuration
- Audio queue management
- Request ordering (config first, then audio)
- Response handling and error statuses
"""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from google.api_core import exceptions as core_exceptions
from google.cloud import speech
from google.rpc import code_pb2

from .client import RecognitionError, StreamingRecognizer


class TestStreamingRecognizerInit:
    """Tests for StreamingRecognizer initialization."""

    def test_default_values(self):
        recognizer = StreamingRecognizer()

        assert recognizer.language == "en-US"
        assert recognizer.sample_rate == 16000
        assert recognizer.interim_results is True
        assert recognizer.model is None
        assert recognizer.on_result is None
        assert recognizer.running is False
        assert recognizer.audio_queue is None


class TestStreamingConfig:
    """Tests for the config sent at stream start."""

    def test_recognition_config(self):
        recognizer = StreamingRecognizer(language="de-DE", sample_rate=8000, enable_punctuation=False)

        config = recognizer.recognition_config

        assert config.encoding == speech.RecognitionConfig.AudioEncoding.LINEAR16
        assert config.sample_rate_hertz == 8000
        assert config.language_code == "de-DE"
        assert config.enable_automatic_punctuation is False
        assert config.model == ""

    def test_model_is_set_when_given(self):
        recognizer = StreamingRecognizer(model="latest_long")
        assert recognizer.recognition_config.model == "latest_long"

    def test_streaming_config(self):
        recognizer = StreamingRecognizer(interim_results=False)

        streaming_config = recognizer.streaming_config

        assert streaming_config.interim_results is False
        assert streaming_config.config.language_code == "en-US"


class TestQueueAudio:
    """Tests for audio queue management."""

    def test_queue_audio_before_open_is_ignored(self):
        recognizer = StreamingRecognizer()
        # Should not raise - just silently ignore
        recognizer.queue_audio(b"\x00" * 100)
        recognizer.finish()

    @pytest.mark.asyncio
    async def test_queue_audio_success(self):
        recognizer = StreamingRecognizer()
        recognizer.open()

        recognizer.queue_audio(b"\x00\x01\x02\x03")
        await asyncio.sleep(0)

        assert recognizer.audio_queue.qsize() == 1
        assert await recognizer.audio_queue.get() == b"\x00\x01\x02\x03"

    @pytest.mark.asyncio
    async def test_empty_block_ignored(self):
        recognizer = StreamingRecognizer()
        recognizer.open()

        recognizer.queue_audio(b"")
        await asyncio.sleep(0)

        assert recognizer.audio_queue.empty()

    @pytest.mark.asyncio
    async def test_queue_audio_from_other_thread(self):
        recognizer = StreamingRecognizer()
        recognizer.open()

        await asyncio.to_thread(recognizer.queue_audio, b"chunk")
        await asyncio.sleep(0)

        assert await recognizer.audio_queue.get() == b"chunk"

    @pytest.mark.asyncio
    async def test_queue_full_drops(self):
        recognizer = StreamingRecognizer(max_queue=2)
        recognizer.open()

        with patch("mic_transcribe.asr.client.logger") as mock_logger:
            recognizer.queue_audio(b"chunk1")
            recognizer.queue_audio(b"chunk2")
            recognizer.queue_audio(b"chunk3")
            await asyncio.sleep(0)
            mock_logger.warning.assert_called_once()

        assert recognizer.audio_queue.qsize() == 2

    @pytest.mark.asyncio
    async def test_finish_with_full_queue_still_ends_stream(self):
        recognizer = StreamingRecognizer(max_queue=2)
        recognizer.open()

        recognizer.queue_audio(b"chunk1")
        recognizer.queue_audio(b"chunk2")
        recognizer.finish()
        await asyncio.sleep(0)

        assert await recognizer.audio_queue.get() == b"chunk2"
        assert await recognizer.audio_queue.get() is None

    @pytest.mark.asyncio
    async def test_audio_after_finish_dropped(self):
        recognizer = StreamingRecognizer()
        recognizer.open()

        recognizer.finish()
        recognizer.queue_audio(b"late")
        await asyncio.sleep(0)

        assert recognizer.audio_queue.qsize() == 1
        assert await recognizer.audio_queue.get() is None


class TestRun:
    """Tests for the streaming call lifecycle."""

    @pytest.mark.asyncio
    async def test_config_first_then_audio_in_order(self, fake_speech_client):
        client = fake_speech_client()
        recognizer = StreamingRecognizer(language="fr-FR", client=client)
        recognizer.open()

        recognizer.queue_audio(b"block1")
        recognizer.queue_audio(b"block2")
        recognizer.queue_audio(b"block3")
        recognizer.finish()
        await recognizer.run()

        first = client.requests[0]
        assert first.streaming_config.config.language_code == "fr-FR"
        assert first.streaming_config.config.sample_rate_hertz == 16000
        assert not first.audio_content
        assert client.audio_requests == [b"block1", b"block2", b"block3"]
        assert recognizer.chunks_sent == 3
        assert recognizer.running is False

    @pytest.mark.asyncio
    async def test_results_delivered(self, fake_speech_client, make_response):
        results = []
        client = fake_speech_client(
            responses=[
                make_response("hel", stability=0.5),
                speech.StreamingRecognizeResponse(),
                make_response("hello", is_final=True, end_seconds=1.0),
            ]
        )
        recognizer = StreamingRecognizer(on_result=results.append, client=client)
        recognizer.open()
        recognizer.finish()

        await recognizer.run()

        assert [(r.text, r.is_final) for r in results] == [("hel", False), ("hello", True)]
        assert recognizer.responses_received == 3

    @pytest.mark.asyncio
    async def test_run_without_callback(self, fake_speech_client, make_response):
        client = fake_speech_client(responses=[make_response("hello", is_final=True)])
        recognizer = StreamingRecognizer(client=client)

        async def finish_soon():
            await asyncio.sleep(0.05)
            recognizer.finish()

        await asyncio.gather(recognizer.run(), finish_soon())

        assert recognizer.responses_received == 1

    @pytest.mark.asyncio
    async def test_service_disconnect_returns_normally(self, fake_speech_client, make_response):
        """The service may end the call while audio is still flowing."""
        client = fake_speech_client(responses=[make_response("bye", is_final=True)], read_requests=2)
        recognizer = StreamingRecognizer(client=client)
        recognizer.open()

        recognizer.queue_audio(b"block1")
        recognizer.queue_audio(b"block2")

        await asyncio.wait_for(recognizer.run(), timeout=5)

        assert client.audio_requests == [b"block1"]

    @pytest.mark.asyncio
    async def test_error_status_raises(self, fake_speech_client, make_error_response):
        client = fake_speech_client(responses=[make_error_response(code_pb2.INTERNAL, "boom")])
        recognizer = StreamingRecognizer(client=client)
        recognizer.open()
        recognizer.finish()

        with pytest.raises(RecognitionError, match="boom") as exc_info:
            await recognizer.run()

        assert exc_info.value.code == code_pb2.INTERNAL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [code_pb2.INVALID_ARGUMENT, code_pb2.OUT_OF_RANGE])
    async def test_stream_limit_status_warns(self, fake_speech_client, make_error_response, code):
        client = fake_speech_client(responses=[make_error_response(code, "Exceeded maximum allowed stream duration")])
        recognizer = StreamingRecognizer(client=client)
        recognizer.open()
        recognizer.finish()

        with patch("mic_transcribe.asr.client.logger") as mock_logger:
            with pytest.raises(RecognitionError):
                await recognizer.run()
            mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_api_error_wrapped(self, fake_speech_client):
        client = fake_speech_client(error=core_exceptions.ServiceUnavailable("connection reset"))
        recognizer = StreamingRecognizer(client=client)
        recognizer.open()
        recognizer.finish()

        with pytest.raises(RecognitionError, match="connection reset") as exc_info:
            await recognizer.run()

        assert isinstance(exc_info.value.__cause__, core_exceptions.ServiceUnavailable)
        assert recognizer.running is False

    @pytest.mark.asyncio
    async def test_api_limit_error_warns(self, fake_speech_client):
        client = fake_speech_client(error=core_exceptions.OutOfRange("Exceeded maximum allowed stream duration"))
        recognizer = StreamingRecognizer(client=client)
        recognizer.open()
        recognizer.finish()

        with patch("mic_transcribe.asr.client.logger") as mock_logger:
            with pytest.raises(RecognitionError):
                await recognizer.run()
            mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_callback_error_propagates(self, fake_speech_client, make_response):
        client = fake_speech_client(responses=[make_response("hello", is_final=True)])
        recognizer = StreamingRecognizer(on_result=MagicMock(side_effect=ValueError("bad")), client=client)
        recognizer.open()
        recognizer.finish()

        with pytest.raises(ValueError, match="bad"):
            await recognizer.run()


class TestCreateClient:
    """Tests for creating the SpeechAsyncClient."""

    def test_default_credentials(self):
        with patch("mic_transcribe.asr.client.speech.SpeechAsyncClient") as mock_cls:
            client = StreamingRecognizer()._create_client()

        assert client is mock_cls.return_value

    def test_service_account_file(self):
        with patch("mic_transcribe.asr.client.speech.SpeechAsyncClient") as mock_cls:
            client = StreamingRecognizer(credentials_file="key.json")._create_client()

        mock_cls.from_service_account_file.assert_called_once_with("key.json")
        assert client is mock_cls.from_service_account_file.return_value

    def test_missing_credentials_wrapped(self):
        with patch("mic_transcribe.asr.client.speech.SpeechAsyncClient") as mock_cls:
            mock_cls.from_service_account_file.side_effect = FileNotFoundError("key.json")
            with pytest.raises(RecognitionError, match="Cannot create speech client"):
                StreamingRecognizer(credentials_file="key.json")._create_client()


class TestStop:
    def test_stop_sets_running_false(self):
        recognizer = StreamingRecognizer()
        recognizer.running = True

        recognizer.stop()

        assert recognizer.running is False
