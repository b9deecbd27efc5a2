"""Shared pytest fixtures: a scripted speech service and response builders."""

from datetime import timedelta

import pytest
from google.cloud import speech
from google.rpc import status_pb2


class FakeSpeechClient:
    """
    Stand-in for SpeechAsyncClient.

    Reads the request stream (all of it, or `read_requests` requests), then
    replays the scripted responses and optionally raises `error`, which ends
    the call the way a real service disconnect or failure would.
    """

    def __init__(self, responses=(), error: Exception | None = None, read_requests: int | None = None):
        self.responses = list(responses)
        self.error = error
        self.read_requests = read_requests
        self.requests: list[speech.StreamingRecognizeRequest] = []

    async def streaming_recognize(self, requests):
        async def stream():
            async for request in requests:
                self.requests.append(request)
                if self.read_requests is not None and len(self.requests) >= self.read_requests:
                    break
            for response in self.responses:
                yield response
            if self.error is not None:
                raise self.error

        return stream()

    @property
    def audio_requests(self) -> list[bytes]:
        return [r.audio_content for r in self.requests if r.audio_content]


@pytest.fixture
def fake_speech_client():
    """Factory for FakeSpeechClient instances."""
    return FakeSpeechClient


@pytest.fixture
def make_response():
    """Build a StreamingRecognizeResponse with one result per transcript."""

    def factory(
        *transcripts: str,
        is_final: bool = False,
        stability: float = 0.0,
        confidence: float = 0.0,
        end_seconds: float = 0.0,
    ) -> speech.StreamingRecognizeResponse:
        return speech.StreamingRecognizeResponse(
            results=[
                speech.StreamingRecognitionResult(
                    alternatives=[
                        speech.SpeechRecognitionAlternative(transcript=text, confidence=confidence)
                    ],
                    is_final=is_final,
                    stability=stability,
                    result_end_time=timedelta(seconds=end_seconds),
                )
                for text in transcripts
            ]
        )

    return factory


@pytest.fixture
def make_error_response():
    """Build a StreamingRecognizeResponse carrying an error status."""

    def factory(code: int, message: str = "") -> speech.StreamingRecognizeResponse:
        return speech.StreamingRecognizeResponse(error=status_pb2.Status(code=code, message=message))

    return factory
