"""Streaming speech recognition for mic-transcribe."""

from .client import RecognitionError, StreamingRecognizer
from .result import TranscriptResult

__all__ = ["RecognitionError", "StreamingRecognizer", "TranscriptResult"]
