"""
Mic Transcribe

Streams microphone audio to Google Cloud Speech-to-Text and prints
transcription results as they arrive.
"""

__version__ = "1.0.0"
