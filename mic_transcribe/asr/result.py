"""
Transcript Result Data Class

Represents one recognition update from the streaming service.
"""

from dataclasses import dataclass


@dataclass
class TranscriptResult:
    """
    Result from a streaming recognition response.

    Attributes:
        text: Transcribed text (top alternative of every result in the response)
        is_final: Whether this is a final result (not interim)
        stability: Service estimate (0-1) that an interim result won't change
        confidence: Confidence score (0-1), only reported for final results
        result_end_time: Offset of the end of this result from stream start, in seconds
        language_code: Language detected by the service
    """

    text: str = ""
    is_final: bool = False
    stability: float = 0.0
    confidence: float = 0.0
    result_end_time: float = 0.0
    language_code: str = ""

    @classmethod
    def from_response(cls, response) -> "TranscriptResult | None":
        """
        Build a result from a StreamingRecognizeResponse.

        Interim responses can split the current hypothesis over several results
        of decreasing stability; their transcripts are concatenated.

        Returns:
            TranscriptResult, or None for responses that carry no transcript
            (speech events, billing updates, empty hypotheses).
        """
        results = list(response.results)
        if not results:
            return None

        text = "".join(r.alternatives[0].transcript for r in results if r.alternatives).strip()
        if not text:
            return None

        first = results[0]
        confidence = first.alternatives[0].confidence if first.alternatives else 0.0
        end_time = results[-1].result_end_time  # None when the service omits it
        return cls(
            text=text,
            is_final=any(r.is_final for r in results),
            stability=first.stability,
            confidence=confidence,
            result_end_time=end_time.total_seconds() if end_time else 0.0,
            language_code=first.language_code,
        )

    @property
    def end_time_ms(self) -> int:
        return int(round(self.result_end_time * 1000))

    def __str__(self) -> str:
        status = "final" if self.is_final else "interim"
        text = f"{self.text[:50]}..." if len(self.text) > 50 else self.text
        return f"TranscriptResult({status}: {text})"
