"""
Transcript

Utterance-keyed transcript built from streaming results.

Segment logic:
  - Interim result: replaces the text of the current utterance ("u3")
  - Final result:   fixes the current utterance and advances to the next id ("u4")

The service controls segmentation - the transcript just records it.
"""

import logging
from collections import OrderedDict

from .asr.result import TranscriptResult

logger = logging.getLogger(__name__)


class Transcript:
    """
    Manages transcript segments with utterance-based replace/append.

    Simple API:
        transcript = Transcript()
        transcript.update(TranscriptResult(text="hello"))                      # u0 = "hello"
        transcript.update(TranscriptResult(text="hello world", is_final=True)) # u0 fixed
        transcript.update(TranscriptResult(text="how are"))                    # u1 = "how are"

        print(transcript.get_text())  # "hello world how are"
    """

    def __init__(self, max_segments: int = 1000):
        """
        Initialize transcript.

        Args:
            max_segments: Maximum segments to keep (oldest removed first)
        """
        self._segments: OrderedDict[str, str] = OrderedDict()
        self._max_segments = max_segments
        self._utterance = 0
        self._final_ids: set[str] = set()

    @property
    def current_id(self) -> str:
        """Id of the utterance the next result belongs to."""
        return f"u{self._utterance}"

    def update(self, result: TranscriptResult) -> bool:
        """
        Record a result against the current utterance.

        Returns:
            True if an existing segment was replaced, False if a new one was appended
        """
        segment_id = self.current_id
        is_replace = segment_id in self._segments
        action = "REPLACE" if is_replace else "APPEND"
        logger.debug(f"[{action}] {segment_id} = '{result.text[:50]}'")

        self._segments[segment_id] = result.text

        if result.is_final:
            self._final_ids.add(segment_id)
            self._utterance += 1

        while len(self._segments) > self._max_segments:
            removed_id, _ = self._segments.popitem(last=False)
            self._final_ids.discard(removed_id)

        return is_replace

    def get_text(self, finals_only: bool = False) -> str:
        """
        Get full transcript text.

        Args:
            finals_only: Leave out the pending interim utterance

        Returns:
            Concatenated transcript from all segments (space-separated)
        """
        return " ".join(
            text
            for segment_id, text in self._segments.items()
            if text and (not finals_only or segment_id in self._final_ids)
        )

    @property
    def final_count(self) -> int:
        """Number of finalized utterances still held."""
        return len(self._final_ids)

    def __repr__(self) -> str:
        return f"Transcript({len(self._segments)} segments, {self.final_count} final)"
