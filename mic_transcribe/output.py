"""Console rendering of streaming transcript results."""

import sys
from typing import TextIO

from .asr.result import TranscriptResult

CLEAR_LINE = "\033[K"


class ConsolePrinter:
    """
    Prints results as they arrive.

    Interim results overwrite the current line (carriage return, then clear to
    end of line) so later hypotheses replace earlier ones. Final results are
    written as "Result: <text>" lines and stay on screen.
    """

    def __init__(self, stream: TextIO | None = None, show_interim: bool = True, show_times: bool = False):
        self.stream = stream or sys.stdout
        self.show_interim = show_interim
        self.show_times = show_times
        self._interim_pending = False

    def _format(self, result: TranscriptResult) -> str:
        if self.show_times:
            return f"{result.end_time_ms}: {result.text}"
        return result.text

    def show(self, result: TranscriptResult):
        """Render one result."""
        if result.is_final:
            prefix = f"\r{CLEAR_LINE}" if self._interim_pending else ""
            self.stream.write(f"{prefix}Result: {self._format(result)}\n")
            self._interim_pending = False
        elif self.show_interim:
            self.stream.write(f"\r{CLEAR_LINE}{self._format(result)}")
            self._interim_pending = True
        self.stream.flush()

    def finish(self):
        """End a dangling interim line so the next output starts cleanly."""
        if self._interim_pending:
            self.stream.write("\n")
            self.stream.flush()
            self._interim_pending = False
