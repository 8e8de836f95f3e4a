"""Per-cycle elapsed-time bookkeeping owned by the state machine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .constants import INITIAL_ELAPSED_TEXT
from .elapsed import format_elapsed_seconds


@dataclass
class Session:
    """Timing state for the current work cycle."""
    started_at: Optional[float] = None
    accumulated_elapsed: float = 0.0
    elapsed_text: str = INITIAL_ELAPSED_TEXT

    def reset(self) -> None:
        self.started_at = None
        self.accumulated_elapsed = 0.0
        self.elapsed_text = INITIAL_ELAPSED_TEXT

    def start_segment(self, now: float) -> None:
        self.started_at = now

    def close_segment(self, now: float) -> float:
        """Fold the running segment into the cycle total and return its length."""
        if self.started_at is None:
            return 0.0

        segment = max(0.0, now - self.started_at)
        self.accumulated_elapsed += segment
        self.elapsed_text = format_elapsed_seconds(segment)
        self.started_at = None
        return segment

    def segment_elapsed(self, now: float) -> float:
        if self.started_at is None:
            return 0.0
        return max(0.0, now - self.started_at)
