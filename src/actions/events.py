"""Completion events emitted by tracked action processes."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ActionCompletedEvent:
    """Event emitted once when a tracked action exits cleanly."""
    name: str
    generation: int
    occurred_at: datetime
