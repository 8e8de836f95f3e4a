"""Event dataclasses and publisher contracts emitted by the button input service."""

from dataclasses import dataclass
from datetime import datetime
from queue import Queue
from typing import Any, Optional, Protocol


@dataclass(frozen=True)
class ButtonEvent:
    """Key or button edge read from the input device."""
    code: int
    is_press: bool
    occurred_at: datetime

    @property
    def is_release(self) -> bool:
        return not self.is_press


@dataclass(frozen=True)
class ButtonInputErrorEvent:
    """Event emitted when the input device read loop fails."""
    occurred_at: datetime
    message: str
    exception: Optional[Exception] = None


ButtonInputEvent = ButtonEvent | ButtonInputErrorEvent


class EventPublisher(Protocol):
    """Protocol for publishing runtime events."""

    def publish(self, event: Any) -> None: ...


class QueueEventPublisher:
    """Event publisher that pushes events to a queue."""

    def __init__(self, queue: Queue):
        self._queue = queue

    def publish(self, event: Any) -> None:
        self._queue.put(event)
