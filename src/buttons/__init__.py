"""Button input from a Linux evdev device."""

from .config import ButtonInputConfig
from .errors import (
    ButtonConfigurationError,
    ButtonDependencyError,
    ButtonDeviceError,
    ButtonInputError,
)
from .events import (
    ButtonEvent,
    ButtonInputErrorEvent,
    ButtonInputEvent,
    EventPublisher,
    QueueEventPublisher,
)
from .service import ButtonInputService, translate_event

__all__ = [
    # Config
    "ButtonInputConfig",
    "ButtonConfigurationError",
    # Errors
    "ButtonDependencyError",
    "ButtonDeviceError",
    "ButtonInputError",
    # Events
    "ButtonEvent",
    "ButtonInputErrorEvent",
    "ButtonInputEvent",
    "EventPublisher",
    "QueueEventPublisher",
    # Service
    "ButtonInputService",
    "translate_event",
]
