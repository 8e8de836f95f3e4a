"""External begin/pause/end action scripts."""

from .config import ActionsConfig
from .errors import ActionConfigurationError, ActionError, ActionLaunchError
from .events import ActionCompletedEvent
from .runner import ActionHandle, CompletionPublisher, ProcessRunner

__all__ = [
    "ActionCompletedEvent",
    "ActionConfigurationError",
    "ActionError",
    "ActionHandle",
    "ActionLaunchError",
    "ActionsConfig",
    "CompletionPublisher",
    "ProcessRunner",
]
