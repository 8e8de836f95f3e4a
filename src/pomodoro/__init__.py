from .constants import DEFAULT_HEARTBEAT_SECONDS, INITIAL_ELAPSED_TEXT
from .elapsed import format_elapsed_seconds
from .machine import (
    ActionLauncher,
    MachineSnapshot,
    MachineState,
    PomodoroStateMachine,
)
from .session import Session

__all__ = [
    "DEFAULT_HEARTBEAT_SECONDS",
    "INITIAL_ELAPSED_TEXT",
    "ActionLauncher",
    "MachineSnapshot",
    "MachineState",
    "PomodoroStateMachine",
    "Session",
    "format_elapsed_seconds",
]
