"""Configuration model for the begin/pause/end action scripts."""

from __future__ import annotations

import os
from dataclasses import dataclass

from .errors import ActionConfigurationError

DEFAULT_BEGIN_SCRIPT = "/home/pi/begin"
DEFAULT_PAUSE_SCRIPT = "/home/pi/pause"
DEFAULT_END_SCRIPT = "/home/pi/end"


@dataclass(frozen=True)
class ActionsConfig:
    """Validated script paths invoked at phase boundaries."""
    begin: str = DEFAULT_BEGIN_SCRIPT
    pause: str = DEFAULT_PAUSE_SCRIPT
    end: str = DEFAULT_END_SCRIPT

    def __post_init__(self) -> None:
        for name in ("begin", "pause", "end"):
            if not getattr(self, name).strip():
                raise ActionConfigurationError(f"actions.{name} cannot be empty")

    def path_for(self, name: str) -> str:
        if name not in ("begin", "pause", "end"):
            raise ActionConfigurationError(f"Unknown action: {name}")
        return getattr(self, name)

    def missing_scripts(self) -> list[str]:
        """Return the names of actions whose script is not an executable file."""
        missing = []
        for name in ("begin", "pause", "end"):
            path = self.path_for(name)
            if not (os.path.isfile(path) and os.access(path, os.X_OK)):
                missing.append(name)
        return missing

    @classmethod
    def from_settings(cls, settings) -> "ActionsConfig":
        return cls(
            begin=settings.begin or DEFAULT_BEGIN_SCRIPT,
            pause=settings.pause or DEFAULT_PAUSE_SCRIPT,
            end=settings.end or DEFAULT_END_SCRIPT,
        )
