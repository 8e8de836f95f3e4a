import os
from dataclasses import dataclass
from typing import Optional

from .errors import ButtonConfigurationError


@dataclass(frozen=True)
class ButtonInputConfig:
    device_path: str
    poll_interval_seconds: float = 0.25
    validate_path: bool = True

    def __post_init__(self):
        """Validate configuration on initialization."""
        if not self.device_path:
            raise ButtonConfigurationError(
                "Input device path is required (e.g. /dev/input/event0)"
            )
        if self.validate_path and not os.path.exists(self.device_path):
            raise ButtonConfigurationError(
                f"Input device does not exist: {self.device_path}"
            )
        if self.poll_interval_seconds <= 0:
            raise ButtonConfigurationError("poll_interval_seconds must be positive")

    @classmethod
    def from_settings(
        cls,
        settings,
        *,
        device_path: Optional[str] = None,
    ) -> "ButtonInputConfig":
        """Build from `[input]` settings; an explicit device path wins."""
        path = (device_path or "").strip() or settings.device
        return cls(
            device_path=path,
            poll_interval_seconds=settings.poll_interval_seconds,
        )
