"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass

from actions.config import DEFAULT_BEGIN_SCRIPT, DEFAULT_END_SCRIPT, DEFAULT_PAUSE_SCRIPT
from pomodoro.constants import DEFAULT_HEARTBEAT_SECONDS

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class ActionSettings:
    """Action script paths from `[actions]`."""
    begin: str = DEFAULT_BEGIN_SCRIPT
    pause: str = DEFAULT_PAUSE_SCRIPT
    end: str = DEFAULT_END_SCRIPT


@dataclass(frozen=True)
class InputSettings:
    """Input device and wait tuning from `[input]`."""
    device: str = ""
    heartbeat_seconds: float = DEFAULT_HEARTBEAT_SECONDS
    poll_interval_seconds: float = 0.25


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    actions: ActionSettings
    input: InputSettings
    source_file: str
