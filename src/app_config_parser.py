"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    ActionSettings,
    InputSettings,
)

_KNOWN_SECTIONS = ("actions", "input")


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    unknown = sorted(key for key in raw if key not in _KNOWN_SECTIONS)
    if unknown:
        raise AppConfigurationError(
            "Unknown config section(s): " + ", ".join(f"[{name}]" for name in unknown)
        )

    return AppConfig(
        actions=_parse_action_settings(_section(raw, "actions"), base_dir=base_dir),
        input=_parse_input_settings(_section(raw, "input")),
        source_file=source_file,
    )


def _parse_action_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> ActionSettings:
    defaults = ActionSettings()
    return ActionSettings(
        begin=_script_path(section, "begin", defaults.begin, base_dir=base_dir),
        pause=_script_path(section, "pause", defaults.pause, base_dir=base_dir),
        end=_script_path(section, "end", defaults.end, base_dir=base_dir),
    )


def _script_path(
    section: Mapping[str, Any],
    name: str,
    default: str,
    *,
    base_dir: Path,
) -> str:
    raw = _as_str(section.get(name, default), f"actions.{name}")
    return _resolve_path(base_dir, raw) or default


def _parse_input_settings(section: Mapping[str, Any]) -> InputSettings:
    defaults = InputSettings()
    heartbeat = _as_float(
        section.get("heartbeat_seconds", defaults.heartbeat_seconds),
        "input.heartbeat_seconds",
    )
    if heartbeat <= 0:
        raise AppConfigurationError("input.heartbeat_seconds must be positive.")

    poll_interval = _as_float(
        section.get("poll_interval_seconds", defaults.poll_interval_seconds),
        "input.poll_interval_seconds",
    )
    if poll_interval <= 0:
        raise AppConfigurationError("input.poll_interval_seconds must be positive.")

    device = _as_str(section.get("device", ""), "input.device")
    return InputSettings(
        device=device,
        heartbeat_seconds=heartbeat,
        poll_interval_seconds=poll_interval,
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
