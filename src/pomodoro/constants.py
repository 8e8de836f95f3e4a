"""State and default constants used by the button state machine."""

from __future__ import annotations

DEFAULT_HEARTBEAT_SECONDS = 5.0
INITIAL_ELAPSED_TEXT = "0"

ACTION_BEGIN = "begin"
ACTION_PAUSE = "pause"
ACTION_END = "end"
