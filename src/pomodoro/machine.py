"""Button-driven begin/pause/end state machine.

The machine is owned by a single thread: the runtime loop feeds it button
events, completion events, and heartbeat ticks one at a time. It never blocks;
the multi-way wait lives in the runtime loop.

    IDLE --press--> AWAITING_RELEASE --release(same code)--> RUNNING
    RUNNING --press--> PAUSED --press--> AWAITING_RELEASE
    RUNNING --completion(current generation)--> IDLE   (launches `end`)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Sequence

from actions.config import ActionsConfig
from actions.errors import ActionLaunchError
from actions.events import ActionCompletedEvent
from buttons.events import ButtonEvent

from .constants import ACTION_BEGIN, ACTION_END, ACTION_PAUSE
from .session import Session


class MachineState(Enum):
    IDLE = "idle"
    AWAITING_RELEASE = "awaiting_release"
    RUNNING = "running"
    PAUSED = "paused"


class ActionProcess(Protocol):
    """Subset of `actions.ActionHandle` used by the machine."""
    name: str
    generation: int

    def cancel(self) -> None: ...


class ActionLauncher(Protocol):
    """Launch contract implemented by `actions.ProcessRunner`."""

    def launch_tracked(
        self, name: str, path: str, args: Sequence[str] = ()
    ) -> ActionProcess: ...

    def launch_untracked(
        self, name: str, path: str, args: Sequence[str] = ()
    ) -> ActionProcess: ...


@dataclass(frozen=True)
class MachineSnapshot:
    """Immutable view of machine state for logging and tests."""
    state: MachineState
    last_code: Optional[int]
    accumulated_elapsed: float
    elapsed_text: str
    tracked_generation: Optional[int]

    @property
    def paused(self) -> bool:
        return self.state == MachineState.PAUSED


class PomodoroStateMachine:
    """Reactive automaton over button, completion, and tick inputs."""

    def __init__(
        self,
        *,
        launcher: ActionLauncher,
        scripts: ActionsConfig,
        logger: Optional[logging.Logger] = None,
    ):
        self._launcher = launcher
        self._scripts = scripts
        self._logger = logger or logging.getLogger("pomodoro")

        self._state = MachineState.IDLE
        self._session = Session()
        self._last_event: Optional[ButtonEvent] = None
        self._tracked: Optional[ActionProcess] = None
        self._background: Optional[ActionProcess] = None

    @property
    def state(self) -> MachineState:
        return self._state

    @property
    def paused(self) -> bool:
        return self._state == MachineState.PAUSED

    @property
    def session(self) -> Session:
        return self._session

    @property
    def tracked_process(self) -> Optional[ActionProcess]:
        return self._tracked

    def snapshot(self) -> MachineSnapshot:
        return MachineSnapshot(
            state=self._state,
            last_code=self._last_event.code if self._last_event else None,
            accumulated_elapsed=self._session.accumulated_elapsed,
            elapsed_text=self._session.elapsed_text,
            tracked_generation=self._tracked.generation if self._tracked else None,
        )

    def handle_button(self, event: ButtonEvent) -> MachineState:
        self._logger.debug(
            "%s: code=%d press=%s", self._state.value, event.code, event.is_press
        )
        if self._state == MachineState.IDLE:
            self._idle_button(event)
        elif self._state == MachineState.AWAITING_RELEASE:
            self._awaiting_release_button(event)
        elif self._state in (MachineState.RUNNING, MachineState.PAUSED):
            if event.is_press:
                self._last_event = event
                self._toggle_pause(event)
        return self._state

    def handle_completion(self, event: ActionCompletedEvent) -> MachineState:
        tracked = self._tracked
        if tracked is None or tracked.generation != event.generation:
            self._logger.debug(
                "Ignoring stale %s completion (generation=%d)",
                event.name,
                event.generation,
            )
            return self._state

        if self._state != MachineState.RUNNING:
            self._logger.debug(
                "Ignoring %s completion in state %s", event.name, self._state.value
            )
            return self._state

        self._logger.info("%s action completed", event.name)
        self._finish()
        return self._state

    def handle_tick(self) -> MachineState:
        if self._state in (MachineState.RUNNING, MachineState.PAUSED):
            self._logger.info(
                "tick: state=%s segment=%.1fs total=%.1fs",
                self._state.value,
                self._session.segment_elapsed(time.monotonic()),
                self._session.accumulated_elapsed,
            )
        return self._state

    def _idle_button(self, event: ButtonEvent) -> None:
        if not event.is_press:
            return

        self._last_event = event
        self._session.reset()
        self._cancel_all()
        self._state = MachineState.AWAITING_RELEASE

    def _awaiting_release_button(self, event: ButtonEvent) -> None:
        last = self._last_event
        if event.is_press or last is None or event.code != last.code:
            return

        self._discard_tracked()
        try:
            handle = self._launcher.launch_tracked(
                ACTION_BEGIN,
                self._scripts.begin,
                (self._session.elapsed_text,),
            )
        except ActionLaunchError as error:
            self._logger.error("%s", error)
            self._revert_to_idle()
            return

        self._tracked = handle
        self._session.start_segment(time.monotonic())
        self._state = MachineState.RUNNING
        self._logger.info("Running (generation=%d)", handle.generation)

    def _toggle_pause(self, event: ButtonEvent) -> None:
        if self._state == MachineState.RUNNING:
            self._pause_on()
        else:
            self._pause_off(event)

    def _pause_on(self) -> None:
        self._logger.info("Pause")
        self._discard_tracked()
        segment = self._session.close_segment(time.monotonic())
        self._logger.info(
            "Segment %.3fs, total %.3fs", segment, self._session.accumulated_elapsed
        )
        self._cancel_background()
        try:
            self._background = self._launcher.launch_untracked(
                ACTION_PAUSE,
                self._scripts.pause,
            )
        except ActionLaunchError as error:
            self._logger.error("%s", error)
            self._revert_to_idle()
            return

        self._state = MachineState.PAUSED

    def _pause_off(self, event: ButtonEvent) -> None:
        self._logger.info("Unpause")
        self._cancel_background()
        self._last_event = event
        self._state = MachineState.AWAITING_RELEASE
        # The press that ended the pause is replayed through release gating.
        self._awaiting_release_button(event)

    def _finish(self) -> None:
        self._logger.info(
            "End: elapsed=%s total=%.3fs",
            self._session.elapsed_text,
            self._session.accumulated_elapsed,
        )
        self._cancel_all()
        try:
            self._background = self._launcher.launch_untracked(
                ACTION_END,
                self._scripts.end,
                (self._session.elapsed_text,),
            )
        except ActionLaunchError as error:
            self._logger.error("%s", error)
        self._revert_to_idle()

    def _revert_to_idle(self) -> None:
        self._discard_tracked()
        self._session.started_at = None
        self._state = MachineState.IDLE

    def _discard_tracked(self) -> None:
        tracked = self._tracked
        self._tracked = None
        if tracked is not None:
            tracked.cancel()

    def _cancel_background(self) -> None:
        background = self._background
        self._background = None
        if background is not None:
            background.cancel()

    def _cancel_all(self) -> None:
        self._discard_tracked()
        self._cancel_background()
