"""Subprocess launcher for action scripts with cancellable, generation-tagged handles."""

from __future__ import annotations

import logging
import subprocess
import threading
from datetime import datetime, timezone
from typing import Optional, Protocol, Sequence

from .errors import ActionLaunchError
from .events import ActionCompletedEvent


class CompletionPublisher(Protocol):
    """Protocol for delivering completion events to the runtime owner."""

    def publish(self, event: ActionCompletedEvent) -> None: ...


class ActionHandle:
    """Cancellable handle for one launched action process."""

    def __init__(
        self,
        *,
        name: str,
        generation: int,
        process: subprocess.Popen,
        tracked: bool,
    ):
        self.name = name
        self.generation = generation
        self.tracked = tracked
        self._process = process
        self._cancelled = threading.Event()

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def is_running(self) -> bool:
        return self._process.poll() is None

    def cancel(self) -> None:
        """Request termination without waiting for the process to exit."""
        if self._cancelled.is_set():
            return
        self._cancelled.set()
        if self._process.poll() is not None:
            return
        try:
            self._process.kill()
        except ProcessLookupError:
            # Exited between poll() and kill().
            pass

    def wait(self) -> int:
        return self._process.wait()


class ProcessRunner:
    """Starts action scripts and reports clean exits of tracked ones."""

    def __init__(
        self,
        publisher: CompletionPublisher,
        logger: Optional[logging.Logger] = None,
    ):
        self._publisher = publisher
        self._logger = logger or logging.getLogger(__name__)
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def launch_tracked(
        self,
        name: str,
        path: str,
        args: Sequence[str] = (),
    ) -> ActionHandle:
        """Start an action whose clean exit is published as `ActionCompletedEvent`."""
        return self._launch(name, path, args, tracked=True)

    def launch_untracked(
        self,
        name: str,
        path: str,
        args: Sequence[str] = (),
    ) -> ActionHandle:
        """Start an action whose exit is only logged."""
        return self._launch(name, path, args, tracked=False)

    def _launch(
        self,
        name: str,
        path: str,
        args: Sequence[str],
        *,
        tracked: bool,
    ) -> ActionHandle:
        command = [path, *args]
        self._logger.info("%s", " ".join(command))
        try:
            process = subprocess.Popen(command, stdin=subprocess.DEVNULL)
        except (OSError, ValueError, subprocess.SubprocessError) as error:
            raise ActionLaunchError(
                f"Failed to launch {name} action {path}: {error}"
            ) from error

        self._generation += 1
        handle = ActionHandle(
            name=name,
            generation=self._generation,
            process=process,
            tracked=tracked,
        )
        watcher = threading.Thread(
            target=self._watch,
            args=(handle,),
            daemon=True,
            name=f"action-{name}-{handle.generation}",
        )
        watcher.start()
        return handle

    def _watch(self, handle: ActionHandle) -> None:
        try:
            returncode = handle.wait()
        except Exception as error:
            self._logger.error(
                "Waiting for %s action failed: %s", handle.name, error, exc_info=True
            )
            return

        if handle.cancelled:
            self._logger.info(
                "%s action cancelled (generation=%d)", handle.name, handle.generation
            )
            return

        if returncode != 0:
            self._logger.error(
                "%s action exited with status %d (generation=%d)",
                handle.name,
                returncode,
                handle.generation,
            )
            return

        if not handle.tracked:
            self._logger.debug(
                "%s action finished (generation=%d)", handle.name, handle.generation
            )
            return

        self._publisher.publish(
            ActionCompletedEvent(
                name=handle.name,
                generation=handle.generation,
                occurred_at=datetime.now(timezone.utc),
            )
        )
