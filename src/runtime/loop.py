"""Runtime orchestration loop for button events, action completions, and heartbeats."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, Optional

from actions import ActionCompletedEvent, ActionsConfig, ProcessRunner
from app_config import AppConfig
from buttons import (
    ButtonEvent,
    ButtonInputConfig,
    ButtonInputErrorEvent,
    ButtonInputService,
    QueueEventPublisher,
)
from pomodoro import PomodoroStateMachine


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[ButtonInputService], None]
    wait_for_service_ready: Callable[[ButtonInputService, float], bool]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    input_config: ButtonInputConfig
    actions_config: ActionsConfig
    hooks: RuntimeHooks


@dataclass
class RuntimeResources:
    """Mutable runtime resources created for the event loop lifecycle."""
    event_queue: Queue[Any]
    publisher: QueueEventPublisher
    runner: ProcessRunner
    input_service: Optional[ButtonInputService] = None


class RuntimeEngine:
    """Single owner of the state machine; feeds it one event at a time.

    Button edges and action completions share one FIFO queue, so neither is
    dropped while the other is being handled. The heartbeat is the queue wait
    timeout and is re-armed after every event.
    """

    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._heartbeat_seconds = bootstrap.app_config.input.heartbeat_seconds

        event_queue: Queue[Any] = Queue()
        publisher = QueueEventPublisher(event_queue)
        self._resources = RuntimeResources(
            event_queue=event_queue,
            publisher=publisher,
            runner=ProcessRunner(publisher, logger=logging.getLogger("actions")),
        )
        self._machine = PomodoroStateMachine(
            launcher=self._resources.runner,
            scripts=bootstrap.actions_config,
            logger=logging.getLogger("pomodoro"),
        )

    @property
    def machine(self) -> PomodoroStateMachine:
        return self._machine

    def run(self) -> int:
        try:
            self._resources.input_service = ButtonInputService(
                config=self._bootstrap.input_config,
                publisher=self._resources.publisher,
                logger=logging.getLogger("buttons"),
            )
            input_service = self._resources.input_service

            self._bootstrap.hooks.setup_signal_handlers(input_service)

            self._logger.info("Starting button input service...")
            input_service.start()

            if not self._bootstrap.hooks.wait_for_service_ready(input_service, 10.0):
                if not input_service.is_running:
                    self._logger.error("Input service failed during initialization.")
                else:
                    self._logger.error("Input service initialization timed out.")
                self._drain_errors()
                return 1

            self._logger.info(
                "Ready! Waiting for a button press on %s",
                self._bootstrap.input_config.device_path,
            )

            while True:
                event, loop_exit = self._poll_event()
                if loop_exit is not None:
                    return loop_exit
                if event is None:
                    continue

                event_exit = self._handle_event(event)
                if event_exit is not None:
                    return event_exit

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def _poll_event(self) -> tuple[Optional[Any], Optional[int]]:
        try:
            return self._resources.event_queue.get(timeout=self._heartbeat_seconds), None
        except Empty:
            input_service = self._resources.input_service
            if input_service is None:
                return None, 1
            if not input_service.is_running:
                self._logger.error("Input service stopped unexpectedly")
                return None, 1
            self._machine.handle_tick()
            return None, None

    def _handle_event(self, event: Any) -> Optional[int]:
        if isinstance(event, ButtonEvent):
            self._machine.handle_button(event)
            return None

        if isinstance(event, ActionCompletedEvent):
            self._machine.handle_completion(event)
            return None

        if isinstance(event, ButtonInputErrorEvent):
            self._logger.error(
                "ButtonInputErrorEvent: %s",
                event.message,
                exc_info=event.exception,
            )
            return 1

        self._logger.warning("Ignoring unknown event type: %s", type(event).__name__)
        return None

    def _drain_errors(self) -> None:
        while True:
            try:
                event = self._resources.event_queue.get_nowait()
            except Empty:
                return
            if isinstance(event, ButtonInputErrorEvent):
                self._logger.error("%s", event.message)

    def _shutdown(self) -> None:
        input_service = self._resources.input_service
        if input_service is not None and input_service.is_running:
            self._logger.info("Stopping input service...")
            try:
                input_service.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping input service: %s", error, exc_info=True)
