import logging
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from actions import ActionCompletedEvent, ActionsConfig
from app_config import ActionSettings, AppConfig, InputSettings
from buttons import ButtonEvent, ButtonInputConfig, ButtonInputErrorEvent
from pomodoro import MachineState
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks


def _now() -> datetime:
    return datetime.now(timezone.utc)


class _FakeInputService:
    script: list = []
    instances: list = []

    def __init__(self, config, publisher, logger=None):
        self.config = config
        self.publisher = publisher
        self.running = False
        self.stopped = False
        _FakeInputService.instances.append(self)

    @property
    def is_running(self) -> bool:
        return self.running

    def start(self) -> None:
        self.running = True
        for event in self.script:
            self.publisher.publish(event)

    def stop(self, timeout_seconds: float = 5.0) -> None:
        self.running = False
        self.stopped = True


class _FakeHandle:
    def __init__(self, name, generation):
        self.name = name
        self.generation = generation
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class _FakeRunner:
    instances: list = []

    def __init__(self, publisher, logger=None):
        self.publisher = publisher
        self.launches: list[tuple[str, str, tuple[str, ...]]] = []
        self._generation = 0
        _FakeRunner.instances.append(self)

    def launch_tracked(self, name, path, args=()):
        handle = self._record(name, path, args)
        # The begin script exits cleanly right away.
        self.publisher.publish(
            ActionCompletedEvent(name=name, generation=handle.generation, occurred_at=_now())
        )
        return handle

    def launch_untracked(self, name, path, args=()):
        handle = self._record(name, path, args)
        if name == "end":
            # Simulate the device going away once the cycle is over.
            self.publisher.publish(
                ButtonInputErrorEvent(occurred_at=_now(), message="device unplugged")
            )
        return handle

    def _record(self, name, path, args):
        self._generation += 1
        self.launches.append((name, path, tuple(args)))
        return _FakeHandle(name, self._generation)


def _bootstrap(*, ready: bool = True, heartbeat: float = 0.05) -> RuntimeBootstrap:
    app_config = AppConfig(
        actions=ActionSettings(),
        input=InputSettings(device="/dev/input/event3", heartbeat_seconds=heartbeat),
        source_file="",
    )
    return RuntimeBootstrap(
        logger=logging.getLogger("test.runtime"),
        app_config=app_config,
        input_config=ButtonInputConfig(device_path="/dev/input/event3", validate_path=False),
        actions_config=ActionsConfig(begin="/opt/begin", pause="/opt/pause", end="/opt/end"),
        hooks=RuntimeHooks(
            setup_signal_handlers=lambda service: None,
            wait_for_service_ready=lambda service, timeout: ready,
        ),
    )


class RuntimeEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        _FakeInputService.instances = []
        _FakeInputService.script = []
        _FakeRunner.instances = []
        for target, fake in (
            ("runtime.loop.ButtonInputService", _FakeInputService),
            ("runtime.loop.ProcessRunner", _FakeRunner),
        ):
            patcher = patch(target, fake)
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_full_cycle_dispatches_begin_then_end(self) -> None:
        _FakeInputService.script = [
            ButtonEvent(code=30, is_press=True, occurred_at=_now()),
            ButtonEvent(code=30, is_press=False, occurred_at=_now()),
        ]
        engine = RuntimeEngine(_bootstrap())

        with self.assertLogs("test.runtime", level="ERROR"):
            exit_code = engine.run()

        runner = _FakeRunner.instances[0]
        self.assertEqual(1, exit_code)
        self.assertEqual(
            [("begin", "/opt/begin", ("0",)), ("end", "/opt/end", ("0",))],
            runner.launches,
        )
        self.assertEqual(MachineState.IDLE, engine.machine.state)
        self.assertTrue(_FakeInputService.instances[0].stopped)

    def test_heartbeat_timeout_ticks_machine_without_transition(self) -> None:
        engine = RuntimeEngine(_bootstrap(heartbeat=0.01))
        service = _FakeInputService(None, None)
        service.running = True
        engine._resources.input_service = service

        with patch.object(engine.machine, "handle_tick") as handle_tick:
            event, loop_exit = engine._poll_event()

        self.assertIsNone(event)
        self.assertIsNone(loop_exit)
        handle_tick.assert_called_once_with()

    def test_dead_input_service_ends_loop(self) -> None:
        engine = RuntimeEngine(_bootstrap(heartbeat=0.01))
        engine._resources.input_service = _FakeInputService(None, None)

        with self.assertLogs("test.runtime", level="ERROR"):
            event, loop_exit = engine._poll_event()

        self.assertIsNone(event)
        self.assertEqual(1, loop_exit)

    def test_unknown_events_are_ignored(self) -> None:
        engine = RuntimeEngine(_bootstrap())

        with self.assertLogs("test.runtime", level="WARNING"):
            self.assertIsNone(engine._handle_event(object()))
        self.assertEqual(MachineState.IDLE, engine.machine.state)

    def test_service_not_ready_returns_error(self) -> None:
        _FakeInputService.script = [
            ButtonInputErrorEvent(occurred_at=_now(), message="permission denied"),
        ]
        engine = RuntimeEngine(_bootstrap(ready=False))

        with self.assertLogs("test.runtime", level="ERROR") as logs:
            exit_code = engine.run()

        self.assertEqual(1, exit_code)
        self.assertTrue(any("timed out" in line for line in logs.output))
        self.assertTrue(any("permission denied" in line for line in logs.output))


if __name__ == "__main__":
    unittest.main()
