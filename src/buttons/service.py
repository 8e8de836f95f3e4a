"""Input device reader that publishes key/button edges from an evdev node."""

import logging
import select
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from .config import ButtonInputConfig
from .errors import ButtonDependencyError, ButtonDeviceError
from .events import ButtonEvent, ButtonInputErrorEvent, EventPublisher

KEY_RELEASE = 0
KEY_PRESS = 1


class ButtonInputService:
    """Service reading key events from one input device on a background thread."""

    def __init__(
        self,
        config: ButtonInputConfig,
        publisher: EventPublisher,
        logger: Optional[logging.Logger] = None,
    ):
        self._config = config
        self._publisher = publisher
        self._logger = logger or logging.getLogger(__name__)
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._ready_event = threading.Event()
        self._running_lock = threading.Lock()
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check if the service is currently running."""
        with self._running_lock:
            return (
                self._running and self._thread is not None and self._thread.is_alive()
            )

    @property
    def is_ready(self) -> bool:
        """Check if the device is open and being read."""
        return self._ready_event.is_set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready_event.wait(timeout=timeout)

    def start(self) -> None:
        """Start reading the input device."""
        with self._running_lock:
            if self._running and self._thread is not None and self._thread.is_alive():
                self._logger.warning("Service is already running")
                return

            self._logger.debug("Starting button input service")
            self._stop_event.clear()
            self._ready_event.clear()
            self._running = True

            self._thread = threading.Thread(
                target=self._run, daemon=True, name="button-input-service"
            )
            self._thread.start()

    def stop(self, timeout_seconds: float = 5.0) -> None:
        """Stop reading the input device.

        Args:
            timeout_seconds: Maximum time to wait for the reader thread.
        """
        with self._running_lock:
            if not self._running:
                self._logger.warning("Service is not running")
                return

        self._logger.debug("Stopping button input service")
        self._stop_event.set()
        self._ready_event.clear()

        if self._thread:
            self._thread.join(timeout=timeout_seconds)

            if self._thread.is_alive():
                self._logger.error(
                    f"Input thread did not stop within {timeout_seconds}s. "
                    "Thread may still be running (daemon will be killed on exit)."
                )
            else:
                self._logger.debug("Service stopped successfully")
                with self._running_lock:
                    self._running = False

    @contextmanager
    def _open_device(self):
        """Context manager for the evdev device and its code tables."""
        try:
            import evdev
        except ImportError as error:
            raise ButtonDependencyError(
                f"evdev import failed ({error}). Install evdev."
            ) from error

        try:
            device = evdev.InputDevice(self._config.device_path)
        except OSError as error:
            raise ButtonDeviceError(
                f"Failed to open input device {self._config.device_path}: {error}"
            ) from error

        try:
            ecodes = evdev.ecodes
            if ecodes.EV_KEY not in device.capabilities():
                raise ButtonDeviceError(
                    f"Device {self._config.device_path!r} does not support "
                    "key/button events."
                )
            yield device, ecodes
        finally:
            self._logger.debug("Closing input device")
            try:
                device.close()
            except Exception as e:
                self._logger.error(f"Error closing input device: {e}")

    def _log_pressed_keys(self, device: Any, ecodes: Any) -> None:
        """Log the keys held down at startup."""
        for code in device.active_keys():
            self._logger.info("  Key 0x%02x %s", code, key_name(ecodes, code))

    def _run(self) -> None:
        """Main read loop."""
        try:
            with self._open_device() as (device, ecodes):
                self._logger.info(
                    "Reading %s (%s)",
                    self._config.device_path,
                    getattr(device, "name", "unknown"),
                )
                self._log_pressed_keys(device, ecodes)
                self._ready_event.set()

                while not self._stop_event.is_set():
                    readable, _, _ = select.select(
                        [device], [], [], self._config.poll_interval_seconds
                    )
                    if not readable:
                        continue

                    try:
                        batch = list(device.read())
                    except BlockingIOError:
                        continue

                    for raw in batch:
                        event = translate_event(raw, ecodes)
                        if event is not None:
                            self._publisher.publish(event)

        except Exception as error:
            self._logger.error(f"Button input service error: {error}", exc_info=True)
            self._publisher.publish(
                ButtonInputErrorEvent(
                    occurred_at=datetime.now(timezone.utc),
                    message=str(error),
                    exception=error,
                )
            )
        finally:
            self._ready_event.clear()
            with self._running_lock:
                self._running = False
            self._logger.debug("Button input service terminated")


def translate_event(raw: Any, ecodes: Any) -> Optional[ButtonEvent]:
    """Map a raw evdev event to a `ButtonEvent`; non-key events and repeats yield None."""
    if raw.type != ecodes.EV_KEY:
        return None
    if raw.value not in (KEY_RELEASE, KEY_PRESS):
        return None
    return ButtonEvent(
        code=int(raw.code),
        is_press=raw.value == KEY_PRESS,
        occurred_at=datetime.fromtimestamp(raw.timestamp(), tz=timezone.utc),
    )


def key_name(ecodes: Any, code: int) -> str:
    name = ecodes.KEY.get(code) or ecodes.BTN.get(code)
    if name is None:
        return ""
    if isinstance(name, (list, tuple)):
        return "/".join(name)
    return str(name)
