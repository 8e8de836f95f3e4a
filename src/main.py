import argparse
import logging
import signal
import sys
import time
from typing import Optional, Sequence

from actions import ActionConfigurationError, ActionsConfig
from app_config import AppConfigurationError, load_app_config
from buttons import ButtonConfigurationError, ButtonInputConfig, ButtonInputService
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure logging for the application."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("button_timer")


def setup_signal_handlers(service: ButtonInputService) -> None:
    """Set up graceful shutdown on SIGTERM and SIGINT."""

    def signal_handler(signum: int, frame) -> None:
        signal_name = signal.Signals(signum).name
        logging.getLogger("button_timer").info("%s received, stopping...", signal_name)
        service.stop()
        sys.exit(0)

    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)


def wait_for_service_ready(service: ButtonInputService, timeout: float = 10.0) -> bool:
    """Wait for service to become ready, with fast-fail on crash.

    Args:
        service: The button input service
        timeout: Maximum time to wait in seconds

    Returns:
        True if service became ready, False if it failed or timed out
    """
    start_time = time.time()
    poll_interval = 0.1

    while time.time() - start_time < timeout:
        if service.is_ready:
            return True

        # Fast-fail: if the device could not be opened, don't wait full timeout
        if not service.is_running:
            return False

        time.sleep(poll_interval)

    return service.is_ready


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Drive begin/pause/end scripts from button presses.",
    )
    parser.add_argument(
        "device",
        nargs="?",
        help="Input device node, e.g. /dev/input/event0 (overrides [input] device)",
    )
    parser.add_argument("--config", help="Path to config.toml")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every state transition",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the button timer."""
    args = build_arg_parser().parse_args(argv)
    logger = setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        app_config = load_app_config(args.config)
        if app_config.source_file:
            logger.info("Loaded runtime config: %s", app_config.source_file)
    except AppConfigurationError as error:
        logger.error(f"App configuration error: {error}")
        return 1

    try:
        input_config = ButtonInputConfig.from_settings(
            app_config.input,
            device_path=args.device,
        )
        actions_config = ActionsConfig.from_settings(app_config.actions)
    except (ButtonConfigurationError, ActionConfigurationError) as error:
        logger.error(f"Configuration error: {error}")
        return 1

    for name in actions_config.missing_scripts():
        logger.warning(
            "%s script is not an executable file: %s",
            name,
            actions_config.path_for(name),
        )

    engine = RuntimeEngine(
        RuntimeBootstrap(
            logger=logger,
            app_config=app_config,
            input_config=input_config,
            actions_config=actions_config,
            hooks=RuntimeHooks(
                setup_signal_handlers=setup_signal_handlers,
                wait_for_service_ready=wait_for_service_ready,
            ),
        )
    )
    return engine.run()


if __name__ == "__main__":
    sys.exit(main())
