import stat
import tempfile
import unittest
from pathlib import Path

from actions import ActionConfigurationError, ActionsConfig
from app_config import ActionSettings


class ActionsConfigTests(unittest.TestCase):
    def test_defaults_match_raspberry_pi_layout(self) -> None:
        config = ActionsConfig()
        self.assertEqual("/home/pi/begin", config.begin)
        self.assertEqual("/home/pi/pause", config.pause)
        self.assertEqual("/home/pi/end", config.end)

    def test_empty_path_is_rejected(self) -> None:
        with self.assertRaises(ActionConfigurationError):
            ActionsConfig(begin="  ")

    def test_from_settings_falls_back_to_defaults(self) -> None:
        config = ActionsConfig.from_settings(
            ActionSettings(begin="/srv/begin", pause="", end="/srv/end")
        )
        self.assertEqual("/srv/begin", config.begin)
        self.assertEqual("/home/pi/pause", config.pause)
        self.assertEqual("/srv/end", config.end)

    def test_path_for_rejects_unknown_action(self) -> None:
        config = ActionsConfig()
        self.assertEqual("/home/pi/end", config.path_for("end"))
        with self.assertRaises(ActionConfigurationError):
            config.path_for("resume")

    def test_missing_scripts_lists_non_executable_entries(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            begin = root / "begin"
            begin.write_text("#!/bin/sh\n", encoding="utf-8")
            begin.chmod(begin.stat().st_mode | stat.S_IXUSR)
            pause = root / "pause"
            pause.write_text("#!/bin/sh\n", encoding="utf-8")
            pause.chmod(0o644)

            config = ActionsConfig(
                begin=str(begin),
                pause=str(pause),
                end=str(root / "end"),
            )

            self.assertEqual(["pause", "end"], config.missing_scripts())


if __name__ == "__main__":
    unittest.main()
