import os
import tempfile
import unittest

import yaml

from soroban.config import ClockConfig, ConfigPresets, PRESETS
from config import fit_canvas_size


class TestClockConfig(unittest.TestCase):

    def test_defaults_are_valid(self):
        """Default settings pass validation and use six rods."""
        config = ClockConfig()
        self.assertEqual(config.validate(), [])
        self.assertEqual(config.get_column_count(), 6)
        self.assertEqual(ClockConfig(show_seconds=False).get_column_count(), 4)

    def test_validate_reports_issues(self):
        """Out-of-range motion, density and colors are all reported."""
        config = ClockConfig(ease=0.0, bias=1.5, snap_eps=-1, pixel_density=9,
                             bead_color=(300, 0, 0), rail_alpha=400)
        issues = config.validate()
        joined = " ".join(issues)
        for field in ("ease", "bias", "snap_eps", "pixel_density", "bead_color", "rail_alpha"):
            self.assertIn(field, joined)

    def test_dict_round_trip_filters_unknown(self):
        data = ClockConfig(use_12_hour=False).to_dict()
        data["not_a_setting"] = 1
        config = ClockConfig.from_dict(data)
        self.assertFalse(config.use_12_hour)
        self.assertFalse(hasattr(config, "not_a_setting"))

    def test_from_dict_converts_color_lists(self):
        config = ClockConfig.from_dict({"rod_color": [1, 2, 3]})
        self.assertEqual(config.rod_color, (1, 2, 3))
        self.assertEqual(config.validate(), [])

    def test_copy_is_independent(self):
        config = ClockConfig()
        other = config.copy()
        other.show_seconds = False
        self.assertTrue(config.show_seconds)

    def test_save_and_load_yaml(self):
        """Settings persist as plain YAML and load back equal."""
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "clock.yaml")
            config = ClockConfig(show_seconds=False, bead_color=(10, 20, 30))
            self.assertTrue(config.save(path))

            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
            self.assertEqual(raw["bead_color"], [10, 20, 30])

            loaded = ClockConfig.load(path)
            self.assertEqual(loaded, config)

    def test_load_missing_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = ClockConfig.load(os.path.join(tmp, "missing.yaml"))
        self.assertEqual(config, ClockConfig())

    def test_load_broken_file_gives_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "broken.yaml")
            with open(path, "w", encoding="utf-8") as f:
                f.write("show_seconds: [unterminated\n")
            with self.assertLogs(level='ERROR'):
                config = ClockConfig.load(path)
        self.assertEqual(config, ClockConfig())

    def test_presets(self):
        self.assertFalse(ConfigPresets.minutes_only().show_seconds)
        self.assertFalse(ConfigPresets.twenty_four_hour().use_12_hour)
        self.assertTrue(ConfigPresets.high_contrast().show_labels)
        self.assertIsNone(ConfigPresets.get("nope"))
        for name in PRESETS:
            self.assertEqual(ConfigPresets.get(name).validate(), [])


class TestFitCanvasSize(unittest.TestCase):

    def test_margin_and_cap(self):
        """Available space loses a margin and is capped at 1100x700."""
        self.assertEqual(fit_canvas_size(800, 600), (776, 576))
        self.assertEqual(fit_canvas_size(1920, 1080), (1100, 700))

    def test_never_degenerate(self):
        self.assertEqual(fit_canvas_size(10, 10), (1, 1))


if __name__ == '__main__':
    unittest.main()
