"""Tests for trace2_flamegraph/config.py"""

import os
import tempfile
import unittest

import yaml

from trace2_flamegraph.config import Config, load_config, load_yaml_config

ENV_VARS = (
    "FLAMEGRAPH_HELPER_MARKER",
    "FLAMEGRAPH_ROW_HEIGHT",
    "FLAMEGRAPH_HEADER_MARGIN",
    "FLAMEGRAPH_MIN_WIDTH",
)


class TestConfigDefaults(unittest.TestCase):
    def test_default_values(self):
        cfg = Config()
        self.assertEqual(cfg.helper_marker, "gvfs-helper")
        self.assertEqual(cfg.row_height, 50)
        self.assertEqual(cfg.header_margin, 70)
        self.assertEqual(cfg.min_visible_width, 10)

    def test_frozen(self):
        cfg = Config()
        with self.assertRaises(AttributeError):
            cfg.row_height = 10


class TestLoadYamlConfig(unittest.TestCase):
    def test_no_path(self):
        self.assertEqual(load_yaml_config(None), {})

    def test_missing_file(self):
        with self.assertLogs("trace2_flamegraph.config", level="WARNING"):
            self.assertEqual(load_yaml_config("/nonexistent/flamegraph.yml"), {})

    def test_reads_mapping(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
            yaml.dump({"row_height": 30, "helper_marker": "scalar"}, f)
            path = f.name
        try:
            self.assertEqual(load_yaml_config(path), {"row_height": 30, "helper_marker": "scalar"})
        finally:
            os.unlink(path)

    def test_non_mapping_ignored(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yml", delete=False) as f:
            f.write("- just\n- a list\n")
            path = f.name
        try:
            with self.assertLogs("trace2_flamegraph.config", level="WARNING"):
                self.assertEqual(load_yaml_config(path), {})
        finally:
            os.unlink(path)


class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        self._orig_env = os.environ.copy()
        for key in ENV_VARS:
            os.environ.pop(key, None)

    def tearDown(self):
        os.environ.clear()
        os.environ.update(self._orig_env)

    def test_defaults_without_env(self):
        self.assertEqual(load_config(), Config())

    def test_yaml_overrides(self):
        cfg = load_config({"row_height": 30, "min_visible_width": 4})
        self.assertEqual(cfg.row_height, 30)
        self.assertEqual(cfg.min_visible_width, 4)
        self.assertEqual(cfg.header_margin, 70)

    def test_env_beats_yaml(self):
        os.environ["FLAMEGRAPH_ROW_HEIGHT"] = "25"
        os.environ["FLAMEGRAPH_HELPER_MARKER"] = "fsmonitor"
        cfg = load_config({"row_height": 30})
        self.assertEqual(cfg.row_height, 25)
        self.assertEqual(cfg.helper_marker, "fsmonitor")

    def test_unknown_keys_warned(self):
        with self.assertLogs("trace2_flamegraph.config", level="WARNING") as cm:
            load_config({"colour": "blue"})
        self.assertIn("colour", cm.output[0])


if __name__ == "__main__":
    unittest.main()
