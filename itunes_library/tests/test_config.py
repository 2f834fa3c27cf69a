#!/usr/bin/env python3
"""
Tests for configuration management.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from itunes_library.core.config import (
    ConfigurationManager,
    get_config,
    reload_config,
    reset_config,
)

CONFIG_YAML = """
parsing:
  strip_control_characters: false
library:
  sort_tracks_by_id: true
  keep_snapshot_on_reload_failure: true
logging:
  level: debug
environment_overrides:
  enabled: true
  prefix: "TEST_ITL_"
  mappings:
    library.sort_tracks_by_id: "SORT_TRACKS_BY_ID"
    parsing.forbid_entities: "FORBID_ENTITIES"
    logging.level: "LOG_LEVEL"
"""


class TestConfigurationManager(unittest.TestCase):
    """Test the ConfigurationManager class"""

    def setUp(self) -> None:
        """Write a temporary config file."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self.temp_dir.name) / "config.yml"
        self.config_path.write_text(CONFIG_YAML, encoding="utf-8")

    def tearDown(self) -> None:
        self.temp_dir.cleanup()
        reset_config()

    def test_load_values(self) -> None:
        config = ConfigurationManager(str(self.config_path))

        self.assertIs(config.get("parsing.strip_control_characters"), False)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(
            config.parsing_options,
            {"strip_control_characters": False, "forbid_entities": True},
        )

    def test_get_default_for_missing_path(self) -> None:
        config = ConfigurationManager(str(self.config_path))

        self.assertEqual(config.get("does.not.exist", "fallback"), "fallback")
        self.assertIsNone(config.get("parsing.strip_control_characters.deeper"))

    def test_get_type_hint(self) -> None:
        config = ConfigurationManager(str(self.config_path))
        self.assertEqual(config.get("logging.level", type_hint=str), "debug")
        self.assertIs(config.get("library.sort_tracks_by_id", type_hint=bool), True)

    def test_get_type_hint_quoted_values(self) -> None:
        self.config_path.write_text(
            'library:\n  sort_tracks_by_id: "false"\n'
            'parsing:\n  forbid_entities: "no"\n  limit: "12"\n',
            encoding="utf-8",
        )
        config = ConfigurationManager(str(self.config_path))

        self.assertIs(config.get("library.sort_tracks_by_id", type_hint=bool), False)
        self.assertIs(config.library_options["sort_tracks_by_id"], False)
        self.assertIs(config.parsing_options["forbid_entities"], False)
        self.assertEqual(config.get("parsing.limit", type_hint=int), 12)
        self.assertEqual(config.get("parsing.limit", type_hint=str), "12")

    def test_get_section(self) -> None:
        config = ConfigurationManager(str(self.config_path))
        self.assertEqual(
            config.get_section("library"),
            {"sort_tracks_by_id": True, "keep_snapshot_on_reload_failure": True},
        )
        self.assertEqual(config.get_section("missing"), {})

    def test_missing_file_uses_defaults(self) -> None:
        config = ConfigurationManager(str(Path(self.temp_dir.name) / "missing.yml"))

        self.assertEqual(
            config.library_options,
            {"sort_tracks_by_id": True, "keep_snapshot_on_reload_failure": True},
        )
        self.assertEqual(config.log_level, "INFO")

    def test_invalid_yaml_uses_defaults(self) -> None:
        self.config_path.write_text("parsing: [unclosed", encoding="utf-8")

        config = ConfigurationManager(str(self.config_path))

        self.assertEqual(config.get_section("parsing"), {})
        self.assertIs(config.parsing_options["strip_control_characters"], True)

    def test_environment_overrides(self) -> None:
        env = {
            "TEST_ITL_SORT_TRACKS_BY_ID": "false",
            "TEST_ITL_FORBID_ENTITIES": "no",
            "TEST_ITL_LOG_LEVEL": "warning",
        }
        with patch.dict(os.environ, env):
            config = ConfigurationManager(str(self.config_path))

        self.assertIs(config.library_options["sort_tracks_by_id"], False)
        self.assertIs(config.parsing_options["forbid_entities"], False)
        self.assertEqual(config.log_level, "WARNING")

    def test_environment_override_numbers(self) -> None:
        config = ConfigurationManager(str(self.config_path))
        self.assertEqual(config._convert_env_value("42"), 42)
        self.assertEqual(config._convert_env_value("0.5"), 0.5)
        self.assertEqual(config._convert_env_value("text"), "text")

    def test_reload(self) -> None:
        config = ConfigurationManager(str(self.config_path))
        self.config_path.write_text("logging:\n  level: error\n", encoding="utf-8")

        config.reload()

        self.assertEqual(config.log_level, "ERROR")


class TestGlobalConfig(unittest.TestCase):
    """Test the global configuration accessors"""

    def setUp(self) -> None:
        reset_config()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.config_path = Path(self.temp_dir.name) / "config.yml"
        self.config_path.write_text("logging:\n  level: info\n", encoding="utf-8")

    def tearDown(self) -> None:
        reset_config()
        self.temp_dir.cleanup()

    def test_get_config_singleton(self) -> None:
        first = get_config(str(self.config_path))
        second = get_config()

        self.assertIs(first, second)
        self.assertEqual(first.config_path, str(self.config_path))

    def test_reset_config(self) -> None:
        first = get_config(str(self.config_path))
        reset_config()
        self.assertIsNot(first, get_config(str(self.config_path)))

    def test_reload_config(self) -> None:
        config = get_config(str(self.config_path))
        self.config_path.write_text("logging:\n  level: debug\n", encoding="utf-8")

        reload_config()

        self.assertEqual(config.log_level, "DEBUG")


if __name__ == "__main__":
    unittest.main()
