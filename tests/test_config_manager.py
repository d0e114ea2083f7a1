"""Unit tests for the Configuration Manager."""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import shutil
import tempfile
import unittest
from unittest.mock import patch

import yaml

from tududi_inbox.core.errors import ConfigurationError
from tududi_inbox.core.rule_modules import DEFAULT_RULES
from tududi_inbox.utils.config_manager import ConfigManager, EngineConfig


ENV_KEYS = (
    "INBOX_LONG_TEXT_THRESHOLD",
    "INBOX_TIMEZONE",
    "INBOX_AUDIT_ENABLED",
    "INBOX_LOG_LEVEL",
)


class TestConfigManager(unittest.TestCase):
    """Loading config.yaml with environment overrides."""

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.tmp_dir, "config.yaml")
        self.env_path = os.path.join(self.tmp_dir, ".env")
        self.env = patch.dict(os.environ, {}, clear=False)
        self.env.start()
        for key in ENV_KEYS:
            os.environ.pop(key, None)

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.tmp_dir)

    def _write(self, data):
        with open(self.config_path, "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                yaml.safe_dump(data, f)

    def _load(self):
        return ConfigManager(config_path=self.config_path, env_path=self.env_path).load()

    def test_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            self._load()

    def test_defaults_when_sections_missing(self):
        self._write({"engine": {"long_text_threshold": 20}})
        config = self._load()
        self.assertEqual(config.engine.long_text_threshold, 20)
        self.assertIsNone(config.engine.timezone)
        self.assertTrue(config.logging.audit_enabled)
        self.assertEqual([r.name for r in config.rules], [r["name"] for r in DEFAULT_RULES])

    def test_rules_loaded_in_order(self):
        self._write({
            "rules": [
                {"name": "b", "priority": 1, "conditions": {"is_question": True},
                 "action": {"category": "note"}},
                {"name": "a", "priority": 5, "conditions": {"contains_url": True},
                 "action": {"category": "bookmark"}},
            ]
        })
        config = self._load()
        self.assertEqual([r.name for r in config.rules], ["b", "a"])

    def test_env_overrides_yaml(self):
        self._write({"engine": {"long_text_threshold": 20}, "logging": {"audit_enabled": True}})
        os.environ["INBOX_LONG_TEXT_THRESHOLD"] = "7"
        os.environ["INBOX_AUDIT_ENABLED"] = "false"
        os.environ["INBOX_LOG_LEVEL"] = "DEBUG"
        config = self._load()
        self.assertEqual(config.engine.long_text_threshold, 7)
        self.assertFalse(config.logging.audit_enabled)
        self.assertEqual(config.logging.console_level, "DEBUG")

    def test_dotenv_file_is_read(self):
        self._write({"engine": {}})
        with open(self.env_path, "w") as f:
            f.write("INBOX_LONG_TEXT_THRESHOLD=12\n")
        config = self._load()
        self.assertEqual(config.engine.long_text_threshold, 12)

    def test_empty_file(self):
        self._write("")
        with self.assertRaises(ConfigurationError):
            self._load()

    def test_invalid_yaml(self):
        self._write("rules: [unclosed")
        with self.assertRaises(ConfigurationError):
            self._load()

    def test_collects_every_error(self):
        self._write({
            "engine": {"long_text_threshold": 0, "timezone": "Mars/Olympus"},
            "logging": {"console_level": "LOUD"},
            "rules": [
                {"name": "dup", "priority": 1, "conditions": {"is_question": True},
                 "action": {"category": "note"}},
                {"name": "dup", "priority": 2, "conditions": {"vibes": True},
                 "action": {"category": "note"}},
                {"name": "bare", "priority": 3, "conditions": {},
                 "action": {"category": "note"}},
            ],
        })
        with self.assertRaises(ConfigurationError) as ctx:
            self._load()
        message = str(ctx.exception)
        self.assertIn("long_text_threshold", message)
        self.assertIn("Mars/Olympus", message)
        self.assertIn("console_level", message)
        self.assertIn("Duplicate rule name: 'dup'", message)
        self.assertIn("vibes", message)
        self.assertIn("Rule 'bare' has no conditions", message)

    def test_malformed_rule_fails_fast(self):
        self._write({"rules": [{"name": "x", "priority": "high", "action": {"category": "task"}}]})
        with self.assertRaises(ConfigurationError):
            self._load()

    def test_rules_must_be_a_list(self):
        self._write({"rules": {"name": "x"}})
        with self.assertRaises(ConfigurationError):
            self._load()

    def test_defaults_without_files(self):
        config = ConfigManager.defaults()
        self.assertEqual(len(config.rules), len(DEFAULT_RULES))
        self.assertEqual(config.engine.long_text_threshold, 50)

    def test_engine_config_local_time_by_default(self):
        self.assertIsNone(EngineConfig().tzinfo)


if __name__ == "__main__":
    unittest.main()
