"""Unit tests for the command-line entry point."""

import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import json
import shutil
import tempfile
import unittest
from unittest.mock import patch

import yaml

from tududi_inbox.main import main


class TestMain(unittest.TestCase):
    """Argument handling and output modes."""

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.tmp_dir, "config.yaml")
        self.env_path = os.path.join(self.tmp_dir, ".env")
        with open(self.config_path, "w") as f:
            yaml.safe_dump(
                {"logging": {"audit_enabled": False, "log_dir": os.path.join(self.tmp_dir, "logs")}},
                f,
            )
        self.env = patch.dict(os.environ, {}, clear=False)
        self.env.start()
        os.environ.pop("INBOX_AUDIT_ENABLED", None)

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.tmp_dir)

    def _run(self, *args):
        argv = ["--config", self.config_path, "--env", self.env_path, *args]
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            main(argv)
        return out.getvalue()

    def test_json_output_one_line_per_item(self):
        output = self._run("--json", "--no-project", "https://example.com", "What now?")
        lines = [json.loads(line) for line in output.splitlines()]
        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[0]["item"], "https://example.com")
        self.assertEqual(lines[0]["category"], "bookmark")
        self.assertEqual(lines[1]["rule_name"], "question-note")

    def test_project_flag(self):
        output = self._run("--json", "--project", "Fix the login bug")
        self.assertEqual(json.loads(output)["rule_name"], "verb-with-project-task")

    def test_reads_stdin_when_no_text(self):
        with patch("sys.stdin", io.StringIO("URGENT: call the bank\n\n")):
            output = self._run("--json")
        lines = output.splitlines()
        self.assertEqual(len(lines), 1)
        self.assertEqual(json.loads(lines[0])["rule_name"], "urgent-high-priority")

    def test_list_rules(self):
        output = self._run("--list-rules")
        self.assertIn("urgent-high-priority", output)
        self.assertIn("question-note", output)

    def test_missing_config_exits(self):
        with patch("sys.stderr", new_callable=io.StringIO):
            with self.assertRaises(SystemExit) as ctx:
                main(["--config", os.path.join(self.tmp_dir, "nope.yaml")])
        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
