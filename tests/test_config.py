"""Tests for configuration loading and validation."""

from __future__ import annotations

import tempfile
from pathlib import Path
import unittest

from hover_chat.config import DEFAULT_CONFIG, ClearPolicy, load_config


class ConfigTests(unittest.TestCase):
    """Validate config merge and fallback behavior."""

    def _load(self, text: str | None) -> dict:
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = Path(temp_dir) / "config.toml"
            if text is not None:
                config_path.write_text(text.strip(), encoding="utf-8")
            return load_config(config_path=config_path)

    def test_missing_config_uses_defaults(self) -> None:
        config = self._load(None)
        self.assertEqual(config, DEFAULT_CONFIG)
        self.assertEqual(config["app"]["title"], "LLM Hover Window")
        self.assertEqual(config["attachments"]["max_pending"], 5)
        self.assertEqual(config["attachments"]["clear_policy"], "on_dispatch")
        self.assertFalse(config["security"]["allow_remote_hosts"])

    def test_partial_config_overrides_selected_values(self) -> None:
        config = self._load(
            """
[backend]
model = "bakllava"
retries = 0

[attachments]
max_pending = 3
clear_policy = "on_success"
            """
        )
        self.assertEqual(config["backend"]["model"], "bakllava")
        self.assertEqual(config["backend"]["retries"], 0)
        self.assertEqual(config["attachments"]["max_pending"], 3)
        self.assertEqual(
            ClearPolicy(config["attachments"]["clear_policy"]), ClearPolicy.ON_SUCCESS
        )
        self.assertEqual(config["backend"]["host"], DEFAULT_CONFIG["backend"]["host"])
        self.assertEqual(config["app"]["title"], DEFAULT_CONFIG["app"]["title"])

    def test_invalid_values_fallback_to_defaults(self) -> None:
        config = self._load(
            """
[backend]
timeout = -1

[attachments]
max_pending = 9
clear_policy = "never"
            """
        )
        self.assertEqual(config["backend"]["timeout"], DEFAULT_CONFIG["backend"]["timeout"])
        self.assertEqual(config["attachments"]["max_pending"], 5)
        self.assertEqual(config["attachments"]["clear_policy"], "on_dispatch")

    def test_unparseable_toml_falls_back_to_defaults(self) -> None:
        config = self._load("[backend\nmodel = ")
        self.assertEqual(config, DEFAULT_CONFIG)

    def test_remote_host_disallowed_by_default_policy(self) -> None:
        config = self._load(
            """
[backend]
host = "http://example.com:11434"
            """
        )
        self.assertEqual(config["backend"]["host"], DEFAULT_CONFIG["backend"]["host"])

    def test_remote_host_allowed_when_policy_enabled(self) -> None:
        config = self._load(
            """
[backend]
host = "http://example.com:11434"

[security]
allow_remote_hosts = true
            """
        )
        self.assertEqual(config["backend"]["host"], "http://example.com:11434")
        self.assertTrue(config["security"]["allow_remote_hosts"])

    def test_system_prompt_is_trimmed(self) -> None:
        config = self._load(
            """
[backend]
system_prompt = "  Describe screenshots briefly.  "
            """
        )
        self.assertEqual(
            config["backend"]["system_prompt"], "Describe screenshots briefly."
        )


if __name__ == "__main__":
    unittest.main()
