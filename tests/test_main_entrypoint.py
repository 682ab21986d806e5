"""Tests for CLI entrypoint wiring."""

from __future__ import annotations

import contextlib
import io
from pathlib import Path
import unittest
from unittest.mock import patch

from hover_chat.__main__ import main
from hover_chat.config import DEFAULT_CONFIG


class MainEntrypointTests(unittest.TestCase):
    """Validate top-level main() behavior."""

    def test_version_flag_prints_and_exits(self) -> None:
        out = io.StringIO()
        with patch("hover_chat.__main__.load_config") as load_mock, contextlib.redirect_stdout(out):
            main(["--version"])
        self.assertTrue(out.getvalue().startswith("hover-chat "))
        load_mock.assert_not_called()

    def test_main_ensures_config_and_runs_host(self) -> None:
        with patch("hover_chat.__main__.ensure_config_dir") as ensure_mock, patch(
            "hover_chat.__main__.load_config", return_value=DEFAULT_CONFIG
        ) as load_mock, patch("hover_chat.__main__.configure_logging"), patch(
            "hover_chat.__main__.Console"
        ), patch("hover_chat.__main__.LocalBridge") as bridge_cls, patch(
            "hover_chat.__main__.ChatSession"
        ) as session_cls, patch(
            "hover_chat.__main__.ConsoleHost"
        ) as host_cls, patch("hover_chat.__main__.asyncio.run") as run_mock:
            main([])
            ensure_mock.assert_called_once()
            load_mock.assert_called_once_with(config_path=None)
            bridge_cls.from_config.assert_called_once()
            session_cls.from_config.assert_called_once()
            host_cls.assert_called_once()
            run_mock.assert_called_once_with(host_cls.return_value.run.return_value)

    def test_explicit_config_path_skips_default_dir(self) -> None:
        with patch("hover_chat.__main__.ensure_config_dir") as ensure_mock, patch(
            "hover_chat.__main__.load_config", return_value=DEFAULT_CONFIG
        ) as load_mock, patch("hover_chat.__main__.configure_logging"), patch(
            "hover_chat.__main__.Console"
        ), patch("hover_chat.__main__.LocalBridge"), patch(
            "hover_chat.__main__.ChatSession"
        ), patch("hover_chat.__main__.ConsoleHost"), patch(
            "hover_chat.__main__.asyncio.run"
        ):
            main(["--config", "/tmp/custom.toml"])
            ensure_mock.assert_not_called()
            load_mock.assert_called_once_with(config_path=Path("/tmp/custom.toml"))


if __name__ == "__main__":
    unittest.main()
