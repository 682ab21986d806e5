"""Logging bootstrap utilities with optional structured output."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import json
import logging
import os
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

APP_LOGGER_PREFIX = "hover_chat"

# Epoch used to convert LogRecord.created (POSIX float) to UTC datetime.
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_STANDARD_LOG_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

_NOISY_LIBRARIES = ("httpx", "httpcore", "ollama")


class JsonFormatter(logging.Formatter):
    """Emit JSON lines; ``extra`` fields become top-level keys."""

    def format(self, record: logging.LogRecord) -> str:
        ts = (_EPOCH + timedelta(seconds=record.created)).isoformat()
        data: dict[str, Any] = {
            "ts": ts,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _STANDARD_LOG_ATTRS:
                continue
            data[key] = value
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"), default=str)


def _app_only_filter(record: logging.LogRecord) -> bool:
    return record.name.startswith(APP_LOGGER_PREFIX)


def _best_effort_private_permissions(path: Path) -> None:
    if os.name != "posix":
        return
    try:
        path.chmod(0o600)
    except OSError:
        logging.getLogger(__name__).warning(
            "Unable to enforce 0600 permissions for %s", path
        )


def configure_logging(logging_config: dict[str, Any]) -> None:
    """Configure root logging from the [logging] config section.

    The console only shows hover_chat records at WARNING or above so log
    lines do not interleave with the chat transcript; the optional file
    handler receives everything at the configured level.
    """
    level_name = str(logging_config.get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)
    structured = bool(logging_config.get("structured", True))
    log_to_file = bool(logging_config.get("log_to_file", False))
    log_file_path = str(
        logging_config.get("log_file_path", "~/.local/state/hover-chat/app.log")
    )

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    for logger_name in _NOISY_LIBRARIES:
        library_logger = logging.getLogger(logger_name)
        library_logger.setLevel(logging.WARNING)
        library_logger.propagate = True

    formatter: logging.Formatter
    console_handler: logging.Handler
    if structured:
        formatter = JsonFormatter()
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
        console_handler = RichHandler(
            console=Console(stderr=True), show_path=False, markup=False
        )
        console_handler.setFormatter(logging.Formatter("%(name)s %(message)s"))
    console_handler.setLevel(max(level, logging.WARNING))
    console_handler.addFilter(_app_only_filter)
    root.addHandler(console_handler)

    if log_to_file:
        target = Path(log_file_path).expanduser()
        target.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(target, encoding="utf-8")
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        root.addHandler(file_handler)
        _best_effort_private_permissions(target)
