"""Configuration loading and validation for the hover chat session."""

from __future__ import annotations

from copy import deepcopy
from enum import Enum
import logging
import os
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from .attachments import MAX_PENDING_ATTACHMENTS
from .exceptions import ConfigValidationError

import tomllib  # stdlib since Python 3.11 (project requires >=3.11)

LOGGER = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "hover-chat"
CONFIG_PATH = CONFIG_DIR / "config.toml"

VALID_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


def _require_text(value: Any) -> str:
    if not isinstance(value, str):
        raise ValueError("Expected a string value.")
    normalized = value.strip()
    if not normalized:
        raise ValueError("String value must not be empty.")
    return normalized


class ClearPolicy(str, Enum):
    """When pending attachments are released after a send.

    ``on_dispatch`` clears them as soon as the send is accepted, so a failed
    reply loses them. ``on_success`` keeps them until a reply arrives.
    """

    ON_DISPATCH = "on_dispatch"
    ON_SUCCESS = "on_success"


class AppConfig(BaseModel):
    """Application metadata."""

    title: str = "LLM Hover Window"

    @field_validator("title", mode="before")
    @classmethod
    def _validate_title(cls, value: Any) -> str:
        return _require_text(value)


class BackendConfig(BaseModel):
    """Text-generation backend endpoint and request settings."""

    host: str = "http://localhost:11434"
    model: str = "llava"
    timeout: int = Field(default=120, ge=1, le=3600)
    retries: int = Field(default=2, ge=0, le=10)
    retry_backoff_seconds: float = Field(default=0.5, ge=0.0, le=60.0)
    system_prompt: str = "You are a helpful assistant."

    @field_validator("host", "model", mode="before")
    @classmethod
    def _validate_required_string(cls, value: Any) -> str:
        return _require_text(value)

    @field_validator("system_prompt", mode="before")
    @classmethod
    def _normalize_prompt(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Expected a string value.")
        return value.strip()


class SecurityConfig(BaseModel):
    """Security policy for remote host access."""

    allow_remote_hosts: bool = False
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "::1"]

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def _validate_allowed_hosts(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            raise ValueError("allowed_hosts must be a list.")
        normalized_hosts = [
            item.strip().lower()
            for item in value
            if isinstance(item, str) and item.strip()
        ]
        if not normalized_hosts:
            raise ValueError("allowed_hosts must contain at least one host.")
        return normalized_hosts


class AttachmentsConfig(BaseModel):
    """Pending screenshot limits and staging location."""

    max_pending: int = Field(default=MAX_PENDING_ATTACHMENTS, ge=1, le=MAX_PENDING_ATTACHMENTS)
    max_image_bytes: int = Field(default=10 * 1024 * 1024, ge=1024, le=100 * 1024 * 1024)
    staging_dir: str = "~/.cache/hover-chat/screenshots"
    clear_policy: ClearPolicy = ClearPolicy.ON_DISPATCH

    @field_validator("staging_dir", mode="before")
    @classmethod
    def _validate_staging_dir(cls, value: Any) -> str:
        return _require_text(value)


class LoggingConfig(BaseModel):
    """Logging behavior and output destinations."""

    level: str = "INFO"
    structured: bool = True
    log_to_file: bool = False
    log_file_path: str = "~/.local/state/hover-chat/app.log"

    @field_validator("level", mode="before")
    @classmethod
    def _validate_level(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("Logging level must be a string.")
        normalized = value.strip().upper()
        if normalized not in VALID_LOG_LEVELS:
            raise ValueError(f"Unsupported log level {normalized!r}.")
        return normalized

    @field_validator("log_file_path", mode="before")
    @classmethod
    def _validate_log_file_path(cls, value: Any) -> str:
        return _require_text(value)


class Config(BaseModel):
    """Root configuration model for all sections."""

    model_config = ConfigDict(populate_by_name=True)
    app: AppConfig = AppConfig()
    backend: BackendConfig = BackendConfig()
    security: SecurityConfig = SecurityConfig()
    attachments: AttachmentsConfig = AttachmentsConfig()
    logging: LoggingConfig = LoggingConfig()

    @model_validator(mode="after")
    def _validate_security_policy(self) -> Config:
        parsed = urlparse(self.backend.host)
        scheme = parsed.scheme.lower()
        hostname = (parsed.hostname or "").strip().lower()

        if scheme not in {"http", "https"}:
            raise ValueError("backend.host must use http or https scheme.")
        if not hostname:
            raise ValueError("backend.host must include a hostname.")
        if not self.security.allow_remote_hosts and hostname not in set(
            self.security.allowed_hosts
        ):
            raise ValueError(
                "backend.host is not in security.allowed_hosts while allow_remote_hosts is false."
            )
        return self


DEFAULT_CONFIG: dict[str, dict[str, Any]] = Config().model_dump(mode="json")


def ensure_config_dir(config_dir: Path | None = None) -> Path:
    """Ensure that the config directory exists and return its path."""
    directory = config_dir or CONFIG_DIR
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        LOGGER.warning("Unable to create config directory %s: %s", directory, exc)
    return directory


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override values onto base values."""
    merged: dict[str, Any] = deepcopy(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _enforce_private_permissions(path: Path) -> None:
    """Best-effort enforcement of private file permissions on POSIX systems."""
    if os.name != "posix" or not path.exists():
        return
    try:
        path.chmod(0o600)
    except OSError as exc:
        LOGGER.warning("Unable to enforce 0600 permissions for %s: %s", path, exc)


def _validate_config(raw: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Validate merged config and fallback to safe defaults when possible."""
    try:
        return Config.model_validate(raw).model_dump(mode="json")
    except ValidationError as exc:
        LOGGER.warning("Configuration validation failed, using safe defaults: %s", exc)
        return deepcopy(DEFAULT_CONFIG)
    except Exception as exc:  # noqa: BLE001 - unexpected model construction failure.
        raise ConfigValidationError(f"Unable to validate configuration: {exc}") from exc


def load_config(config_path: Path | None = None) -> dict[str, dict[str, Any]]:
    """
    Load configuration from TOML, merge with defaults, and validate.

    The optional ``config_path`` argument is intended for tests and tooling.
    """
    target_path = config_path or CONFIG_PATH
    ensure_config_dir(target_path.parent)

    raw_data: dict[str, Any] = {}
    if target_path.exists():
        _enforce_private_permissions(target_path)
        try:
            raw_data = tomllib.loads(target_path.read_text(encoding="utf-8"))
        except (
            Exception
        ) as exc:  # noqa: BLE001 - we must not crash on invalid user config.
            LOGGER.warning("Failed to parse config at %s: %s", target_path, exc)
            raw_data = {}

    merged = _deep_merge(DEFAULT_CONFIG, raw_data)
    return _validate_config(merged)
