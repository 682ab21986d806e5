"""Local capability bridge: staged screenshots plus an Ollama text backend."""

from __future__ import annotations

import asyncio
import base64
from collections.abc import Callable, Sequence
import logging
import mimetypes
from pathlib import Path
import shutil
from typing import Any
import uuid

import httpx
from ollama import AsyncClient

from .bridge import DispatchResult
from .events import Event, EventBus, Subscription
from .exceptions import (
    AttachmentDeleteError,
    BackendConnectionError,
    DispatchError,
    ModelNotFoundError,
)

LOGGER = logging.getLogger(__name__)

CAPTURED_EVENT = "attachment.captured"

# Image file extensions accepted as screenshots
IMAGE_EXTENSIONS: frozenset[str] = frozenset(
    {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".tif"}
)


def validate_image(path: str, *, max_bytes: int) -> tuple[bool, str, Path | None]:
    """Validate image path, size, and type.

    Returns:
        Tuple of (success, error_message, resolved_path)
    """
    try:
        resolved = Path(path).expanduser().resolve()
        if not resolved.exists():
            return False, f"Image not found: {path}", None
        if not resolved.is_file():
            return False, f"Not a file: {path}", None
        if resolved.suffix.lower() not in IMAGE_EXTENSIONS:
            exts = ", ".join(sorted(IMAGE_EXTENSIONS))
            return False, f"Invalid image type. Allowed: {exts}", None
        if resolved.stat().st_size > max_bytes:
            max_mb = max_bytes / (1024 * 1024)
            return False, f"Image too large (max {max_mb:.1f}MB)", None
        return True, "", resolved
    except OSError as exc:
        return False, f"Error validating image: {exc}", None


def build_preview(path: Path) -> str:
    """Encode an image file as a ``data:`` URI for thumbnails."""
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class LocalBridge:
    """``CaptureBridge`` for a terminal host.

    Captures copy an existing image into ``staging_dir`` under a unique
    name; the staged path is the attachment id and is what gets sent to the
    model. Replies come from a non-streaming Ollama chat call.
    """

    def __init__(
        self,
        host: str,
        model: str,
        staging_dir: str | Path,
        system_prompt: str = "",
        timeout: int = 120,
        retries: int = 2,
        retry_backoff_seconds: float = 0.5,
        max_image_bytes: int = 10 * 1024 * 1024,
        client: Any | None = None,
        on_open_settings: Callable[[], None] | None = None,
        on_layout_change: Callable[[int, int], None] | None = None,
    ) -> None:
        self.host = host
        self.model = model
        self.system_prompt = system_prompt.strip()
        self.retries = retries
        self.retry_backoff_seconds = retry_backoff_seconds
        self.max_image_bytes = max_image_bytes
        self.staging_dir = Path(staging_dir).expanduser()
        self.events = EventBus()
        self._on_open_settings = on_open_settings
        self._on_layout_change = on_layout_change
        self._client = (
            client if client is not None else AsyncClient(host=host, timeout=timeout)
        )

    @classmethod
    def from_config(cls, config: dict[str, Any], **kwargs: Any) -> LocalBridge:
        """Build a bridge from the [backend] and [attachments] config sections."""
        backend = config.get("backend", {})
        attachments = config.get("attachments", {})
        return cls(
            host=str(backend.get("host", "http://localhost:11434")),
            model=str(backend.get("model", "llava")),
            staging_dir=str(attachments.get("staging_dir", "~/.cache/hover-chat/screenshots")),
            system_prompt=str(backend.get("system_prompt", "")),
            timeout=int(backend.get("timeout", 120)),
            retries=int(backend.get("retries", 2)),
            retry_backoff_seconds=float(backend.get("retry_backoff_seconds", 0.5)),
            max_image_bytes=int(attachments.get("max_image_bytes", 10 * 1024 * 1024)),
            **kwargs,
        )

    # -- capture -----------------------------------------------------------

    def on_captured(self, handler: Callable[[Event], Any]) -> Subscription:
        return self.events.subscribe(CAPTURED_EVENT, handler)

    async def trigger_capture(self, source: str | None = None) -> None:
        """Stage ``source`` and publish the captured attachment.

        Validation problems are reported as an event without id/preview;
        filesystem errors while staging propagate to the caller.
        """
        if not source:
            await self._publish_failure("No image selected.")
            return
        ok, message, resolved = validate_image(source, max_bytes=self.max_image_bytes)
        if not ok or resolved is None:
            LOGGER.warning(
                "bridge.capture.invalid",
                extra={"event": "bridge.capture.invalid", "path": source},
            )
            await self._publish_failure(message)
            return

        self.staging_dir.mkdir(parents=True, exist_ok=True)
        staged = self.staging_dir / f"{uuid.uuid4().hex}{resolved.suffix.lower()}"
        await asyncio.to_thread(shutil.copy2, resolved, staged)
        preview = await asyncio.to_thread(build_preview, staged)
        LOGGER.info(
            "bridge.capture.staged",
            extra={"event": "bridge.capture.staged", "path": str(staged)},
        )
        await self.events.publish(
            CAPTURED_EVENT, {"id": str(staged), "preview": preview}, source="local"
        )

    async def _publish_failure(self, message: str) -> None:
        await self.events.publish(CAPTURED_EVENT, {"error": message}, source="local")

    async def delete_attachment(self, attachment_id: str) -> None:
        """Delete a staged screenshot; ids outside the staging dir are refused."""
        target = Path(attachment_id).expanduser().resolve()
        if not target.is_relative_to(self.staging_dir.resolve()):
            raise AttachmentDeleteError(f"Not a staged screenshot: {attachment_id}")
        try:
            target.unlink()
        except FileNotFoundError as exc:
            raise AttachmentDeleteError(f"Screenshot already gone: {attachment_id}") from exc
        except OSError as exc:
            raise AttachmentDeleteError(str(exc)) from exc
        LOGGER.info(
            "bridge.capture.deleted",
            extra={"event": "bridge.capture.deleted", "path": str(target)},
        )

    # -- dispatch ----------------------------------------------------------

    def _build_messages(
        self, text: str, attachment_ids: Sequence[str]
    ) -> list[dict[str, Any]]:
        messages: list[dict[str, Any]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        user_msg: dict[str, Any] = {"role": "user", "content": text}
        if attachment_ids:
            user_msg["images"] = list(attachment_ids)
        messages.append(user_msg)
        return messages

    @staticmethod
    def _extract_content(response: Any) -> str:
        """Pull ``message.content`` from an SDK object or a plain dict."""
        message_obj = getattr(response, "message", None)
        if message_obj is not None:
            value = getattr(message_obj, "content", None)
            if isinstance(value, str):
                return value
        if hasattr(response, "model_dump"):
            try:
                response = response.model_dump()
            except Exception:  # noqa: BLE001 - unreadable SDK object means no content.
                response = {}
        if isinstance(response, dict):
            message = response.get("message")
            if isinstance(message, dict):
                value = message.get("content")
                if isinstance(value, str):
                    return value
        return ""

    def _map_exception(self, exc: Exception) -> DispatchError:
        if isinstance(exc, DispatchError):
            return exc

        lower_message = str(exc).lower()

        if isinstance(
            exc,
            (
                httpx.ConnectError,
                httpx.ConnectTimeout,
                httpx.ReadTimeout,
                httpx.NetworkError,
            ),
        ):
            return BackendConnectionError(f"Unable to connect to Ollama host {self.host}.")

        if "model" in lower_message and (
            "not found" in lower_message or "404" in lower_message
        ):
            return ModelNotFoundError(f"Model {self.model!r} was not found on {self.host}.")

        return DispatchError(f"Request to {self.host} failed: {exc}")

    async def dispatch_prompt(
        self, text: str, attachment_ids: Sequence[str]
    ) -> DispatchResult:
        """Send the prompt and images; transient failures are retried."""
        messages = self._build_messages(text, attachment_ids)
        for attempt in range(self.retries + 1):
            try:
                response = await self._client.chat(
                    model=self.model, messages=messages, stream=False
                )
                content = self._extract_content(response).strip()
                if not content:
                    return DispatchResult(success=False, error="Empty response from model.")
                return DispatchResult(success=True, data=content)
            except asyncio.CancelledError:
                LOGGER.info(
                    "bridge.request.cancelled",
                    extra={"event": "bridge.request.cancelled"},
                )
                raise
            except Exception as exc:  # noqa: BLE001 - external API can fail in many ways.
                mapped_exc = self._map_exception(exc)
                LOGGER.warning(
                    "bridge.request.retry",
                    extra={
                        "event": "bridge.request.retry",
                        "attempt": attempt + 1,
                        "error_type": mapped_exc.__class__.__name__,
                    },
                )
                if isinstance(mapped_exc, ModelNotFoundError) or attempt >= self.retries:
                    return DispatchResult(success=False, error=mapped_exc.reason)
                await asyncio.sleep(self.retry_backoff_seconds * (attempt + 1))
        return DispatchResult(success=False, error="Unknown error")

    # -- host chrome -------------------------------------------------------

    def open_settings(self) -> None:
        LOGGER.info("bridge.settings.open", extra={"event": "bridge.settings.open"})
        if self._on_open_settings is not None:
            self._on_open_settings()

    def notify_layout_change(self, width: int, height: int) -> None:
        LOGGER.debug(
            "bridge.layout.changed",
            extra={"event": "bridge.layout.changed", "width": width, "height": height},
        )
        if self._on_layout_change is not None:
            self._on_layout_change(width, height)
