"""Contracts for the host collaborators the chat session depends on.

The session never captures screens or talks to the network itself. A host
injects a ``CaptureBridge`` and a ``Notifier`` at construction so tests can
substitute fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from .attachments import Attachment
from .events import Event, Subscription
from .exceptions import CaptureFailedError


class Severity(str, Enum):
    """Notification severity understood by hosts."""

    ERROR = "error"
    NEUTRAL = "neutral"
    INFO = "info"


class Notifier(Protocol):
    """Fire-and-forget user notifications (toasts, status lines)."""

    def notify(self, title: str, message: str, severity: Severity) -> None: ...


@dataclass(frozen=True)
class CaptureEvent:
    """Outcome of a capture; a missing id or preview signals failure."""

    id: str | None = None
    preview: str | None = None
    error: str = ""

    @property
    def is_complete(self) -> bool:
        return bool(self.id) and bool(self.preview)

    @classmethod
    def from_event(cls, event: Event) -> CaptureEvent:
        data = event.data
        return cls(
            id=data.get("id") or None,
            preview=data.get("preview") or None,
            error=str(data.get("error") or ""),
        )

    def to_attachment(self) -> Attachment:
        """Return the pending attachment, or raise ``CaptureFailedError``."""
        if not self.id or not self.preview:
            message = "Screenshot capture failed."
            if self.error:
                message = f"{message} {self.error}"
            raise CaptureFailedError(message)
        return Attachment(id=self.id, preview=self.preview)


@dataclass(frozen=True)
class DispatchResult:
    """Settled backend reply: ``data`` on success, ``error`` otherwise."""

    success: bool
    data: str = ""
    error: str = ""

    @classmethod
    def from_payload(cls, payload: DispatchResult | Mapping[str, Any]) -> DispatchResult:
        """Accept either a result object or a ``{success, data, error}`` mapping."""
        if isinstance(payload, DispatchResult):
            return payload
        if not isinstance(payload, Mapping):
            return cls(success=False, error="Malformed response from backend.")
        return cls(
            success=bool(payload.get("success")),
            data=str(payload.get("data") or ""),
            error=str(payload.get("error") or ""),
        )


class CaptureBridge(Protocol):
    """Host capabilities consumed by the session."""

    async def trigger_capture(self, source: str | None = None) -> None:
        """Start a capture; the result arrives through ``on_captured``."""
        ...

    def on_captured(self, handler: Callable[[Event], Any]) -> Subscription: ...

    async def delete_attachment(self, attachment_id: str) -> None: ...

    async def dispatch_prompt(
        self, text: str, attachment_ids: Sequence[str]
    ) -> DispatchResult | Mapping[str, Any]: ...

    def open_settings(self) -> None: ...

    def notify_layout_change(self, width: int, height: int) -> None: ...
