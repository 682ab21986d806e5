"""Chat session wiring: pending attachments, history, and the send controller."""

from __future__ import annotations

import logging
from typing import Any

from .attachments import AttachmentStore
from .bridge import CaptureBridge, CaptureEvent, Notifier, Severity
from .config import ClearPolicy
from .controller import SessionController
from .conversation import ConversationLog, HistoryView, Message
from .events import Event, Subscription
from .exceptions import (
    AlreadyInFlightError,
    CapacityExceededError,
    CaptureFailedError,
    DuplicateAttachmentError,
    EmptyRequestError,
)

LOGGER = logging.getLogger(__name__)


class ChatSession:
    """Own the attachment store and conversation log for one chat window.

    Responsibilities:
    - Gating capture requests on store capacity
    - Adding captured screenshots and surfacing capture failures
    - Deleting pending screenshots through the bridge
    - Submitting prompts and releasing attachments per ``clear_policy``
    """

    def __init__(
        self,
        bridge: CaptureBridge,
        notifier: Notifier,
        *,
        max_pending: int | None = None,
        clear_policy: ClearPolicy = ClearPolicy.ON_DISPATCH,
    ) -> None:
        self.bridge = bridge
        self.notifier = notifier
        self.clear_policy = ClearPolicy(clear_policy)
        self.attachments = (
            AttachmentStore(max_pending) if max_pending is not None else AttachmentStore()
        )
        self.log = ConversationLog()
        self.controller = SessionController(bridge, notifier, log=self.log)
        self._subscription: Subscription | None = None

    @classmethod
    def from_config(
        cls, config: dict[str, Any], bridge: CaptureBridge, notifier: Notifier
    ) -> ChatSession:
        """Build a session from the [attachments] config section."""
        section = config.get("attachments", {})
        return cls(
            bridge,
            notifier,
            max_pending=int(section.get("max_pending", 5)),
            clear_policy=ClearPolicy(section.get("clear_policy", ClearPolicy.ON_DISPATCH)),
        )

    # -- lifecycle ---------------------------------------------------------

    def open(self) -> ChatSession:
        """Start listening for capture results."""
        if self._subscription is None:
            self._subscription = self.bridge.on_captured(self._on_captured)
        return self

    def close(self) -> None:
        """Stop listening for capture results."""
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def __enter__(self) -> ChatSession:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_sending(self) -> bool:
        return self.controller.is_sending

    def history(self) -> HistoryView:
        """Return the conversation as a read-only chronological view."""
        return self.log.all()

    # -- attachments -------------------------------------------------------

    async def request_capture(self, source: str | None = None) -> bool:
        """Ask the bridge for a screenshot unless the store is already full."""
        if self.attachments.is_full:
            self.notifier.notify(
                "Limit Reached",
                f"You can attach up to {self.attachments.capacity} screenshots.",
                Severity.NEUTRAL,
            )
            return False
        try:
            await self.bridge.trigger_capture(source)
        except Exception as exc:  # noqa: BLE001 - host capture can fail in many ways.
            LOGGER.warning(
                "session.capture.failed",
                extra={"event": "session.capture.failed", "error": str(exc)},
            )
            self.notifier.notify(
                "Error", f"Failed to take screenshot: {exc}", Severity.ERROR
            )
            return False
        return True

    def _on_captured(self, event: Event) -> None:
        captured = CaptureEvent.from_event(event)
        try:
            count = self.attachments.add(captured.to_attachment())
        except CaptureFailedError as exc:
            LOGGER.warning(
                "session.capture.incomplete",
                extra={"event": "session.capture.incomplete", "error": captured.error},
            )
            self.notifier.notify("Error", str(exc), Severity.ERROR)
            return
        except CapacityExceededError as exc:
            self.notifier.notify("Limit Reached", str(exc), Severity.NEUTRAL)
            return
        except DuplicateAttachmentError:
            LOGGER.warning(
                "session.capture.duplicate",
                extra={"event": "session.capture.duplicate", "id": captured.id},
            )
            return
        LOGGER.info(
            "session.capture.added",
            extra={"event": "session.capture.added", "pending": count},
        )

    async def delete_attachment(self, attachment_id: str) -> bool:
        """Delete a pending screenshot; the entry stays if the bridge refuses."""
        if attachment_id not in self.attachments:
            self.notifier.notify(
                "Error", f"No pending screenshot: {attachment_id}", Severity.ERROR
            )
            return False
        try:
            await self.bridge.delete_attachment(attachment_id)
        except Exception as exc:  # noqa: BLE001 - bridge faults are reported, not raised.
            self.notifier.notify(
                "Error", f"Failed to delete image: {exc}", Severity.ERROR
            )
            return False
        # A send may have released the entry while the bridge was deleting.
        if attachment_id not in self.attachments:
            LOGGER.info(
                "session.attachment.already_released",
                extra={"event": "session.attachment.already_released", "id": attachment_id},
            )
            return False
        return self.attachments.remove(attachment_id)

    def clear_attachments(self) -> None:
        """Drop every pending screenshot without deleting the staged files."""
        self.attachments.clear()

    # -- sending -----------------------------------------------------------

    async def submit(self, text: str) -> Message | None:
        """Send ``text`` with the pending screenshots; return the reply message.

        Returns None when the request was rejected (empty or busy).
        """
        snapshot = self.attachments.snapshot()
        on_accepted = (
            self.attachments.clear
            if self.clear_policy == ClearPolicy.ON_DISPATCH
            else None
        )
        try:
            reply = await self.controller.send(text, snapshot, on_accepted=on_accepted)
        except EmptyRequestError:
            return None
        except AlreadyInFlightError as exc:
            self.notifier.notify("Busy", str(exc), Severity.NEUTRAL)
            return None

        if self.clear_policy == ClearPolicy.ON_SUCCESS and not reply.is_error:
            for item in snapshot:
                if item.id in self.attachments:
                    self.attachments.remove(item.id)
        return reply

    def open_settings(self) -> None:
        self.bridge.open_settings()
