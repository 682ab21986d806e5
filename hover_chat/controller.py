"""One-at-a-time prompt dispatch for a chat session."""

from __future__ import annotations

from collections.abc import Callable, Iterable
import logging

from .attachments import Attachment
from .bridge import CaptureBridge, DispatchResult, Notifier, Severity
from .conversation import ConversationLog, Message, Sender
from .exceptions import DispatchError, EmptyRequestError
from .state import SessionState, StateManager

LOGGER = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error"


class SessionController:
    """Validate a send, record both turns in the log, and keep one send in flight.

    The user turn is appended before the backend call suspends; the assistant
    turn (or an error-bearing one) is appended once it settles. Dispatch
    failures never escape: they become history entries plus a notification.
    """

    def __init__(
        self,
        bridge: CaptureBridge,
        notifier: Notifier,
        log: ConversationLog | None = None,
        state: StateManager | None = None,
    ) -> None:
        self.bridge = bridge
        self.notifier = notifier
        self.log = log if log is not None else ConversationLog()
        self.state = state if state is not None else StateManager()

    @property
    def session_state(self) -> SessionState:
        return self.state.state

    @property
    def is_sending(self) -> bool:
        return self.state.is_sending

    async def send(
        self,
        prompt: str,
        attachments: Iterable[Attachment] = (),
        *,
        on_accepted: Callable[[], None] | None = None,
    ) -> Message:
        """Send ``prompt`` with an attachment snapshot and return the reply message.

        ``on_accepted`` runs once the request passed validation and the user
        turn was recorded, before the backend is called. Raises
        ``EmptyRequestError`` or ``AlreadyInFlightError`` without touching
        the log.
        """
        text = prompt.strip()
        snapshot = tuple(attachments)
        if not text and not snapshot:
            raise EmptyRequestError("Cannot send an empty message.")

        async with self.state.sending():
            self.log.append(Message(Sender.USER, text, snapshot))
            if on_accepted is not None:
                on_accepted()
            reply = await self._dispatch(text, [item.id for item in snapshot])
            self.log.append(reply)
            return reply

    async def _dispatch(self, text: str, attachment_ids: list[str]) -> Message:
        LOGGER.info(
            "session.dispatch.start",
            extra={
                "event": "session.dispatch.start",
                "attachments": len(attachment_ids),
            },
        )
        try:
            payload = await self.bridge.dispatch_prompt(text, attachment_ids)
            result = DispatchResult.from_payload(payload)
        except DispatchError as exc:
            reason = exc.reason or UNKNOWN_ERROR
        except Exception as exc:  # noqa: BLE001 - bridge faults must not escape the session.
            reason = str(exc) or exc.__class__.__name__
        else:
            if result.success and result.data:
                LOGGER.info(
                    "session.dispatch.complete",
                    extra={"event": "session.dispatch.complete"},
                )
                return Message(Sender.ASSISTANT, result.data)
            reason = result.error or UNKNOWN_ERROR

        LOGGER.warning(
            "session.dispatch.failed",
            extra={"event": "session.dispatch.failed", "reason": reason},
        )
        self.notifier.notify("Error", reason, Severity.ERROR)
        return Message(Sender.ASSISTANT, f"Error: {reason}", error=reason)
