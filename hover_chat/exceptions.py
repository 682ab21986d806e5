"""Domain exception hierarchy for the hover chat session."""

from __future__ import annotations


class HoverChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class ConfigValidationError(HoverChatError):
    """Raised when configuration cannot be validated safely."""


class AttachmentError(HoverChatError):
    """Base class for pending-attachment failures."""


class CapacityExceededError(AttachmentError):
    """Raised when an attachment is added to a full store."""


class DuplicateAttachmentError(AttachmentError):
    """Raised when an attachment id is already pending."""


class AttachmentNotFoundError(AttachmentError):
    """Raised when removing an attachment id that is not pending."""


class CaptureFailedError(AttachmentError):
    """Raised when a capture did not produce both an id and a preview."""


class AttachmentDeleteError(AttachmentError):
    """Raised when the bridge could not delete a captured attachment."""


class SessionError(HoverChatError):
    """Base class for rejected send requests."""


class EmptyRequestError(SessionError):
    """Raised when a send carries neither text nor attachments."""


class AlreadyInFlightError(SessionError):
    """Raised when a send is issued while another one has not settled."""


class DispatchError(HoverChatError):
    """Raised when the backend call fails; ``reason`` is shown to the user."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class BackendConnectionError(DispatchError):
    """Raised when the backend host cannot be reached."""


class ModelNotFoundError(DispatchError):
    """Raised when the configured model is unavailable."""
