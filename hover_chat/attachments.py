"""Pending image attachments awaiting the next send."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from .exceptions import (
    AttachmentNotFoundError,
    CapacityExceededError,
    DuplicateAttachmentError,
)

LOGGER = logging.getLogger(__name__)

MAX_PENDING_ATTACHMENTS = 5


@dataclass(frozen=True)
class Attachment:
    """A captured image: opaque ``id`` (staged path) plus preview data.

    Two attachments are the same attachment when their ids match.
    """

    id: str
    preview: str = field(compare=False, repr=False)


class AttachmentStore:
    """Ordered, capacity-bounded set of pending attachments."""

    def __init__(self, capacity: int = MAX_PENDING_ATTACHMENTS) -> None:
        self.capacity = min(max(1, capacity), MAX_PENDING_ATTACHMENTS)
        self._items: list[Attachment] = []

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, attachment_id: object) -> bool:
        return any(item.id == attachment_id for item in self._items)

    @property
    def size(self) -> int:
        """Return the number of pending attachments."""
        return len(self._items)

    @property
    def is_full(self) -> bool:
        """Return True when no further attachment can be added."""
        return len(self._items) >= self.capacity

    def ids(self) -> list[str]:
        """Return pending attachment ids in insertion order."""
        return [item.id for item in self._items]

    def add(self, attachment: Attachment) -> int:
        """Append an attachment and return the new size.

        The capacity check happens here, before insertion, so it stays the
        single source of truth even when callers pre-check ``is_full``.
        """
        if self.is_full:
            raise CapacityExceededError(
                f"You can attach up to {self.capacity} screenshots."
            )
        if attachment.id in self:
            raise DuplicateAttachmentError(f"Attachment already pending: {attachment.id}")
        self._items.append(attachment)
        LOGGER.debug(
            "attachments.added",
            extra={"event": "attachments.added", "size": len(self._items)},
        )
        return len(self._items)

    def remove(self, attachment_id: str) -> bool:
        """Remove the attachment with ``attachment_id``, keeping the others in order."""
        for index, item in enumerate(self._items):
            if item.id == attachment_id:
                del self._items[index]
                return True
        raise AttachmentNotFoundError(f"No pending attachment: {attachment_id}")

    def clear(self) -> None:
        """Discard all pending attachments."""
        self._items.clear()

    def snapshot(self) -> tuple[Attachment, ...]:
        """Return an immutable copy of the pending attachments."""
        return tuple(self._items)
