"""Append-only conversation history for a single chat session."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import overload

from .attachments import Attachment
from .segments import Segment, segment


class Sender(str, Enum):
    """Author of a conversation entry."""

    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single immutable conversation entry."""

    sender: Sender
    text: str
    attachments: tuple[Attachment, ...] = ()
    error: str | None = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def segments(self) -> list[Segment]:
        """Split the message text into prose and code segments for rendering."""
        return segment(self.text)


class HistoryView(Sequence[Message]):
    """Read-only live view over the log; iterating it again starts from the top."""

    def __init__(self, messages: list[Message]) -> None:
        self._messages = messages

    @overload
    def __getitem__(self, index: int) -> Message: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Message]: ...

    def __getitem__(self, index: int | slice) -> Message | Sequence[Message]:
        if isinstance(index, slice):
            return tuple(self._messages[index])
        return self._messages[index]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)


class ConversationLog:
    """Chronological, append-only message history.

    There is no delete or edit operation: the log is the audit trail for the
    lifetime of the session.
    """

    def __init__(self) -> None:
        self._messages: list[Message] = []

    def __len__(self) -> int:
        return len(self._messages)

    def append(self, message: Message) -> int:
        """Append ``message`` and return its index."""
        self._messages.append(message)
        return len(self._messages) - 1

    def all(self) -> HistoryView:
        """Return a read-only view of every message in chronological order."""
        return HistoryView(self._messages)

    def last(self, sender: Sender | None = None) -> Message | None:
        """Return the newest message, optionally restricted to one sender."""
        for message in reversed(self._messages):
            if sender is None or message.sender == sender:
                return message
        return None
