"""Split message text into alternating prose and fenced-code segments."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

FENCE = "```"


@dataclass(frozen=True)
class Prose:
    """Plain text between code fences."""

    content: str


@dataclass(frozen=True)
class Code:
    """Body of a fenced code block; ``language`` is None when the fence has no tag."""

    content: str
    language: str | None = None


Segment = Prose | Code


def _is_language_tag(tag: str) -> bool:
    return not any(char.isspace() for char in tag)


def _find_opening(text: str, start: int) -> tuple[int, int, str | None] | None:
    """Locate the next opening fence at or after ``start``.

    Returns ``(fence_start, body_start, language)``. An opening fence sits at
    the start of a line and is followed by an optional tag and a newline.
    """
    position = start
    while True:
        index = text.find(FENCE, position)
        if index < 0:
            return None
        if index == 0 or text[index - 1] == "\n":
            line_end = text.find("\n", index + len(FENCE))
            if line_end >= 0:
                tag = text[index + len(FENCE) : line_end]
                if _is_language_tag(tag):
                    return index, line_end + 1, tag or None
        position = index + 1


def segment(text: str) -> list[Segment]:
    """Split *text* into an ordered list of ``Prose`` and ``Code`` segments.

    An opening fence without a matching close is not a code block: the
    fence and everything after it stay in the trailing prose segment.
    """
    segments: list[Segment] = []
    cursor = 0
    while True:
        opening = _find_opening(text, cursor)
        if opening is None:
            break
        fence_start, body_start, language = opening
        closing = text.find(FENCE, body_start)
        if closing < 0:
            break
        if fence_start > cursor:
            segments.append(Prose(text[cursor:fence_start]))
        segments.append(Code(text[body_start:closing], language))
        cursor = closing + len(FENCE)
    if cursor < len(text):
        segments.append(Prose(text[cursor:]))
    return segments


def to_raw(segments: Iterable[Segment]) -> str:
    """Rebuild message text from segments, restoring the fence delimiters."""
    parts: list[str] = []
    for item in segments:
        if isinstance(item, Code):
            parts.append(f"{FENCE}{item.language or ''}\n{item.content}{FENCE}")
        else:
            parts.append(item.content)
    return "".join(parts)
