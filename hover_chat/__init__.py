"""Top-level package for hover-chat."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .attachments import Attachment, AttachmentStore
    from .backend import LocalBridge
    from .config import ensure_config_dir, load_config
    from .controller import SessionController
    from .conversation import ConversationLog, Message, Sender
    from .exceptions import HoverChatError
    from .segments import Code, Prose, segment
    from .session import ChatSession
    from .state import SessionState

__all__ = [
    "Attachment",
    "AttachmentStore",
    "ChatSession",
    "Code",
    "ConversationLog",
    "HoverChatError",
    "LocalBridge",
    "Message",
    "Prose",
    "Sender",
    "SessionController",
    "SessionState",
    "ensure_config_dir",
    "load_config",
    "segment",
]

_EXPORTS: dict[str, str] = {
    "Attachment": ".attachments",
    "AttachmentStore": ".attachments",
    "ChatSession": ".session",
    "Code": ".segments",
    "ConversationLog": ".conversation",
    "HoverChatError": ".exceptions",
    "LocalBridge": ".backend",
    "Message": ".conversation",
    "Prose": ".segments",
    "Sender": ".conversation",
    "SessionController": ".controller",
    "SessionState": ".state",
    "ensure_config_dir": ".config",
    "load_config": ".config",
    "segment": ".segments",
}


def __getattr__(name: str) -> Any:
    """Lazily import symbols so the pure core imports without the backend stack."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    from importlib import import_module

    return getattr(import_module(module_name, __name__), name)
