"""Line-oriented terminal host for a chat session."""

from __future__ import annotations

import asyncio
import logging

from rich.console import Console, Group, RenderableType
from rich.syntax import Syntax
from rich.text import Text

from .bridge import Severity
from .conversation import Message, Sender
from .segments import Code
from .session import ChatSession

LOGGER = logging.getLogger(__name__)

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.ERROR: "bold red",
    Severity.NEUTRAL: "yellow",
    Severity.INFO: "cyan",
}

HELP_TEXT = (
    "/shot PATH  attach a screenshot\n"
    "/drop ID|N  remove a pending screenshot\n"
    "/pending    list pending screenshots\n"
    "/clear      discard all pending screenshots\n"
    "/settings   open settings\n"
    "/quit       leave"
)


class ConsoleNotifier:
    """Print notifications as one styled line."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def notify(self, title: str, message: str, severity: Severity = Severity.INFO) -> None:
        style = SEVERITY_STYLES.get(Severity(severity), "")
        self.console.print(Text.assemble((f"{title}: ", style), message))


def render_message(message: Message) -> Group:
    """Build renderables for a message: header, attachment count, then segments."""
    is_user = message.sender == Sender.USER
    header_style = "bold blue" if is_user else "bold green"
    if message.is_error:
        header_style = "bold red"
    parts: list[RenderableType] = [
        Text("You" if is_user else "Assistant", style=header_style)
    ]
    if message.attachments:
        parts.append(Text(f"[{len(message.attachments)} screenshot(s)]", style="dim"))
    for item in message.segments():
        if isinstance(item, Code):
            parts.append(
                Syntax(
                    item.content,
                    item.language or "text",
                    theme="monokai",
                    line_numbers=False,
                    word_wrap=True,
                )
            )
        else:
            parts.append(Text(item.content))
    return Group(*parts)


class ConsoleHost:
    """Read commands and prompts from the terminal and drive a ``ChatSession``.

    Prompts are sent as background tasks so captures, ``/drop`` and
    ``/settings`` keep working while a reply is pending.
    """

    def __init__(self, session: ChatSession, console: Console) -> None:
        self.session = session
        self.console = console
        self._rendered = 0
        self._send_tasks: set[asyncio.Task] = set()

    @property
    def pending_sends(self) -> int:
        return len(self._send_tasks)

    def render_new_messages(self) -> None:
        history = self.session.history()
        for message in history[self._rendered :]:
            self.console.print(render_message(message))
        self._rendered = len(history)

    def show_pending(self) -> None:
        pending = self.session.attachments.ids()
        store = self.session.attachments
        self.console.print(f"Screenshots to send ({len(pending)}/{store.capacity}):")
        for index, attachment_id in enumerate(pending, start=1):
            self.console.print(f"  {index}. {attachment_id}", markup=False)

    def _resolve_attachment(self, token: str) -> str:
        """Accept either an attachment id or its 1-based position."""
        pending = self.session.attachments.ids()
        if token.isdigit() and 1 <= int(token) <= len(pending):
            return pending[int(token) - 1]
        return token

    def _start_send(self, text: str) -> asyncio.Task:
        task = asyncio.create_task(self.session.submit(text))
        self._send_tasks.add(task)
        task.add_done_callback(self._on_send_done)
        return task

    def _on_send_done(self, task: asyncio.Task) -> None:
        self._send_tasks.discard(task)
        if task.cancelled():
            LOGGER.info("console.send.cancelled", extra={"event": "console.send.cancelled"})
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error(
                "console.send.failed",
                extra={"event": "console.send.failed", "error": str(exc)},
            )
        self.render_new_messages()

    async def drain(self) -> None:
        """Wait for every in-flight send to settle."""
        while self._send_tasks:
            await asyncio.gather(*self._send_tasks, return_exceptions=True)

    async def handle_line(self, line: str) -> bool:
        """Handle one input line; return False when the user asked to quit."""
        raw = line.strip()
        if not raw:
            return True
        command, _, args = raw.partition(" ")
        args = args.strip()
        if command == "/quit":
            return False
        if command == "/help":
            self.console.print(HELP_TEXT, markup=False)
        elif command == "/shot":
            if await self.session.request_capture(args or None):
                self.show_pending()
        elif command == "/drop":
            await self.session.delete_attachment(self._resolve_attachment(args))
        elif command == "/pending":
            self.show_pending()
        elif command == "/clear":
            self.session.clear_attachments()
        elif command == "/settings":
            self.session.open_settings()
        else:
            task = self._start_send(raw)
            # Let the send claim the session and record the user turn.
            await asyncio.sleep(0)
            if not task.done() and self.session.is_sending:
                self.render_new_messages()
                self.console.print(Text("Thinking...", style="dim"))
        return True

    async def run(self) -> None:
        """Run the read-eval loop until ``/quit`` or end of input.

        Sends still pending on exit are cancelled.
        """
        self.console.print("Type a message, or /help for commands.")
        with self.session:
            try:
                while True:
                    try:
                        line = await asyncio.to_thread(self.console.input, "> ")
                    except (EOFError, KeyboardInterrupt):
                        break
                    if not await self.handle_line(line):
                        break
            finally:
                for task in list(self._send_tasks):
                    task.cancel()
                await self.drain()
        LOGGER.info("console.exit", extra={"event": "console.exit"})
