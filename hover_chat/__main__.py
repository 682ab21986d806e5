"""CLI entrypoint for hover-chat."""

from __future__ import annotations

import argparse
import asyncio
from importlib import metadata
from pathlib import Path
from typing import Sequence

from rich.console import Console

from .backend import LocalBridge
from .config import ensure_config_dir, load_config
from .console import ConsoleHost, ConsoleNotifier
from .logging_utils import configure_logging
from .session import ChatSession


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hover-chat", description="Chat with a local model about your screenshots"
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to an alternative config.toml",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> None:
    """Load configuration, handle CLI flags, and run the console host."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    if args.version:
        try:
            version = metadata.version("hover-chat")
        except metadata.PackageNotFoundError:
            version = "0.0.0"
        print(f"hover-chat {version}")
        return

    if args.config is None:
        ensure_config_dir()
    config = load_config(config_path=args.config)
    configure_logging(config["logging"])

    console = Console()
    console.rule(config["app"]["title"])
    notifier = ConsoleNotifier(console)
    bridge = LocalBridge.from_config(
        config,
        on_open_settings=lambda: notifier.notify(
            "Settings", f"Edit {args.config or 'the config file'} and restart."
        ),
    )
    session = ChatSession.from_config(config, bridge, notifier)
    asyncio.run(ConsoleHost(session, console).run())


if __name__ == "__main__":
    main()
