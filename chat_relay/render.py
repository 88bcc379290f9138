"""Terminal renderer for the conversation transcript."""
from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from chat_relay.services.conversation import PENDING_LABEL, Role, Turn

ROLE_STYLES = {
    Role.USER: "bold cyan",
    Role.ASSISTANT: "bold yellow",
    Role.SYSTEM: "bold magenta",
}


class TranscriptRenderer:
    """Renders turns, the error banner and the pending indicator with Rich."""

    def __init__(self, console: Console | None = None) -> None:
        self.console: Console = console or Console()
        self._print_lock = threading.Lock()

    def welcome(self, relay_url: str) -> None:
        self._print(f"[bold blue]Chat Relay[/bold blue] [dim]via {relay_url}[/dim]")
        self._print("[dim]Type /reset to start over, /quit to exit.[/dim]")

    def turn(self, turn: Turn) -> None:
        """Render one turn: its role label, then its Markdown content."""
        style = ROLE_STYLES.get(turn.role, "bold")
        with self._print_lock:
            self.console.print(f"[{style}]{turn.role.value}[/{style}]")
            self.console.print(Markdown(turn.content))

    def transcript(self, turns: tuple[Turn, ...]) -> None:
        for turn in turns:
            self.turn(turn)

    def error(self, message: str) -> None:
        """Render the error banner, kept visually apart from the transcript."""
        with self._print_lock:
            self.console.print(Panel(message, title="Error", border_style="red", style="red"))

    def info(self, message: str) -> None:
        self._print(message)

    @contextmanager
    def pending(self, label: str = PENDING_LABEL) -> Iterator[None]:
        """Show a spinner with the pending submit label while a turn is in flight."""
        with self.console.status(label):
            yield

    def _print(self, message: str) -> None:
        with self._print_lock:
            self.console.print(message)
