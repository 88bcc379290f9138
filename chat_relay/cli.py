"""Command-line entry point.

Commands:
    chat-relay serve   Run the relay gateway (Flask development server)
    chat-relay chat    Chat through a running gateway from the terminal
"""
from __future__ import annotations

from typing import Optional

import typer

from chat_relay.config import get_settings
from chat_relay.render import TranscriptRenderer
from chat_relay.services.conversation import ConversationStore
from chat_relay.services.relay_client import RelayClient
from chat_relay.utils.logger import setup_logging

QUIT_COMMANDS = {"/quit", "/exit"}
RESET_COMMAND = "/reset"

app = typer.Typer(
    name="chat-relay",
    help="Relay chat turns to an LLM provider without exposing its key.",
    add_completion=False,
)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Interface to bind"),
    port: int = typer.Option(5000, help="Port to listen on"),
) -> None:
    """Run the relay gateway with the Flask development server."""
    from chat_relay import create_app

    settings = get_settings()
    gateway_app = create_app(settings)
    gateway_app.run(host=host, port=port, debug=settings.FLASK_DEBUG)


@app.command()
def chat(
    relay_url: Optional[str] = typer.Option(None, "--relay-url", help="Gateway base URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show operator log lines"),
) -> None:
    """Hold a conversation through the relay gateway."""
    settings = get_settings()
    if relay_url:
        settings = settings.model_copy(update={"RELAY_BASE_URL": relay_url.rstrip("/")})

    setup_logging(log_level=settings.LOG_LEVEL if verbose else "WARNING", log_format="console")

    renderer = TranscriptRenderer()
    renderer.welcome(settings.RELAY_BASE_URL)

    with RelayClient.from_settings(settings) as client:
        run_chat_loop(ConversationStore(client), renderer)


def run_chat_loop(store: ConversationStore, renderer: TranscriptRenderer) -> None:
    """Read lines, submit them, and render the outcome until EOF or /quit."""
    while True:
        try:
            line = renderer.console.input("[bold cyan]> [/bold cyan]")
        except (EOFError, KeyboardInterrupt):
            break

        command = line.strip()
        if command in QUIT_COMMANDS:
            break
        if command == RESET_COMMAND:
            store.reset()
            renderer.info("[dim]Conversation cleared.[/dim]")
            continue

        store.set_input(line)
        if not store.can_submit:
            continue

        seen = len(store.turns)
        with renderer.pending():
            store.submit()

        renderer.transcript(store.turns[seen:])
        if store.error:
            renderer.error(store.error)
