"""
CLI for running and talking to the chat relay.

Provides commands for serving the relay and for sending or watching
messages from a terminal.
"""

import asyncio

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel

from chatrelay.client import ChatClient, ChatLogEntry
from chatrelay.settings import app_settings

typer_app = typer.Typer(
    name="chatrelay",
    help="Chat relay - real-time chat and typing presence over WebSocket",
    add_completion=False,
)
console = Console()

_ENTRY_STYLES = {
    "sent": "blue",
    "received": "white",
    "system": "dim",
}


def _default_url() -> str:
    return f"ws://localhost:{app_settings.PORT}{app_settings.WS_PATH}"


def _print_entry(entry: ChatLogEntry) -> None:
    style = _ENTRY_STYLES[entry.kind]
    console.print(f"[{style}]{entry.text}[/{style}]")


def _print_typing(indicator: str) -> None:
    if indicator:
        console.print(f"[dim italic]{indicator}[/dim italic]")


@typer_app.command()
def serve(
    host: str = typer.Option(app_settings.HOST, help="Interface to bind"),
    port: int = typer.Option(app_settings.PORT, help="Port to listen on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """
    Run the relay server.

    Example:
        chatrelay serve --port 8080
    """
    console.print(
        Panel.fit(
            f"[bold cyan]Chat relay on http://{host}:{port}[/bold cyan]\n"
            f"WebSocket endpoint: [yellow]{app_settings.WS_PATH}[/yellow]",
            border_style="cyan",
        )
    )
    uvicorn.run(
        "chatrelay:application",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


async def _send(url: str, text: str, keystroke_delay: float) -> None:
    client = ChatClient(url, on_entry=_print_entry)
    await client.connect()
    receiver = asyncio.create_task(client.run())
    try:
        await client.wait_connected()
        for _ in text:
            client.keystroke()
            if keystroke_delay:
                await asyncio.sleep(keystroke_delay)
        client.send_message(text)
    finally:
        await client.close()
        await receiver


@typer_app.command()
def send(
    text: str = typer.Argument(..., help="Message text"),
    url: str = typer.Option(None, help="Relay WebSocket URL"),
    keystroke_delay: float = typer.Option(
        0.05, help="Seconds between simulated keystrokes"
    ),
):
    """
    Send one message, typing it out first so peers see the indicator.

    Example:
        chatrelay send "hello there"
    """
    if not text.strip():
        console.print("[yellow]Nothing to send[/yellow]")
        raise typer.Exit(code=1)

    asyncio.run(_send(url or _default_url(), text, keystroke_delay))


async def _listen(url: str) -> None:
    client = ChatClient(
        url, on_entry=_print_entry, on_typing_change=_print_typing
    )
    await client.connect()
    try:
        await client.run()
    finally:
        await client.close()


@typer_app.command()
def listen(
    url: str = typer.Option(None, help="Relay WebSocket URL"),
):
    """
    Print incoming messages and the typing indicator until interrupted.

    Example:
        chatrelay listen --url ws://localhost:8080/ws
    """
    try:
        asyncio.run(_listen(url or _default_url()))
    except KeyboardInterrupt:
        console.print("[dim]Bye[/dim]")


if __name__ == "__main__":
    typer_app()
