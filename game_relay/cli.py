"""
CLI for running and inspecting the relay.

Provides commands for starting the server and viewing the message types
the relay routes.
"""

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from game_relay.api.ws.constants import MessageType
from game_relay.managers.relay_hub import message_router
from game_relay.settings import app_settings

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="game-relay",
    help="Game relay CLI - Run the relay server and inspect its routing",
    add_completion=False,
)
console = Console()


@typer_app.command(name="serve")
def serve(
    host: str = typer.Option(
        app_settings.HOST, "--host", "-h", help="Interface to bind"
    ),
    port: int = typer.Option(
        app_settings.PORT, "--port", "-p", help="Port to listen on"
    ),
    reload: bool = typer.Option(
        False, "--reload", help="Reload on code changes (development)"
    ),
):
    """
    Start the relay server.

    Example:
        game-relay serve --port 9000
    """
    console.print(
        Panel.fit(
            f"[bold cyan]Game relay[/bold cyan] on "
            f"[green]ws://{host}:{port}{app_settings.WS_PATH}[/green]",
            border_style="cyan",
        )
    )
    uvicorn.run(
        "game_relay:application",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


@typer_app.command(name="handlers")
def handlers():
    """
    Display a table of all message types and their handlers.

    Example:
        game-relay handlers
    """
    console.print()

    table = Table(
        "Message type",
        "Handler Path",
        title="Relay Message Handlers",
        show_lines=True,
    )

    missing_handlers = []

    for message_type in MessageType:
        handler = message_router.handlers_registry.get(message_type)

        if not handler:
            table.add_row(
                f"[dim]{message_type.value}[/dim]",
                "[red]No handler registered[/red]",
            )
            missing_handlers.append(message_type.value)
            continue

        table.add_row(
            f"[green]{message_type.value}[/green]",
            f"{handler.__module__}.[yellow]{handler.__name__}[/yellow]",
        )

    console.print(table)
    console.print()

    total = len(MessageType)
    console.print(
        f"[bold]Summary:[/bold] {total - len(missing_handlers)}/{total} "
        "handlers registered"
    )
    console.print()

    if missing_handlers:
        raise typer.Exit(code=1)


def main():
    typer_app()


if __name__ == "__main__":
    main()
