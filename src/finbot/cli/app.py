"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from ..chat import ChatSession, Message, Role, suggest
from ..completion import CompletionError
from .providers import get_completion_client, get_transcript_store

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="finbot",
    help="Finbot: an AI assistant for investing, savings and your portfolio",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


@app.command()
def chat(
    completion: str = typer.Option(
        None,
        "--completion",
        "-c",
        help="Completion client: http or gemini (default: $FINBOT_COMPLETION or http)"
    ),
    store: str = typer.Option(
        None,
        "--store",
        "-s",
        help="Transcript store: memory, file or sqlite (default: $FINBOT_STORE or file)"
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show the log panel at this level: debug, info, warning, error"
    ),
):
    """Open the interactive chat."""
    client = get_completion_client(completion, console)
    transcript_store = get_transcript_store(store, console)
    session = ChatSession(client, transcript_store)

    from ..ui import run_chat_tui

    subtitle = f"{client.client_type} | {transcript_store.backend_type}"
    asyncio.run(run_chat_tui(session, log_level=log_level, subtitle=subtitle))


@app.command()
def ask(
    question: str = typer.Argument(..., help="Question for Finbot"),
    completion: str = typer.Option(
        None,
        "--completion",
        "-c",
        help="Completion client: http or gemini"
    ),
):
    """Ask a single question and print the reply."""
    async def _ask() -> str:
        async with get_completion_client(completion, console) as client:
            return await client.complete(question)

    try:
        with console.status("[dim]Finbot is thinking...[/dim]"):
            reply = asyncio.run(_ask())
    except CompletionError as e:
        console.print(f"[red]Error: {type(e).__name__}: {e}[/red]")
        raise typer.Exit(code=1)

    if not reply.strip():
        console.print("[yellow]Sorry, I couldn't generate a response. Please try again.[/yellow]")
        raise typer.Exit(code=1)

    console.print(Panel(Markdown(reply), title="Finbot", border_style="blue"))

    console.print("[dim]You could also ask:[/dim]")
    for suggestion in suggest([Message.user(question)]):
        console.print(f"  [cyan]-[/cyan] {suggestion}")


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to listen on"),
    log_level: str = typer.Option("info", "--log-level", "-l", help="Server log level"),
):
    """Run the completion endpoint (POST /api/gemini)."""
    from ..server import run_server

    console.print(f"[dim]Serving completions on http://{host}:{port}/api/gemini[/dim]")
    run_server(host=host, port=port, log_level=log_level)


@app.command()
def history(
    store: str = typer.Option(
        None,
        "--store",
        "-s",
        help="Transcript store: memory, file or sqlite"
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Show at most this many recent messages"
    ),
):
    """Show the saved chat transcript."""
    async def _history() -> list[Message] | None:
        transcript_store = get_transcript_store(store, console)
        try:
            await transcript_store.connect()
            return await transcript_store.load()
        finally:
            await transcript_store.disconnect()

    messages = asyncio.run(_history())
    if not messages:
        console.print("[dim]No saved conversation.[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Time", style="dim", width=6)
    table.add_column("From", width=7)
    table.add_column("Message")

    start = max(len(messages) - limit, 0)
    for index, message in enumerate(messages[start:], start + 1):
        sender = "[blue]You[/blue]" if message.role is Role.USER else "[green]Finbot[/green]"
        text = message.text if len(message.text) <= 200 else message.text[:200] + "..."
        table.add_row(str(index), message.timestamp or "", sender, text)

    console.print(table)


@app.command()
def clear(
    store: str = typer.Option(
        None,
        "--store",
        "-s",
        help="Transcript store: memory, file or sqlite"
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Do not ask for confirmation"
    ),
):
    """Delete the saved chat transcript."""
    if not yes and not typer.confirm("Delete the saved conversation?"):
        console.print("[dim]Aborted.[/dim]")
        return

    async def _clear():
        transcript_store = get_transcript_store(store, console)
        try:
            await transcript_store.connect()
            await transcript_store.clear()
        finally:
            await transcript_store.disconnect()

    try:
        asyncio.run(_clear())
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    console.print("[green]Conversation cleared.[/green]")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
