"""Provider factory functions for CLI.

Centralizes creation of completion clients and transcript stores from
environment variables. Hides configuration details from command
implementations.
"""

import os

import typer
from rich.console import Console

from ..completion import CompletionClient, create_completion_client
from ..completion.http import DEFAULT_ENDPOINT_URL
from ..transcript import TranscriptStore, create_transcript_store

# Default console for output
_console = Console()

_DEFAULT_STORE_PATHS = {
    "file": "~/.finbot/transcript.json",
    "sqlite": "~/.finbot/transcript.db",
}


def get_completion_client(
    kind: str | None = None,
    console: Console | None = None,
) -> CompletionClient:
    """Create a completion client from environment variables.

    Args:
        kind: Override for FINBOT_COMPLETION
        console: Optional Rich console for output

    Returns:
        Completion client instance

    Raises:
        SystemExit: If the client cannot be configured

    Environment variables:
        FINBOT_COMPLETION: Client type (http, gemini; default: http)
        FINBOT_ENDPOINT_URL: Completion endpoint (http client)
        GEMINI_API_KEY: Gemini API key (gemini client)
        GEMINI_MODEL: Gemini model (default: gemini-2.5-flash)
    """
    con = console or _console
    client_kind = (kind or os.getenv("FINBOT_COMPLETION", "http")).lower()

    if client_kind == "http":
        endpoint = os.getenv("FINBOT_ENDPOINT_URL", DEFAULT_ENDPOINT_URL)
        return create_completion_client("http", endpoint_url=endpoint)

    if client_kind == "gemini":
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            con.print("[red]Error: GEMINI_API_KEY not set in environment[/red]")
            raise typer.Exit(code=1)
        model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        return create_completion_client("gemini", api_key=api_key, model=model)

    con.print(f"[red]Error: Unknown completion client: {client_kind}[/red]")
    raise typer.Exit(code=1)


def get_transcript_store(
    backend: str | None = None,
    console: Console | None = None,
) -> TranscriptStore:
    """Create a transcript store from environment variables.

    Args:
        backend: Override for FINBOT_STORE
        console: Optional Rich console for output

    Returns:
        Transcript store instance

    Raises:
        SystemExit: If the backend is unknown

    Environment variables:
        FINBOT_STORE: Backend (memory, file, sqlite; default: file)
        FINBOT_STORE_PATH: File or database path for file/sqlite backends
    """
    con = console or _console
    store_backend = (backend or os.getenv("FINBOT_STORE", "file")).lower()

    if store_backend == "memory":
        return create_transcript_store("memory")

    if store_backend in _DEFAULT_STORE_PATHS:
        path = os.getenv("FINBOT_STORE_PATH", _DEFAULT_STORE_PATHS[store_backend])
        return create_transcript_store(store_backend, path=path)

    con.print(f"[red]Error: Unknown transcript store: {store_backend}[/red]")
    raise typer.Exit(code=1)
