"""
CLI for the keyv store.

Commands:
    keyv get KEY - Print the value at a dotted key
    keyv set KEY VALUE - Set a value (JSON or plain string)
    keyv push KEY VALUE... - Append values to an array
    keyv delete KEY - Delete a root key
    keyv has KEY - Check whether a key exists
    keyv all - Print every stored document
    keyv config - Show current configuration
    keyv version - Print version
"""

from __future__ import annotations

import asyncio
import json
from typing import Annotated, Any, Awaitable, Callable, Optional, TypeVar

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from keyv import __version__
from keyv.config import Settings, clear_settings_cache, get_settings
from keyv.exceptions import KeyvError
from keyv.logging import log_context, setup_logging
from keyv.store import KeyValueStore, create_store

app = typer.Typer(
    name="keyv",
    help="Dot-path key-value store over SQLite or PostgreSQL",
    no_args_is_help=True,
)

console = Console()
error_console = Console(stderr=True)

T = TypeVar("T")


def parse_value(raw: str) -> Any:
    """Parse a CLI argument as JSON, falling back to the plain string."""
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw


def _load_settings() -> Settings:
    try:
        clear_settings_cache()
        settings = get_settings()
    except ValidationError as e:
        error_console.print(f"[red]Error:[/red] Configuration is invalid.\n{e}")
        raise typer.Exit(1)
    setup_logging(
        settings.LOG_LEVEL,
        log_file=settings.LOG_FILE,
        console_output=settings.LOG_LEVEL == "DEBUG",
    )
    return settings


def _run(operation: Callable[[KeyValueStore], Awaitable[T]]) -> T:
    """Open the configured store, run one operation, and close it."""
    settings = _load_settings()

    async def runner() -> T:
        with log_context(backend=settings.KEYV_BACKEND, table=settings.KEYV_TABLE):
            async with create_store(settings) as store:
                return await operation(store)

    try:
        return asyncio.run(runner())
    except KeyvError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _print_value(value: Any) -> None:
    console.print_json(json.dumps(value))


@app.command()
def get(
    key: Annotated[str, typer.Argument(help="Dotted key, e.g. user.money")],
    default: Annotated[
        Optional[str],
        typer.Option("--default", "-d", help="Value written if the root key is unknown"),
    ] = None,
) -> None:
    """Print the value at KEY. A miss stores the default."""
    default_value = parse_value(default) if default is not None else ""
    _print_value(_run(lambda store: store.get(key, default_value)))


@app.command("set")
def set_(
    key: Annotated[str, typer.Argument(help="Dotted key")],
    value: Annotated[str, typer.Argument(help="JSON value or plain string")],
) -> None:
    """Set KEY to VALUE."""
    row = _run(lambda store: store.set(key, parse_value(value)))
    console.print(f"[green]Stored[/green] {row.key}")


@app.command()
def push(
    key: Annotated[str, typer.Argument(help="Dotted key of the array")],
    values: Annotated[list[str], typer.Argument(help="Values to append")],
) -> None:
    """Append VALUES to the array at KEY."""
    parsed = [parse_value(v) for v in values]
    _print_value(_run(lambda store: store.push(key, *parsed)))


@app.command()
def delete(key: Annotated[str, typer.Argument(help="Root key")]) -> None:
    """Delete the root KEY."""
    if _run(lambda store: store.delete(key)):
        console.print(f"[green]Deleted[/green] {key}")
    else:
        console.print(f"[yellow]No row for[/yellow] {key}")


@app.command()
def has(key: Annotated[str, typer.Argument(help="Dotted key")]) -> None:
    """Print whether KEY exists. Exits with 1 if it does not."""
    exists = _run(lambda store: store.has(key))
    console.print("true" if exists else "false")
    if not exists:
        raise typer.Exit(1)


@app.command("all")
def all_() -> None:
    """Print every stored document."""
    _print_value(_run(lambda store: store.all()))


@app.command()
def config() -> None:
    """Show current configuration with the password redacted."""
    settings = _load_settings()

    table = Table(title="Settings", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for name, value in settings.redacted_display().items():
        display_value = str(value) if value is not None else "[dim]not set[/dim]"
        table.add_row(name, display_value)

    console.print(table)


@app.command()
def version() -> None:
    """Print the version number."""
    console.print(f"keyv version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
