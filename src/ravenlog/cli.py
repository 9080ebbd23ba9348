# src/ravenlog/cli.py
"""
ravenlog Command Line Interface (CLI).

This module implements a small operator tool using `typer` and `rich`. It is
mostly useful for checking a DSN configuration and for inspecting how a raw
engine trace will look on the wire.

Commands
--------
- **parse**: Show the frames parsed out of a trace file as a table.
- **encode**: Print the JSON body that would be sent for an event.
- **send**: Build one event and deliver it using the configured credentials.

Usage
-----
    $ ravenlog parse crash.txt
    $ ravenlog encode crash.txt --message "Division by zero" --severity exception
    $ ravenlog send --message "hello from ravenlog" --trace-file crash.txt
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ravenlog.client import RavenClient
from ravenlog.core.contracts.credentials import Credentials
from ravenlog.core.errors import ConfigError
from ravenlog.core.settings import load_settings
from ravenlog.core.severity import SeverityHint, coerce_hint
from ravenlog.parsing.stacktrace import parse
from ravenlog.wire.encoder import encode as encode_record

# Ensure RAVENLOG_* variables are loaded before any settings are read
load_dotenv()

app = typer.Typer(
    help="ravenlog: report engine errors to a Sentry-compatible endpoint.",
    rich_markup_mode="markdown",
)
console = Console()

# Used by `encode`, which never touches the network.
_OFFLINE_CREDENTIALS = Credentials(
    ingestion_uri="http://localhost/api/store/",
    public_key="public",
    private_key="secret",
    project_id="default",
)


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def _read_trace(path: Path | None) -> str | None:
    if path is None:
        return None
    return path.read_text(encoding="utf-8")


def _parse_tags(tags: list[str] | None) -> dict[str, str]:
    """Turn repeated ``--tag key=value`` options into a mapping."""
    out: dict[str, str] = {}
    for item in tags or []:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Tags must look like key=value, got {item!r}")
        out[key] = value
    return out


def _severity(value: str) -> SeverityHint:
    try:
        return coerce_hint(value)
    except ValueError as exc:
        choices = ", ".join(h.value for h in SeverityHint)
        raise typer.BadParameter(f"Unknown severity {value!r} (choose from {choices})") from exc


# --------------------------------------------------------------------------- #
# Commands
# --------------------------------------------------------------------------- #


@app.command("parse")  # type: ignore[misc]
def parse_trace(
    file: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Text file holding a raw engine stack trace.",
        ),
    ],
    skip_unparsed: Annotated[
        bool,
        typer.Option(
            "--skip-unparsed",
            help="Drop lines that do not look like `fn (at File.cs:N)`.",
        ),
    ] = False,
) -> None:
    """Parse a trace file and show its frames, outermost call first."""
    trace = parse(_read_trace(file), keep_unparsed=not skip_unparsed)

    table = Table(title=f"{file.name}: {len(trace)} frame(s)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Function", style="cyan")
    table.add_column("File")
    table.add_column("Line", justify="right")

    for i, frame in enumerate(trace.frames, start=1):
        line = "?" if frame.is_unparsed else str(frame.lineno)
        style = "dim red" if frame.is_unparsed else None
        table.add_row(str(i), frame.function, frame.filename, line, style=style)

    console.print(table)


@app.command()  # type: ignore[misc]
def encode(
    file: Annotated[
        Path | None,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Optional text file holding a raw engine stack trace.",
        ),
    ] = None,
    message: Annotated[str, typer.Option("--message", "-m", help="Event message.")] = "",
    severity: Annotated[
        str, typer.Option("--severity", "-s", help="assert, error, exception, warning or log.")
    ] = "error",
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Tag as key=value (repeatable).")
    ] = None,
) -> None:
    """Print the JSON body that would be sent for an event."""
    hint = _severity(severity)
    tags = _parse_tags(tag)

    settings = load_settings()
    client = RavenClient(
        _OFFLINE_CREDENTIALS,
        logger=settings.logger,
        platform=settings.platform,
        pool_capacity=1,
    )
    try:
        record = client.create_event(message, _read_trace(file), hint)
        record.logger = client.logger
        record.tags = tags
        body = encode_record(record)
    finally:
        client.close(wait=False)

    console.print_json(body.decode("utf-8"))


@app.command()  # type: ignore[misc]
def send(
    message: Annotated[str, typer.Option("--message", "-m", help="Event message.")],
    trace_file: Annotated[
        Path | None,
        typer.Option(
            "--trace-file",
            "-f",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Optional raw engine stack trace to attach.",
        ),
    ] = None,
    severity: Annotated[
        str, typer.Option("--severity", "-s", help="assert, error, exception, warning or log.")
    ] = "error",
    wait: Annotated[
        bool,
        typer.Option("--wait/--no-wait", help="Wait for the endpoint's answer."),
    ] = True,
) -> None:
    """Send one event using the RAVENLOG_* configuration."""
    hint = _severity(severity)

    try:
        client = RavenClient.from_settings(load_settings())
    except ConfigError as e:
        console.print(f"[bold red]❌ Configuration Error:[/bold red] {e}")
        raise typer.Exit(code=1) from e

    with client:
        future = client.capture_event(message, _read_trace(trace_file), hint)
        if future is None:
            console.print("[bold yellow]⚠️ Event dropped[/bold yellow] (see diagnostics above)")
            raise typer.Exit(code=1)
        if not wait:
            console.print("[dim]Event dispatched.[/dim]")
            return
        status = future.result()

    if status is None:
        console.print("[bold red]❌ Delivery failed[/bold red] (network error or timeout)")
        raise typer.Exit(code=1)
    if not 200 <= status < 300:
        console.print(f"[bold red]❌ Endpoint answered HTTP {status}[/bold red]")
        raise typer.Exit(code=1)
    console.print(f"[bold green]✅ Delivered[/bold green] (HTTP {status})")


if __name__ == "__main__":
    app()
