"""
Launch signature commands for local testing.
"""
from __future__ import annotations

import time
from typing import List, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit

import typer
from rich.console import Console
from rich.table import Table

from app.core.config import settings
from app.core.launch_auth import authenticate_launch
from app.core.signing import TIMESTAMP_FIELD, canonicalize, sign_parameters

app = typer.Typer(help="Sign and verify Ton.Place launch parameters")
console = Console()


def _parse_param(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition("=")
    if not sep or not name:
        raise typer.BadParameter(f"Expected NAME=VALUE, got {raw!r}")
    return name, value


def _query_from_input(raw: str) -> str:
    """Accept a full URL, '?a=b&...' or 'a=b&...'."""
    if "://" in raw:
        return urlsplit(raw).query
    return raw.lstrip("?")


@app.command("sign")
def sign(
    params: List[str] = typer.Option(
        [], "--param", "-p", help="Launch parameter as NAME=VALUE (repeatable)"
    ),
    secret: Optional[str] = typer.Option(
        None, "--secret", "-s", help="App secret (defaults to APP_SECRET)"
    ),
    now: Optional[int] = typer.Option(
        None, "--now", help="Unix timestamp to use for ts when it is not given"
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Print a full launch URL on this base instead of a query string"
    ),
    show_canonical: bool = typer.Option(
        False, "--show-canonical", help="Also print the canonical string that was signed"
    ),
):
    """Print a signed launch query, as Ton.Place would open the app with."""
    parsed = dict(_parse_param(raw) for raw in params)
    parsed.setdefault(TIMESTAMP_FIELD, str(now if now is not None else int(time.time())))

    signed = sign_parameters(parsed, secret if secret is not None else settings.app_secret)
    query = urlencode(signed)

    if show_canonical:
        console.print("[bold]Canonical string:[/bold]")
        console.print(canonicalize(signed), markup=False, highlight=False)
    if base_url:
        typer.echo(f"{base_url.rstrip('/')}/?{query}")
    else:
        typer.echo(query)


@app.command("verify")
def verify(
    query: str = typer.Argument(..., help="Launch URL or query string to check"),
    secret: Optional[str] = typer.Option(
        None, "--secret", "-s", help="App secret (defaults to APP_SECRET)"
    ),
    max_age: int = typer.Option(
        settings.signature_max_age_seconds, "--max-age", help="Maximum timestamp age in seconds"
    ),
    now: Optional[int] = typer.Option(None, "--now", help="Unix timestamp to check freshness against"),
):
    """Check a launch query's signature and timestamp. Exits 1 if rejected."""
    pairs = parse_qsl(_query_from_input(query), keep_blank_values=True)
    result = authenticate_launch(
        pairs,
        secret if secret is not None else settings.app_secret,
        now=now,
        max_age_seconds=max_age,
    )

    table = Table(title="Launch verification")
    table.add_column("Check")
    table.add_column("Result")
    table.add_row("Signature", "[green]valid[/green]" if result.signature_valid else "[red]invalid[/red]")
    table.add_row("Timestamp", "[green]fresh[/green]" if result.timestamp_fresh else "[red]stale[/red]")
    table.add_row("Reason", result.reason or "-")
    console.print(table)

    if not result.authenticated:
        raise typer.Exit(code=1)
    console.print("[green]✓ Launch request is authentic[/green]")
