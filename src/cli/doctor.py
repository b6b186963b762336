"""Doctor command: validate configuration and inputs without sending requests."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from core.config import AppSettings, get_user_env_file
from core.domain.errors import FormSprayError
from core.services.spray_pipeline import SprayRequest, prepare_spray, preview_body

app = typer.Typer(no_args_is_help=True, help="Configuration and input diagnostics (no network traffic).")

_console = Console()


def _settings_table(settings: AppSettings) -> Table:
    table = Table(title="formspray settings")
    table.add_column("Setting", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("User env file", str(get_user_env_file()))
    table.add_row("Concurrency", str(settings.max_concurrency))
    table.add_row("Timeout", f"{settings.http_timeout_seconds:g}s")
    table.add_row("Attempts per job", str(settings.max_attempts))
    if settings.max_attempts > 1:
        table.add_row("Retry backoff", f"{settings.retry_backoff_seconds:g}s (doubling)")
        table.add_row("Retry statuses", ", ".join(map(str, settings.retry_statuses)) or "transport errors only")
    table.add_row("User-Agent", settings.user_agent)
    table.add_row("Proxy", settings.proxy or "-")
    table.add_row("TLS verification", "on" if settings.verify_tls else "OFF")
    table.add_row("Expect JSON", "yes" if settings.expect_json else "no")
    return table


@app.command()
def run(
    user_file: Optional[Path] = typer.Option(None, "--user-file", "-u"),
    pass_file: Optional[Path] = typer.Option(None, "--pass-file", "-p"),
    target: Optional[str] = typer.Option(None, "--target", "-t"),
    form_fields: Optional[List[str]] = typer.Option(None, "--form-field", "-f"),
    interval: Optional[int] = typer.Option(None, "--interval", "-i", min=0),
) -> None:
    """Show effective settings; with inputs, also plan the run.

    Planning loads both lists and parses every template exactly as `spray`
    would, then reports the job count, the stagger span and the first request
    body.
    """

    settings = AppSettings()
    _console.print(_settings_table(settings))

    if not (user_file and pass_file and target and form_fields):
        _console.print("\n[dim]Pass -u, -p, -t and -f to validate a run plan.[/dim]")
        return

    request = SprayRequest(
        user_file=user_file,
        pass_file=pass_file,
        target=target,
        form_fields=form_fields,
        interval_ms=interval,
    )
    try:
        prepared = prepare_spray(request, settings)
    except FormSprayError as exc:
        _console.print(f"[red]FAIL:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    plan = Table(title="Run plan")
    plan.add_column("Check", style="bright_green", no_wrap=True)
    plan.add_column("Details", style="white")
    plan.add_row("Target", prepared.target)
    plan.add_row("Usernames", str(len(prepared.usernames)))
    plan.add_row("Passwords", str(len(prepared.passwords)))
    plan.add_row("Jobs", str(prepared.total))
    for template in prepared.templates:
        plan.add_row("Field", escape(f"{template.key} = {template.value_template}"))
    if interval and prepared.total:
        span = (prepared.total - 1) * interval / 1000.0
        plan.add_row("Stagger", f"{interval} ms; last launch >= {span:.1f}s after start")
    body = preview_body(prepared)
    if body is not None:
        plan.add_row("First body", escape(body))
    _console.print(plan)

    for message in prepared.warnings:
        _console.print(f"[yellow]Warning:[/yellow] {escape(message)}")
