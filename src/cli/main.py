"""formspray command line.

`formspray spray` runs a campaign; `formspray doctor run` validates inputs and
configuration without sending anything.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)

from cli.doctor import app as doctor_app
from cli.logging_setup import configure_logging
from cli.ui_components import build_notable_panel, build_summary_table, format_result, print_banner
from core.config import AppSettings
from core.domain.errors import FormSprayError
from core.domain.models import Classification, RequestResult
from core.services.spray_pipeline import PipelineHooks, SprayRequest, run_spray

app = typer.Typer(
    no_args_is_help=True,
    help="Spray username/password combinations against an HTTP login form (authorized testing only).",
)
app.add_typer(doctor_app, name="doctor")

_console = Console()


def _settings_overrides(
    *,
    concurrency: int | None,
    retries: int | None,
    timeout: float | None,
    expect_json: bool,
    proxy: str | None,
    insecure: bool,
    verbose: int,
) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if concurrency is not None:
        overrides["max_concurrency"] = concurrency
    if retries is not None:
        overrides["max_attempts"] = retries + 1
    if timeout is not None:
        overrides["http_timeout_seconds"] = timeout
    if expect_json:
        overrides["expect_json"] = True
    if proxy:
        overrides["proxy"] = proxy
    if insecure:
        overrides["verify_tls"] = False
    if verbose == 1:
        overrides["log_level"] = "INFO"
    elif verbose > 1:
        overrides["log_level"] = "DEBUG"
    return overrides


@app.command()
def spray(
    user_file: Path = typer.Option(..., "--user-file", "-u", help="Username list, one per line."),
    pass_file: Path = typer.Option(..., "--pass-file", "-p", help="Password list, one per line."),
    target: str = typer.Option(..., "--target", "-t", help="URL the form is POSTed to."),
    form_fields: List[str] = typer.Option(
        ...,
        "--form-field",
        "-f",
        help="Form field as key:value; {USER} and {PASS} are substituted. Repeatable.",
    ),
    failure_message: Optional[str] = typer.Option(
        None, "--failure-message", "-m", help="Body substring of a failed login."
    ),
    failure_status: Optional[int] = typer.Option(
        None, "--failure-status", "-s", min=100, max=599, help="HTTP status of a failed login."
    ),
    interval: Optional[int] = typer.Option(
        None, "--interval", "-i", min=0, help="Stagger: job i starts no earlier than i*interval ms."
    ),
    concurrency: Optional[int] = typer.Option(
        None, "--concurrency", "-c", min=1, max=500, help="Maximum requests in flight."
    ),
    retries: Optional[int] = typer.Option(
        None, "--retries", "-r", min=0, max=9, help="Extra attempts after a transport error."
    ),
    timeout: Optional[float] = typer.Option(None, "--timeout", min=0.1, help="Per-request timeout (seconds)."),
    show_failures: bool = typer.Option(False, "--show-failures", help="Also print expected failures."),
    expect_json: bool = typer.Option(False, "--expect-json", help="Flag responses whose body is not JSON."),
    proxy: Optional[str] = typer.Option(None, "--proxy", help="Proxy URL, e.g. http://127.0.0.1:8080."),
    insecure: bool = typer.Option(False, "--insecure", help="Skip TLS certificate verification."),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="-v for INFO, -vv for DEBUG logs."),
    no_banner: bool = typer.Option(False, "--no-banner", help="Do not print the banner."),
) -> None:
    """Submit every username x password combination to TARGET."""

    settings = AppSettings()
    settings = settings.model_copy(
        update=_settings_overrides(
            concurrency=concurrency,
            retries=retries,
            timeout=timeout,
            expect_json=expect_json,
            proxy=proxy,
            insecure=insecure,
            verbose=verbose,
        )
    )
    configure_logging(settings.log_level)

    if not no_banner:
        print_banner(_console)

    request = SprayRequest(
        user_file=user_file,
        pass_file=pass_file,
        target=target,
        form_fields=form_fields,
        failure_message=failure_message,
        failure_status=failure_status,
        interval_ms=interval,
    )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=_console,
        transient=True,
    )
    task_ids: list[Any] = []

    def on_warning(message: str) -> None:
        progress.console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def on_start(total: int) -> None:
        task_ids.append(progress.add_task("Spraying", total=total))

    def on_result(result: RequestResult, classification: Classification) -> None:
        if task_ids:
            progress.advance(task_ids[0])
        if classification.notable or show_failures:
            progress.console.print(format_result(result, classification))

    hooks = PipelineHooks(warning=on_warning, start=on_start, result=on_result)

    try:
        with progress:
            summary = asyncio.run(run_spray(settings=settings, request=request, hooks=hooks))
    except FormSprayError as exc:
        _console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        _console.print("[yellow]Aborted: in-flight requests were abandoned.[/yellow]")
        raise typer.Exit(code=130)

    _console.print(build_summary_table(summary))
    if failure_status is not None or failure_message:
        panel = build_notable_panel(summary)
        if panel is not None:
            _console.print(panel)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
