"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite que `spray` y `doctor` compartan tablas/paneles.
"""

from __future__ import annotations

import json
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import Classification, RequestResult, SpraySummary

_BODY_PREVIEW_CHARS = 300


def print_banner(console: Console) -> None:
    title = Text("formspray", style="bold cyan")
    subtitle = Text("HTTP form credential spraying • authorized testing only", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _preview(body: Any) -> str:
    if isinstance(body, (dict, list)):
        text = json.dumps(body, ensure_ascii=False)
    else:
        text = str(body or "")
    text = " ".join(text.split())
    if len(text) > _BODY_PREVIEW_CHARS:
        return text[:_BODY_PREVIEW_CHARS] + "…"
    return text


def format_result(result: RequestResult, classification: Classification) -> Text:
    """Una línea por resultado: credencial, veredicto y preview del body."""

    cred = result.credential
    line = Text()
    if classification.notable:
        line.append("[NOTABLE] ", style="bold green" if result.ok else "bold red")
    else:
        line.append("[fail]    ", style="dim")
    line.append(f"{cred.username}:{cred.password} ", style="bold")

    if result.error is not None:
        line.append(f"error={result.error}", style="red")
    else:
        line.append(f"{result.status} {result.status_text} ", style="cyan")
        line.append(_preview(result.body), style="white")
    if result.attempts > 1:
        line.append(f" (attempts: {result.attempts})", style="yellow")
    if classification.ambiguous:
        line.append(f" [{classification.reason}]", style="yellow")
    return line


def build_summary_table(summary: SpraySummary) -> Table:
    table = Table(title="Spray summary")
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", style="white", justify="right")
    table.add_row("Planned", str(summary.total))
    table.add_row("Completed", str(summary.dispatched))
    table.add_row("Notable", str(summary.notable))
    table.add_row("Expected failures", str(summary.expected_failures))
    table.add_row("Transport errors", str(summary.transport_errors))
    return table


def build_notable_panel(summary: SpraySummary) -> Panel | None:
    """Credenciales que merecen revisión manual, o None si no hay."""

    if not summary.notable_credentials:
        return None
    body = Text()
    for cred in summary.notable_credentials:
        body.append(f"- {cred.username}:{cred.password}\n")
    return Panel(body, title=Text("Review these", style="bold yellow"), border_style="yellow")
