"""Console rendering helpers for utapi CLI."""
from __future__ import annotations

from typing import Any, Dict, Iterable

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .orchestrator.models import BatchUploadResult, FileOutcome, OutcomeStatus


console = Console()

_STATUS_STYLE = {
    OutcomeStatus.SUCCESS: "green",
    OutcomeStatus.FAILED: "red",
    OutcomeStatus.INCOMPLETE: "yellow",
    OutcomeStatus.CANCELLED: "magenta",
}


def _human_size(value: int) -> str:
    size = float(max(value, 0))
    units = ["B", "KB", "MB", "GB", "TB"]
    unit_idx = 0
    while size >= 1024.0 and unit_idx < len(units) - 1:
        size /= 1024.0
        unit_idx += 1
    if unit_idx == 0:
        return f"{int(size)} {units[unit_idx]}"
    return f"{size:.2f} {units[unit_idx]}"


def render_configuration_summary(config: Dict[str, Any]) -> None:
    """Render startup configuration summary."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan", justify="right")
    table.add_column(style="white")

    for key, value in config.items():
        rendered = "-" if value is None else str(value)
        table.add_row(key, rendered)

    console.print(
        Panel(
            table,
            title="[bold green]utapi[/bold green]",
            subtitle="[dim]UploadThing CLI[/dim]",
            border_style="blue",
        )
    )


def render_rows(title: str, columns: Iterable[str], rows: Iterable[Iterable[Any]]) -> None:
    table = Table(title=title)
    for column in columns:
        table.add_column(column)
    for row in rows:
        table.add_row(*("-" if v is None else str(v) for v in row))
    console.print(table)


class BatchUploadDisplay:
    """Event-based console display for a batch upload."""

    def on_file_complete(self, outcome: FileOutcome) -> None:
        size = outcome.result.size if outcome.result else 0
        console.print(f"[green]DONE[/green] {outcome.name} ({_human_size(size)})")

    def on_file_fail(self, outcome: FileOutcome) -> None:
        style = _STATUS_STYLE[outcome.status]
        label = outcome.status.value.upper()
        suffix = f" - {outcome.error}" if outcome.error else ""
        console.print(f"[{style}]{label}[/{style}] {outcome.name}{suffix}")

    def on_finish(self, batch: BatchUploadResult) -> None:
        table = Table(title="Uploads")
        table.add_column("File")
        table.add_column("Status")
        table.add_column("Key")
        table.add_column("URL")
        for outcome in batch.outcomes:
            style = _STATUS_STYLE[outcome.status]
            table.add_row(
                outcome.name,
                f"[{style}]{outcome.status.value}[/{style}]",
                outcome.key or "-",
                outcome.result.url if outcome.result else "-",
            )
        console.print(table)
        console.print(
            f"[bold]Finished[/bold] uploaded={batch.uploaded_files} "
            f"total={batch.total_files} failed={batch.failed_files}"
        )
