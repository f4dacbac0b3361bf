"""Output formatting for uploadctl.

Commands print through these helpers so ``-o json`` and ``-o table`` behave
the same everywhere. Tables, status lines and the upload progress bar use
Rich; errors and warnings go to stderr so JSON on stdout stays parseable.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

# =============================================================================
# Console Instances
# =============================================================================

console = Console()
err_console = Console(stderr=True)


# =============================================================================
# Output Format
# =============================================================================


class OutputFormat(Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        """Create from string value."""
        return cls(value.lower())


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


# =============================================================================
# Table Output
# =============================================================================


def print_table(
    rows: Sequence[dict[str, Any]],
    columns: Sequence[str],
    *,
    title: str | None = None,
    column_labels: dict[str, str] | None = None,
    limit: int | None = None,
) -> None:
    """Print rows as a Rich table.

    Args:
        rows: Row dictionaries.
        columns: Keys to show, in order.
        title: Optional table title.
        column_labels: Header overrides; other keys are title-cased.
        limit: Show at most this many rows and note how many were left out.
    """
    if not rows:
        console.print("[dim]No results[/dim]")
        return

    labels = column_labels or {}
    table = Table(title=title, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(labels.get(col, col.replace("_", " ").title()))

    shown = rows if limit is None else rows[:limit]
    for row in shown:
        table.add_row(*(_cell(row.get(col)) for col in columns))

    console.print(table)
    hidden = len(rows) - len(shown)
    if hidden > 0:
        console.print(f"[dim]... and {hidden} more[/dim]")


def print_key_value(
    data: dict[str, Any],
    *,
    title: str | None = None,
    key_labels: dict[str, str] | None = None,
) -> None:
    """Print a mapping as aligned ``label  value`` lines.

    Args:
        data: Values to print, in insertion order.
        title: Optional bold heading.
        key_labels: Label overrides; other keys are title-cased.
    """
    if title:
        console.print(f"[bold]{title}[/bold]")

    labels = key_labels or {}
    display = {k: labels.get(k, k.replace("_", " ").title()) for k in data}
    width = max((len(label) for label in display.values()), default=0)

    for key, value in data.items():
        if value is None:
            shown = "[dim]-[/dim]"
        elif isinstance(value, bool):
            shown = "[green]Yes[/green]" if value else "[red]No[/red]"
        elif isinstance(value, (list, dict)):
            shown = json.dumps(value, indent=2)
        else:
            shown = str(value)
        console.print(f"  {display[key]:<{width}}  {shown}")


# =============================================================================
# Unified Output
# =============================================================================


def print_output(
    data: Any,
    *,
    format: OutputFormat = OutputFormat.TABLE,
    columns: Sequence[str] | None = None,
    column_labels: dict[str, str] | None = None,
    title: str | None = None,
) -> None:
    """Print data in the requested format.

    JSON goes to stdout unstyled. In table mode, lists need ``columns``;
    a dict without ``columns`` is printed as key/value lines.

    Args:
        data: Data to print (dict, list, or scalar).
        format: Output format.
        columns: Columns for table format.
        column_labels: Labels for columns.
        title: Optional title.
    """
    if format == OutputFormat.JSON:
        print(json.dumps(data, indent=2, default=str))
        return

    if isinstance(data, list) and columns:
        print_table(data, columns, title=title, column_labels=column_labels)
    elif isinstance(data, dict) and columns:
        print_table([data], columns, title=title, column_labels=column_labels)
    elif isinstance(data, dict):
        print_key_value(data, title=title, key_labels=column_labels)
    else:
        console.print(_cell(data))


# =============================================================================
# Status Messages
# =============================================================================


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


# =============================================================================
# Progress
# =============================================================================


def create_progress() -> Progress:
    """Create the live progress bar for an upload batch.

    The ``current`` field shows the file most recently reported.

    Returns:
        Progress instance bound to the stdout console.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        TextColumn("[dim]{task.fields[current]}[/dim]"),
        console=console,
    )
