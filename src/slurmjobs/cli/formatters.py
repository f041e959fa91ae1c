"""Rich output formatters for the slurmjobs CLI."""

from __future__ import annotations

from typing import Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..controller import JobReport
from ..job import Job, JobState
from ..output import OutputReport, OutputStatus, tail_text
from ..status import summarize_rows

console = Console()

# Color mapping for squeue state codes
STATE_COLORS: Dict[str, str] = {
    "R": "green",
    "PD": "yellow",
    "CG": "cyan",
    "CF": "cyan",
    "S": "yellow",
    "ST": "magenta",
}


def _get_state_color(state: Optional[str]) -> str:
    return STATE_COLORS.get(state or "", "white")


def print_job_state(job: Job, state: JobState) -> None:
    """Display the scheduler rows of an active job, or a terminal notice.

    Args:
        job: The job that was queried.
        state: Parsed status from controller.status().
    """
    if state.is_terminal:
        console.print(
            f"[blue]Job {escape(job.name)} completed or stopped.[/blue] "
            "[dim]No rows reported by the scheduler.[/dim]"
        )
        return

    columns = state.header.split() if state.header else []
    summary = ", ".join(
        f"{count} {code}" for code, count in sorted(summarize_rows(state.rows).items())
    )
    table = Table(title=f"Job {escape(job.name)} running or in queue ({summary})")
    if not columns:
        table.add_column("Status")
    for column in columns:
        table.add_column(column, no_wrap=column in ("JOBID", "ST"))

    for row in state.rows:
        if not columns:
            table.add_row(escape(row.raw))
            continue
        color = _get_state_color(row.state)
        values = []
        for column in columns:
            value = escape(row.fields.get(column, ""))
            if column in ("ST", "STATE"):
                value = f"[{color}]{value}[/{color}]"
            values.append(value)
        table.add_row(*values)

    console.print(table)


def print_output_report(report: OutputReport, tail: Optional[int] = None) -> None:
    """Display each node's output file in its own panel.

    Args:
        report: Collected output from controller.collect_output().
        tail: If given, only the last ``tail`` lines of each file are shown.
    """
    for node in report.values():
        if node.status is OutputStatus.FOUND:
            text = node.content or ""
            if tail is not None:
                text = tail_text(text, max_lines=tail)
            body = escape(text) if text else "[dim](empty)[/dim]"
            border = "green"
        elif node.status is OutputStatus.NOT_FOUND:
            body = "[dim]file not found[/dim]"
            border = "yellow"
        else:
            body = f"[red]error reading file:[/red] {escape(node.error or '')}"
            border = "red"
        console.print(Panel(body, title=escape(str(node.path)), border_style=border))


def print_job_report(report: JobReport, tail: Optional[int] = None) -> None:
    """Display a status report: rows while active, node output once terminal."""
    print_job_state(report.job, report.state)
    if report.output is not None:
        console.print("[dim]Printing console output below if any.[/dim]")
        print_output_report(report.output, tail=tail)
