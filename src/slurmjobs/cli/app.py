"""Root application for the slurmjobs CLI."""

from __future__ import annotations

import logging
import sys

import cyclopts
from rich.console import Console

from ..logging import configure_logging
from .jobs import cancel_job, cleanup_job, output_job, status_job, wait_job

console = Console(stderr=True)


def _get_version() -> str:
    """Get package version for --version flag."""
    try:
        from importlib.metadata import version

        return version("slurmjobs")
    except Exception:
        return "unknown"


app = cyclopts.App(
    name="slurmjobs",
    help="Inspect, wait on, cancel and clean up named SLURM jobs.",
    version=_get_version(),
)

app.command(status_job, name="status")
app.command(output_job, name="output")
app.command(wait_job, name="wait")
app.command(cancel_job, name="cancel")
app.command(cleanup_job, name="cleanup")


def _handle_error(e: Exception) -> None:
    """Handle exceptions with user-friendly messages."""
    from ..errors import (
        CleanupError,
        DirectoryNotFound,
        InvalidJobHandle,
        SchedulerTimeout,
        SchedulerUnavailable,
        SlurmfileEnvironmentNotFoundError,
        SlurmfileError,
        SlurmfileInvalidError,
        SlurmfileNotFoundError,
        WaitCancelled,
        WaitTimedOut,
    )

    if isinstance(e, SlurmfileNotFoundError):
        console.print(f"[red]Error:[/red] {e}")
        console.print(
            "\n[dim]Hint: Create a Slurmfile in your project directory, "
            "use --slurmfile to specify a path, or pass --base-dir.[/dim]"
        )
    elif isinstance(e, SlurmfileEnvironmentNotFoundError):
        console.print(f"[red]Error:[/red] {e}")
        console.print("\n[dim]Hint: Check the environment tables in your Slurmfile.[/dim]")
    elif isinstance(e, SlurmfileInvalidError):
        console.print(f"[red]Error:[/red] {e}")
        console.print("\n[dim]Hint: Check your Slurmfile for TOML syntax errors.[/dim]")
    elif isinstance(e, SlurmfileError):
        console.print(f"[red]Slurmfile Error:[/red] {e}")
    elif isinstance(e, InvalidJobHandle):
        console.print(f"[red]Invalid job:[/red] {e}")
    elif isinstance(e, SchedulerTimeout):
        console.print(f"[red]Scheduler Timeout:[/red] {e}")
        console.print(
            "\n[dim]Hint: Check network connectivity and cluster availability.[/dim]"
        )
    elif isinstance(e, SchedulerUnavailable):
        console.print(f"[red]Scheduler Error:[/red] {e}")
        console.print("\n[dim]Hint: Verify squeue/scancel work on this machine.[/dim]")
    elif isinstance(e, WaitTimedOut):
        console.print(f"[red]Timed out:[/red] {e}")
        console.print("\n[dim]Nothing was deleted.[/dim]")
    elif isinstance(e, WaitCancelled):
        console.print(f"[yellow]Cancelled:[/yellow] {e}")
    elif isinstance(e, DirectoryNotFound):
        console.print(f"[red]Error:[/red] {e}")
        console.print("\n[dim]Hint: Check --base-dir and the job name.[/dim]")
    elif isinstance(e, CleanupError):
        console.print(f"[red]Cleanup failed:[/red] {e}")
    else:
        console.print(f"[red]Error:[/red] {e}")

    sys.exit(1)


def main() -> None:
    """Entry point for the slurmjobs CLI."""
    configure_logging(logging.WARNING)
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)
    except SystemExit:
        raise
    except Exception as e:
        _handle_error(e)
