"""Job commands for the slurmjobs CLI."""

from __future__ import annotations

import dataclasses
from typing import Annotated, Optional

import cyclopts
from rich.console import Console

from ..job import Job
from .formatters import print_job_report, print_job_state, print_output_report
from .utils import get_controller

console = Console(stderr=True)

NameArg = Annotated[
    str,
    cyclopts.Parameter(help="Job name the job was submitted under."),
]
NodesOpt = Annotated[
    int,
    cyclopts.Parameter(
        name=["--nodes", "-n"],
        help="Number of nodes the job was split into.",
    ),
]
EnvOpt = Annotated[
    Optional[str],
    cyclopts.Parameter(
        name=["--env", "-e"],
        help="Environment name from Slurmfile.",
    ),
]
SlurmfileOpt = Annotated[
    Optional[str],
    cyclopts.Parameter(
        name=["--slurmfile", "-f"],
        help="Path to Slurmfile.",
    ),
]
BaseDirOpt = Annotated[
    Optional[str],
    cyclopts.Parameter(
        name=["--base-dir", "-d"],
        help="Directory holding the job folders. Overrides the Slurmfile.",
    ),
]
PollOpt = Annotated[
    Optional[float],
    cyclopts.Parameter(
        name=["--poll-interval", "-i"],
        help="Seconds between status checks.",
    ),
]
TimeoutOpt = Annotated[
    Optional[float],
    cyclopts.Parameter(
        name=["--timeout", "-t"],
        help="Give up after this many seconds.",
    ),
]


def status_job(
    name: NameArg,
    nodes: NodesOpt = 1,
    tail: Annotated[
        Optional[int],
        cyclopts.Parameter(help="Only show the last N lines of each output file."),
    ] = None,
    env: EnvOpt = None,
    slurmfile: SlurmfileOpt = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Show a job's queue rows, or its console output once it has finished."""
    controller = get_controller(env=env, slurmfile=slurmfile, base_dir=base_dir)
    report = controller.report(Job(name=name, node_count=nodes))
    print_job_report(report, tail=tail)


def output_job(
    name: NameArg,
    nodes: NodesOpt = 1,
    tail: Annotated[
        Optional[int],
        cyclopts.Parameter(help="Only show the last N lines of each output file."),
    ] = None,
    env: EnvOpt = None,
    slurmfile: SlurmfileOpt = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Print every node's output file without checking the queue."""
    controller = get_controller(env=env, slurmfile=slurmfile, base_dir=base_dir)
    report = controller.collect_output(Job(name=name, node_count=nodes))
    print_output_report(report, tail=tail)


def wait_job(
    name: NameArg,
    poll_interval: PollOpt = None,
    timeout: TimeoutOpt = None,
    env: EnvOpt = None,
    slurmfile: SlurmfileOpt = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Block until the scheduler no longer reports the job."""
    controller = get_controller(env=env, slurmfile=slurmfile, base_dir=base_dir)
    job = Job(name=name, node_count=1)
    with console.status(f"Waiting for job {name}...", spinner="dots"):
        state = controller.wait_until_done(
            job, poll_interval=poll_interval, timeout=timeout
        )
    print_job_state(job, state)


def cancel_job(
    name: NameArg,
    env: EnvOpt = None,
    slurmfile: SlurmfileOpt = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Cancel every queued or running partition of the job."""
    controller = get_controller(env=env, slurmfile=slurmfile, base_dir=base_dir)
    controller.cancel(Job(name=name, node_count=1))
    console.print(f"[green]Cancellation requested for {name}.[/green]")


def cleanup_job(
    name: NameArg,
    no_wait: Annotated[
        bool,
        cyclopts.Parameter(
            name=["--no-wait"],
            help="Delete immediately, even if the job is still running.",
        ),
    ] = False,
    poll_interval: PollOpt = None,
    timeout: TimeoutOpt = None,
    env: EnvOpt = None,
    slurmfile: SlurmfileOpt = None,
    base_dir: BaseDirOpt = None,
) -> None:
    """Wait for the job to finish, then delete its working directory."""
    controller = get_controller(env=env, slurmfile=slurmfile, base_dir=base_dir)
    overrides = {}
    if poll_interval is not None:
        overrides["poll_interval"] = poll_interval
    if timeout is not None:
        overrides["timeout"] = timeout
    if overrides:
        controller.settings = dataclasses.replace(controller.settings, **overrides)

    job = Job(name=name, node_count=1)
    target = controller.working_dir(job)
    if no_wait:
        controller.cleanup(job, wait=False)
    else:
        with console.status(f"Waiting for job {name}...", spinner="dots"):
            controller.cleanup(job, wait=True)
    console.print(f"[green]Removed {target}.[/green]")
