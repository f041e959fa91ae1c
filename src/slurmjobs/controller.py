import logging
import os
import shutil
import threading
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .api.base import SchedulerClient
from .config import ControllerSettings
from .errors import CleanupError, DirectoryNotFound, WaitCancelled, WaitTimedOut
from .job import Job, JobState, ensure_job
from .output import OutputReport, collect_output
from .status import parse_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JobReport:
    """Status of a job and, once it is terminal, the output of every node."""

    job: Job
    state: JobState
    output: Optional[OutputReport] = None

    def render(self) -> str:
        if self.state.is_active:
            lines = ["Job running or in queue. Status:"]
            if self.state.header:
                lines.append(self.state.header)
            lines.extend(row.raw for row in self.state.rows)
            return "\n".join(lines)

        text = "Job completed or stopped. Printing console output below if any.\n"
        if self.output is not None:
            text += self.output.render()
        return text


class JobController:
    """Cancel, inspect, wait on and clean up jobs submitted under a name.

    The scheduler is the only source of truth: every call re-queries it, and
    nothing is cached between calls.

    Examples:
        >>> controller = JobController(
        ...     LocalSchedulerClient(), ControllerSettings(base_dir="/scratch/me")
        ... )
        >>> job = Job(name="fit_models", node_count=4)
        >>> controller.status(job).is_terminal
        False
        >>> controller.cleanup(job)  # blocks until the job leaves the queue

    Args:
        client: Scheduler client used for ``squeue``/``scancel``.
        settings: Working-directory layout and default wait policy.
    """

    def __init__(self, client: SchedulerClient, settings: ControllerSettings):
        self.client = client
        self.settings = settings

    def working_dir(self, job: Job) -> Path:
        job = ensure_job(job)
        return job.working_dir(self.settings.base_dir, self.settings.dir_prefix)

    def cancel(self, job: Job) -> None:
        """Ask the scheduler to cancel the job. Files are left alone."""
        job = ensure_job(job)
        logger.debug("[%s] Cancelling job", job.name)
        self.client.cancel_job(job.name)

    def status(self, job: Job) -> JobState:
        job = ensure_job(job)
        raw = self.client.query_status(job.name)
        state = parse_status(raw)
        logger.debug(
            "[%s] Status: %s (%d row(s))", job.name, state.phase.value, len(state.rows)
        )
        return state

    def wait_until_done(
        self,
        job: Job,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> JobState:
        """Block until the scheduler stops reporting rows for the job.

        The scheduler is queried once per ``poll_interval``. Between queries
        the wait sleeps on ``cancel_event``, so setting the event from another
        thread ends the wait immediately rather than after the interval.

        Args:
            job: The job to wait on.
            poll_interval: Seconds between queries. Defaults to the settings.
            timeout: Seconds before giving up, None for the settings default
                (which may itself be None, meaning wait indefinitely).
            cancel_event: Event that aborts the wait when set.

        Returns:
            JobState: The terminal state that ended the wait.

        Raises:
            WaitTimedOut: If the job is still active at the deadline.
            WaitCancelled: If ``cancel_event`` is set during the wait.
            SchedulerUnavailable: If a status query fails.
        """
        job = ensure_job(job)
        interval = self.settings.poll_interval if poll_interval is None else poll_interval
        limit = self.settings.timeout if timeout is None else timeout
        if interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {interval}")
        if limit is not None and limit < 0:
            raise ValueError(f"timeout must be non-negative, got {limit}")

        stop = cancel_event if cancel_event is not None else threading.Event()
        deadline = None if limit is None else time.monotonic() + limit

        while True:
            if stop.is_set():
                raise WaitCancelled(job.name)

            state = self.status(job)
            if state.is_terminal:
                logger.debug("[%s] Job is no longer queued or running", job.name)
                return state

            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.error("[%s] Timeout waiting for job", job.name)
                    raise WaitTimedOut(job.name, limit, state)
                if remaining < interval:
                    # No query after the deadline has passed
                    if stop.wait(remaining):
                        raise WaitCancelled(job.name)
                    logger.error("[%s] Timeout waiting for job", job.name)
                    raise WaitTimedOut(job.name, limit, state)

            logger.debug(
                "[%s] %d row(s) still active, next check in %.1fs",
                job.name,
                len(state.rows),
                interval,
            )
            if stop.wait(interval):
                raise WaitCancelled(job.name)

    def collect_output(self, job: Job) -> OutputReport:
        """Read every node's output file. Call once the job is terminal."""
        job = ensure_job(job)
        return collect_output(
            self.working_dir(job), job.node_count, self.settings.output_template
        )

    def report(self, job: Job) -> JobReport:
        """Current status, plus node output if the job is no longer active."""
        job = ensure_job(job)
        state = self.status(job)
        if state.is_active:
            return JobReport(job, state)
        return JobReport(job, state, self.collect_output(job))

    def cleanup(
        self,
        job: Job,
        wait: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        """Delete the job's working directory and everything in it.

        With ``wait=True`` the job is first waited on using the configured
        poll interval and timeout; a failed wait deletes nothing. With
        ``wait=False`` the directory is removed whatever the job's state.

        The directory is first renamed to a hidden sibling and only then
        removed, so either the original path is gone or the call raises with
        the directory untouched.

        Raises:
            WaitTimedOut: If waiting was requested and the job stayed active.
            WaitCancelled: If the wait was aborted.
            DirectoryNotFound: If the working directory does not exist.
            CleanupError: If the directory could not be removed, or does not
                sit directly inside ``base_dir``.
        """
        job = ensure_job(job)
        if wait:
            self.wait_until_done(job, cancel_event=cancel_event)

        working_dir = self.working_dir(job)
        base_dir = Path(self.settings.base_dir)
        if working_dir.parent.resolve() != base_dir.resolve():
            raise CleanupError(
                f"Refusing to remove {working_dir}: it is not a folder directly "
                f"inside {base_dir}. Nothing was deleted.",
                path=working_dir,
            )
        if not working_dir.is_dir():
            raise DirectoryNotFound(working_dir)

        _remove_tree(working_dir)
        logger.info("[%s] Removed working directory %s", job.name, working_dir)


def _remove_tree(path: Path) -> None:
    tombstone = path.with_name(f".{path.name}.deleting-{uuid.uuid4().hex[:8]}")
    try:
        os.rename(path, tombstone)
    except OSError as exc:
        raise CleanupError(
            f"Failed to remove {path}: {exc}. The directory was left untouched.",
            path=path,
        ) from exc

    logger.debug("Moved %s to %s for removal", path, tombstone)
    try:
        if tombstone.is_symlink():
            tombstone.unlink()
        else:
            shutil.rmtree(tombstone)
    except OSError as exc:
        raise CleanupError(
            f"Removal of {path} stopped midway: {exc}. "
            f"Remaining files are in {tombstone}.",
            path=path,
            leftover=tombstone,
        ) from exc
