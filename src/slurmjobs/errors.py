"""Custom error types for slurmjobs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class InvalidJobHandle(ValueError):
    """Raised when a job handle is missing required fields or is malformed.

    A job handle needs a non-empty name (which becomes part of a directory
    name, so it may not contain path separators) and a positive node count.
    The check happens when the :class:`~slurmjobs.job.Job` is built, before
    any scheduler command runs or any file is touched.

    Examples:
        >>> Job(name="", node_count=2)
        InvalidJobHandle: job name must be a non-empty string, got ''
        >>> Job(name="fit", node_count=0)
        InvalidJobHandle: node_count must be a positive integer, got 0
    """


class SchedulerUnavailable(Exception):
    """Base class for failures invoking the Slurm scheduler commands.

    Raised when ``squeue`` or ``scancel`` could not be run at all, or exited
    with an error unrelated to "no matching job". Nothing is retried
    automatically; the caller decides whether to try again.

    Common causes:
        - Slurm client tools not installed (``squeue: command not found``)
        - Slurm controller down or unreachable
        - SSH connection lost (SSH client)

    What to check:
        - Run ``squeue -n <job name>`` manually on the cluster
        - Verify the controller: ``scontrol ping``
    """


class SchedulerCommandError(SchedulerUnavailable):
    """Raised when a scheduler command exits non-zero or cannot be executed.

    Attributes:
        command: The command line that failed.
        returncode: Exit status, if the command ran.
        stderr: Captured standard error, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class SchedulerTimeout(SchedulerUnavailable, TimeoutError):
    """Raised when a scheduler command does not finish within its time limit."""


class WaitTimedOut(TimeoutError):
    """Raised when a job is still active after the wait deadline.

    The working directory is never touched when this is raised, so a
    ``cleanup(job, wait=True)`` that times out leaves everything in place.

    Attributes:
        job_name: Name of the job that was being waited on.
        timeout: The deadline in seconds.
        state: The last :class:`~slurmjobs.job.JobState` observed.
    """

    def __init__(self, job_name: str, timeout: float, state=None) -> None:
        rows = len(state.rows) if state is not None else 0
        super().__init__(
            f"Job '{job_name}' still active after {timeout:g}s "
            f"({rows} row(s) reported by the scheduler)."
        )
        self.job_name = job_name
        self.timeout = timeout
        self.state = state


class WaitCancelled(Exception):
    """Raised when a wait is aborted through its cancel event."""

    def __init__(self, job_name: str) -> None:
        super().__init__(f"Wait for job '{job_name}' was cancelled.")
        self.job_name = job_name


class DirectoryNotFound(FileNotFoundError):
    """Raised when a job's working directory does not exist.

    Common causes:
        - The directory was already removed by an earlier ``cleanup``
        - ``base_dir`` points somewhere other than where the job was submitted
        - Typo in the job name
    """

    def __init__(self, path: Union[str, Path]) -> None:
        super().__init__(f"folder {path} not found")
        self.path = Path(path)


class CleanupError(OSError):
    """Raised when removing a job's working directory fails.

    Attributes:
        path: The working directory that was being removed.
        leftover: Where the contents still live if deletion stopped midway,
            otherwise ``None`` (the directory is untouched).
    """

    def __init__(
        self,
        message: str,
        *,
        path: Union[str, Path],
        leftover: Optional[Union[str, Path]] = None,
    ) -> None:
        super().__init__(message)
        self.path = Path(path)
        self.leftover = Path(leftover) if leftover is not None else None


class SlurmfileError(Exception):
    """Base class for Slurmfile configuration errors.

    Slurmfiles are TOML configuration files holding the controller settings
    (base directory, backend, polling policy) per environment.
    """


class SlurmfileNotFoundError(SlurmfileError):
    """Raised when a Slurmfile cannot be located.

    Searched names are Slurmfile, Slurmfile.toml, slurmfile and
    slurmfile.toml in the current directory and its parents.

    What to check:
        - Ensure a Slurmfile exists in your project
        - Set the SLURMFILE environment variable to an explicit path
        - Pass ``--base-dir`` on the command line to skip the Slurmfile
    """


class SlurmfileInvalidError(SlurmfileError):
    """Raised when a Slurmfile contains invalid TOML or unexpected types."""


class SlurmfileEnvironmentNotFoundError(SlurmfileError):
    """Raised when a requested environment is missing from the Slurmfile.

    Examples:
        >>> load_settings(env="producton")  # Typo!
        SlurmfileEnvironmentNotFoundError: Environment 'producton' not defined in Slurmfile.
    """
