"""
Base module for scheduler clients.

This module defines the abstract base class for all scheduler clients,
the narrow interface the job controller needs from a Slurm cluster.
"""

import abc
import logging
import shlex
from typing import Tuple

from ..errors import SchedulerCommandError

logger = logging.getLogger(__name__)

# Fragments of squeue/scancel stderr meaning "no such job" rather than failure
NO_MATCHING_JOB_MARKERS = (
    "Invalid job id specified",
    "Invalid job name specified",
    "does not exist",
)


def is_no_matching_job(stderr: str) -> bool:
    """Return True if scheduler stderr only says that no job matched."""
    return any(marker in (stderr or "") for marker in NO_MATCHING_JOB_MARKERS)


class SchedulerClient(abc.ABC):
    """
    Abstract base class for scheduler clients.

    Concrete implementations run the Slurm commands locally or over SSH;
    tests substitute an in-memory fake returning canned text.
    """

    @abc.abstractmethod
    def cancel_job(self, job_name: str) -> None:
        """
        Request cancellation of every job with the given name.

        The request is fire-and-forget: success of the cancellation itself
        is not confirmed, and cancelling a finished job is not an error.

        Args:
            job_name: The job name filter (``scancel -n``).

        Raises:
            SchedulerUnavailable: If the command could not be run or failed.
        """
        pass

    @abc.abstractmethod
    def query_status(self, job_name: str) -> str:
        """
        Query the scheduler queue for the given job name.

        Args:
            job_name: The job name filter (``squeue -n``).

        Returns:
            str: The command's stdout verbatim: a header line followed by one
                row per running or queued partition. May be empty. A name
                with no matching job is not an error.

        Raises:
            SchedulerUnavailable: If the command could not be run or failed.
        """
        pass

    def close(self) -> None:
        """Release any connection held by the client."""

    def __enter__(self):
        return self

    def __exit__(self, *args) -> bool:
        self.close()
        return False


class CommandSchedulerClient(SchedulerClient):
    """
    Scheduler client that drives the Slurm command-line tools.

    Subclasses decide where a command line runs by implementing
    ``_run_command``; building the commands and interpreting their exit
    status is shared.
    """

    squeue = "squeue"
    scancel = "scancel"
    location = "locally"

    @abc.abstractmethod
    def _run_command(self, cmd: str) -> Tuple[str, str, int]:
        """
        Run a shell command line.

        Returns:
            Tuple[str, str, int]: A tuple of (stdout, stderr, return_code).

        Raises:
            SchedulerUnavailable: If the command could not be run at all.
        """
        pass

    def _command_failed(
        self, what: str, cmd: str, return_code: int, stderr: str
    ) -> SchedulerCommandError:
        return SchedulerCommandError(
            f"{what} {self.location}.\n\n"
            f"Command exited with {return_code}: {stderr.strip() or 'no error output'}\n\n"
            "Possible causes:\n"
            "  1. Slurm controller is down or unreachable\n"
            "  2. Slurm client tools are not installed or not on PATH\n\n"
            "To diagnose:\n"
            f"  {cmd}  # Run this manually to see Slurm's response",
            command=cmd,
            returncode=return_code,
            stderr=stderr,
        )

    def cancel_job(self, job_name: str) -> None:
        cmd = f"{self.scancel} -n {shlex.quote(job_name)}"
        _, stderr, return_code = self._run_command(cmd)
        if return_code != 0:
            raise self._command_failed(
                f"Could not cancel job '{job_name}'", cmd, return_code, stderr
            )
        logger.info("Cancellation requested for job '%s' (%s)", job_name, self.location)

    def query_status(self, job_name: str) -> str:
        cmd = f"{self.squeue} -n {shlex.quote(job_name)}"
        stdout, stderr, return_code = self._run_command(cmd)
        if return_code == 0:
            return stdout
        if is_no_matching_job(stderr):
            logger.debug("No job named '%s' known to the scheduler", job_name)
            return ""
        raise self._command_failed(
            f"Could not query status of job '{job_name}'", cmd, return_code, stderr
        )
