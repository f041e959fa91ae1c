"""Lifecycle management for named Slurm jobs.

Query a job's state, wait for it with bounded polling, read each node's
console output, cancel it, and remove its working directory.
"""

from .api import LocalSchedulerClient, SchedulerClient, create_client
from .config import ControllerSettings, load_settings
from .controller import JobController, JobReport
from .errors import (
    CleanupError,
    DirectoryNotFound,
    InvalidJobHandle,
    SchedulerCommandError,
    SchedulerTimeout,
    SchedulerUnavailable,
    WaitCancelled,
    WaitTimedOut,
)
from .job import Job, JobPhase, JobState, StatusRow
from .output import NOT_FOUND, NodeOutput, OutputReport, OutputStatus, collect_output
from .status import parse_status

__all__ = [
    "CleanupError",
    "ControllerSettings",
    "DirectoryNotFound",
    "InvalidJobHandle",
    "Job",
    "JobController",
    "JobPhase",
    "JobReport",
    "JobState",
    "LocalSchedulerClient",
    "NOT_FOUND",
    "NodeOutput",
    "OutputReport",
    "OutputStatus",
    "SchedulerClient",
    "SchedulerCommandError",
    "SchedulerTimeout",
    "SchedulerUnavailable",
    "StatusRow",
    "WaitCancelled",
    "WaitTimedOut",
    "collect_output",
    "create_client",
    "load_settings",
    "parse_status",
]
