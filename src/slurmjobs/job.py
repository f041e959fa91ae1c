import enum
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple, Union

from .errors import InvalidJobHandle

DEFAULT_DIR_PREFIX = "_rslurm_"


@dataclass(frozen=True)
class Job:
    """Handle for a job submitted to Slurm under a unique name.

    A Job is produced by whatever submitted the work; this package only
    consumes it. The name is the filter passed to ``squeue -n`` and
    ``scancel -n`` and determines the job's working directory, which holds
    one ``slurm_<i>.out`` file per node.

    Job lifecycle as observed through the scheduler:

    ```mermaid
    stateDiagram-v2
        [*] --> Unknown
        Unknown --> Active: rows reported
        Unknown --> Terminal: no rows
        Active --> Terminal: no rows
        Terminal --> [*]
    ```

    Terminal is absorbing: once ``squeue`` stops reporting rows for the name
    the job is considered finished, failed or unknown, with no distinction.

    Examples:
        >>> job = Job(name="fit_models", node_count=4)
        >>> job.working_dir("/scratch/me")
        PosixPath('/scratch/me/_rslurm_fit_models')

    Attributes:
        name: Unique job name, stable for the job's lifetime.
        node_count: Number of parallel node partitions the job was split into.

    Raises:
        InvalidJobHandle: If the name is empty, "." or "..", contains a path
            separator, or node_count is not a positive integer.
    """

    name: str
    node_count: int

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise InvalidJobHandle(
                f"job name must be a non-empty string, got {self.name!r}"
            )
        if "/" in self.name or (os.sep != "/" and os.sep in self.name):
            raise InvalidJobHandle(
                f"job name may not contain path separators, got {self.name!r}"
            )
        if self.name in (".", ".."):
            raise InvalidJobHandle(f"job name may not be {self.name!r}")
        if (
            isinstance(self.node_count, bool)
            or not isinstance(self.node_count, int)
            or self.node_count <= 0
        ):
            raise InvalidJobHandle(
                f"node_count must be a positive integer, got {self.node_count!r}"
            )

    def working_dir(
        self,
        base_dir: Union[str, os.PathLike],
        prefix: str = DEFAULT_DIR_PREFIX,
    ) -> Path:
        """Return the directory holding this job's files under ``base_dir``."""
        return Path(base_dir) / f"{prefix}{self.name}"


def ensure_job(job) -> Job:
    """Fail fast unless ``job`` is a :class:`Job`."""
    if not isinstance(job, Job):
        raise InvalidJobHandle(
            f"input must be a Job, got {type(job).__name__}: {job!r}"
        )
    return job


class JobPhase(enum.Enum):
    ACTIVE = "active"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class StatusRow:
    """One ``squeue`` row: a running or queued partition of the job.

    ``raw`` is the line exactly as the scheduler printed it and is what gets
    displayed. ``fields`` maps header columns to the whitespace-split values.
    Rows hash by ``raw`` only.
    """

    raw: str
    fields: Dict[str, str] = field(default_factory=dict, hash=False)

    @property
    def state(self) -> Optional[str]:
        return self.fields.get("ST") or self.fields.get("STATE")

    @property
    def elapsed(self) -> Optional[str]:
        return self.fields.get("TIME")

    @property
    def job_id(self) -> Optional[str]:
        return self.fields.get("JOBID")


@dataclass(frozen=True)
class JobState:
    """Scheduler view of a job at one point in time. Never cached."""

    phase: JobPhase
    rows: Tuple[StatusRow, ...] = ()
    header: Optional[str] = None

    @classmethod
    def active(
        cls, rows: Sequence[StatusRow], header: Optional[str] = None
    ) -> "JobState":
        if not rows:
            raise ValueError("an active state needs at least one status row")
        return cls(JobPhase.ACTIVE, tuple(rows), header)

    @classmethod
    def terminal(cls, header: Optional[str] = None) -> "JobState":
        return cls(JobPhase.TERMINAL, (), header)

    @property
    def is_active(self) -> bool:
        return self.phase is JobPhase.ACTIVE

    @property
    def is_terminal(self) -> bool:
        return self.phase is JobPhase.TERMINAL
