from typing import Dict, List, Optional

from slurmjobs.api.base import SchedulerClient
from slurmjobs.errors import SchedulerCommandError


class FakeSchedulerClient(SchedulerClient):
    """An in-memory scheduler client suitable for tests.

    Each job name is given a script of ``squeue`` outputs; every query pops
    the next one, and the last output repeats once the script runs out.
    Names without a script report only the header line.
    """

    HEADER = "JOBID PARTITION NAME USER ST TIME NODES NODELIST(REASON)\n"

    def __init__(self) -> None:
        self._scripts: Dict[str, List[str]] = {}
        self.queries: List[str] = []
        self.cancelled: List[str] = []
        self.fail_with: Optional[Exception] = None

    def set_status(self, job_name: str, *outputs: str) -> None:
        self._scripts[job_name] = list(outputs)

    def set_rows(self, job_name: str, *rows: str) -> None:
        """Report the given rows for the job until told otherwise."""
        self.set_status(job_name, self.HEADER + "".join(f"{r}\n" for r in rows))

    def finish(self, job_name: str) -> None:
        self.set_status(job_name, self.HEADER)

    def query_status(self, job_name: str) -> str:
        self.queries.append(job_name)
        if self.fail_with is not None:
            raise self.fail_with
        script = self._scripts.get(job_name)
        if not script:
            return self.HEADER
        if len(script) > 1:
            return script.pop(0)
        return script[0]

    def cancel_job(self, job_name: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.cancelled.append(job_name)
        self.finish(job_name)


def failing_client(message: str = "squeue: command not found") -> FakeSchedulerClient:
    client = FakeSchedulerClient()
    client.fail_with = SchedulerCommandError(message, returncode=127, stderr=message)
    return client
