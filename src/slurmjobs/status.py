"""Parsing of ``squeue`` output into a :class:`~slurmjobs.job.JobState`."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List

from .job import JobState, StatusRow

logger = logging.getLogger(__name__)


def _parse_row(line: str, columns: List[str]) -> StatusRow:
    values = line.split()
    # NODELIST(REASON) is last and may hold a value with spaces
    if len(values) > len(columns) and columns:
        head = values[: len(columns) - 1]
        tail = " ".join(values[len(columns) - 1 :])
        values = head + [tail]
    return StatusRow(raw=line, fields=dict(zip(columns, values)))


def parse_status(raw_text: str) -> JobState:
    """Translate raw ``squeue -n <name>`` output into a job state.

    ``squeue`` always prints a header line, so zero or one non-empty line
    means the scheduler reports nothing for the name and the job is terminal.
    With more lines, the first is the header and each remaining line is a
    running or queued partition, kept in the scheduler's order.

    Args:
        raw_text: The command's stdout, verbatim. May be empty.

    Returns:
        JobState: Terminal, or active with one row per reported line.

    Examples:
        >>> parse_status("JOBID PARTITION NAME USER ST TIME NODES\\n").is_terminal
        True
        >>> state = parse_status(
        ...     "JOBID PARTITION NAME USER ST TIME NODES\\n"
        ...     "123 batch abc u1 R 0:05 1\\n"
        ... )
        >>> [row.state for row in state.rows]
        ['R']
    """
    lines = (raw_text or "").splitlines()
    lines = [line for line in lines if line.strip()]

    if len(lines) <= 1:
        header = lines[0] if lines else None
        logger.debug("No status rows reported; job is terminal")
        return JobState.terminal(header)

    header, body = lines[0], lines[1:]
    columns = header.split()
    rows = [_parse_row(line, columns) for line in body]
    logger.debug("Parsed %d status row(s)", len(rows))
    return JobState.active(rows, header)


def summarize_rows(rows: Iterable[StatusRow]) -> Dict[str, int]:
    """Count rows per state code (``R``, ``PD``, ...) for display."""
    counts = Counter(row.state or "?" for row in rows)
    return dict(counts)
