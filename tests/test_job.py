"""Tests for the Job handle and JobState."""

from pathlib import Path

import pytest

from slurmjobs.errors import InvalidJobHandle
from slurmjobs.job import Job, JobPhase, JobState, StatusRow, ensure_job


def test_job_working_dir_uses_prefix_and_name(tmp_path):
    job = Job(name="fit_models", node_count=4)

    assert job.working_dir(tmp_path) == tmp_path / "_rslurm_fit_models"
    assert job.working_dir("/scratch", prefix="job-") == Path("/scratch/job-fit_models")


@pytest.mark.parametrize("name", ["", "   ", None, 42, "a/b", "../escape", ".", ".."])
def test_job_rejects_bad_names(name):
    with pytest.raises(InvalidJobHandle):
        Job(name=name, node_count=1)


@pytest.mark.parametrize("node_count", [0, -3, 1.5, "2", None, True])
def test_job_rejects_bad_node_counts(node_count):
    with pytest.raises(InvalidJobHandle):
        Job(name="abc", node_count=node_count)


def test_invalid_job_handle_is_value_error():
    with pytest.raises(ValueError):
        Job(name="", node_count=1)


def test_job_is_immutable():
    job = Job(name="abc", node_count=1)
    with pytest.raises(AttributeError):
        job.name = "other"


def test_ensure_job_rejects_other_types():
    with pytest.raises(InvalidJobHandle, match="input must be a Job"):
        ensure_job({"name": "abc", "node_count": 1})


def test_job_state_constructors():
    row = StatusRow(raw="1 b abc u R 0:01 1", fields={"ST": "R"})

    active = JobState.active([row], header="JOBID ...")
    terminal = JobState.terminal()

    assert active.phase is JobPhase.ACTIVE
    assert active.is_active and not active.is_terminal
    assert active.rows == (row,)
    assert terminal.is_terminal and not terminal.is_active
    assert terminal.rows == ()


def test_active_state_needs_rows():
    with pytest.raises(ValueError):
        JobState.active([])


def test_status_rows_and_states_are_hashable():
    row = StatusRow(raw="1 b abc u R 0:01 1", fields={"ST": "R"})
    same = StatusRow(raw="1 b abc u R 0:01 1", fields={"ST": "R"})

    assert hash(row) == hash(same)
    assert len({JobState.active([row]), JobState.active([same])}) == 1
