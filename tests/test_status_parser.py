"""Tests for parsing squeue output."""

import pytest

from slurmjobs.job import JobPhase
from slurmjobs.status import parse_status, summarize_rows

HEADER = "JOBID PARTITION NAME USER ST TIME NODES"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "\n\n",
        "   \n",
        f"{HEADER}\n",
        f"\n{HEADER}\n   \n",
    ],
)
def test_zero_or_one_line_is_terminal(raw):
    state = parse_status(raw)

    assert state.phase is JobPhase.TERMINAL
    assert state.is_terminal
    assert state.rows == ()


def test_terminal_keeps_lone_header():
    state = parse_status(f"{HEADER}\n")
    assert state.header == HEADER


def test_none_is_terminal():
    assert parse_status(None).is_terminal


def test_single_running_row():
    state = parse_status(f"{HEADER}\n123 batch abc u1 R 0:05 1\n")

    assert state.is_active
    assert len(state.rows) == 1
    row = state.rows[0]
    assert row.raw == "123 batch abc u1 R 0:05 1"
    assert row.job_id == "123"
    assert row.state == "R"
    assert row.elapsed == "0:05"


def test_rows_keep_scheduler_order():
    raw = (
        f"{HEADER}\n"
        "130_[3-7] batch abc u1 PD 0:00 1\n"
        "130_0 batch abc u1 R 1:02 1\n"
        "130_1 batch abc u1 R 1:02 1\n"
        "130_2 batch abc u1 R 0:40 1\n"
    )
    state = parse_status(raw)

    assert [row.job_id for row in state.rows] == ["130_[3-7]", "130_0", "130_1", "130_2"]
    assert len(state.rows) == 4


def test_pending_rows_are_kept_like_running_rows():
    state = parse_status(f"{HEADER}\n200 batch abc u1 PD 0:00 2\n")

    assert state.is_active
    assert state.rows[0].state == "PD"
    assert state.rows[0].raw == "200 batch abc u1 PD 0:00 2"


def test_blank_lines_between_rows_are_ignored():
    state = parse_status(f"{HEADER}\n\n1 b abc u R 0:01 1\n\n2 b abc u R 0:01 1\n")
    assert len(state.rows) == 2


def test_trailing_reason_with_spaces_is_one_field():
    header = "JOBID PARTITION NAME USER ST TIME NODES NODELIST(REASON)"
    state = parse_status(f"{header}\n5 batch abc u1 PD 0:00 1 (Resources, Priority)\n")

    row = state.rows[0]
    assert row.fields["NODELIST(REASON)"] == "(Resources, Priority)"
    assert row.raw.endswith("(Resources, Priority)")


def test_short_row_leaves_missing_columns_out():
    state = parse_status(f"{HEADER}\n9 batch\n")

    row = state.rows[0]
    assert row.job_id == "9"
    assert row.state is None
    assert row.raw == "9 batch"


def test_summarize_rows_counts_states():
    raw = (
        f"{HEADER}\n"
        "1 b abc u R 0:01 1\n"
        "2 b abc u R 0:01 1\n"
        "3 b abc u PD 0:00 1\n"
    )
    assert summarize_rows(parse_status(raw).rows) == {"R": 2, "PD": 1}


def test_raw_row_keeps_trailing_whitespace():
    state = parse_status(f"{HEADER}\r\n1 b abc u R 0:01 1   \r\n")

    assert state.header == HEADER
    assert state.rows[0].raw == "1 b abc u R 0:01 1   "
    assert state.rows[0].fields["NODES"] == "1"
