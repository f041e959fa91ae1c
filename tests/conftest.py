import os
import sys

import pytest


# Ensure 'src' and the tests directory are on sys.path for package imports in tests
TESTS_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(TESTS_DIR, os.pardir))
SRC_DIR = os.path.join(PROJECT_ROOT, "src")
for path in (SRC_DIR, TESTS_DIR):
    if path not in sys.path:
        sys.path.insert(0, path)

from slurmjobs.config import ControllerSettings  # noqa: E402
from slurmjobs.controller import JobController  # noqa: E402
from slurmjobs.job import Job  # noqa: E402

from helpers.fake_scheduler import FakeSchedulerClient  # noqa: E402


@pytest.fixture
def fake_client():
    return FakeSchedulerClient()


@pytest.fixture
def settings(tmp_path):
    return ControllerSettings(base_dir=tmp_path, poll_interval=0.01, timeout=1.0)


@pytest.fixture
def controller(fake_client, settings):
    return JobController(fake_client, settings)


@pytest.fixture
def job():
    return Job(name="abc", node_count=3)
