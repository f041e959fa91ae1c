"""Tests for logging configuration."""

import logging

import pytest
from rich.logging import RichHandler

from slurmjobs.logging import configure_logging


@pytest.fixture(autouse=True)
def _restore_root_logger(monkeypatch):
    monkeypatch.delenv("SLURMJOBS_LOG_LEVEL", raising=False)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_installs_single_rich_handler():
    configure_logging()
    configure_logging()

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)
    assert root.level == logging.INFO


def test_plain_handler():
    handler = configure_logging(logging.DEBUG, use_rich=False)

    assert type(handler) is logging.StreamHandler
    assert logging.getLogger().level == logging.DEBUG


def test_env_var_overrides_level(monkeypatch):
    monkeypatch.setenv("SLURMJOBS_LOG_LEVEL", "debug")
    configure_logging(logging.WARNING)
    assert logging.getLogger().level == logging.DEBUG


def test_unknown_env_level_is_ignored(monkeypatch):
    monkeypatch.setenv("SLURMJOBS_LOG_LEVEL", "chatty")
    configure_logging(logging.WARNING)
    assert logging.getLogger().level == logging.WARNING


def test_paramiko_is_quieted():
    configure_logging(logging.DEBUG)
    assert logging.getLogger("paramiko").level == logging.WARNING
