"""Tests for Slurmfile settings loading."""

import textwrap
from pathlib import Path

import pytest

from slurmjobs.config import (
    ControllerSettings,
    discover_slurmfile,
    load_settings,
    resolve_slurmfile_path,
    settings_from_mapping,
)
from slurmjobs.errors import (
    SlurmfileEnvironmentNotFoundError,
    SlurmfileInvalidError,
    SlurmfileNotFoundError,
)


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("SLURMFILE", raising=False)
    monkeypatch.delenv("SLURM_ENV", raising=False)


@pytest.fixture
def slurmfile(tmp_path):
    return _write(
        tmp_path / "Slurmfile.toml",
        """
        [default]
        base_dir = "jobs"
        poll_interval = 10

        [production]
        backend = "ssh"
        timeout = 3600

        [production.backend_config]
        hostname = "login.example.org"
        """,
    )


def test_settings_defaults(tmp_path):
    settings = ControllerSettings(base_dir=tmp_path)

    assert settings.dir_prefix == "_rslurm_"
    assert settings.output_template == "slurm_{index}.out"
    assert settings.poll_interval == 5.0
    assert settings.timeout is None
    assert settings.backend == "local"


def test_settings_expand_user(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert ControllerSettings(base_dir="~/jobs").base_dir == tmp_path / "jobs"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"poll_interval": 0},
        {"timeout": -5},
        {"output_template": "slurm.out"},
        {"dir_prefix": ""},
        {"dir_prefix": "jobs/"},
    ],
)
def test_settings_validation(tmp_path, kwargs):
    with pytest.raises(ValueError):
        ControllerSettings(base_dir=tmp_path, **kwargs)


def test_load_default_environment(slurmfile, tmp_path):
    settings = load_settings(slurmfile)

    assert settings.base_dir == tmp_path / "jobs"
    assert settings.poll_interval == 10
    assert settings.backend == "local"


def test_load_named_environment_merges_default(slurmfile):
    settings = load_settings(slurmfile, env="production")

    assert settings.poll_interval == 10
    assert settings.timeout == 3600
    assert settings.backend == "ssh"
    assert settings.backend_config == {"hostname": "login.example.org"}


def test_env_var_selects_environment(slurmfile, monkeypatch):
    monkeypatch.setenv("SLURM_ENV", "production")
    assert load_settings(slurmfile).backend == "ssh"


def test_missing_environment(slurmfile):
    with pytest.raises(SlurmfileEnvironmentNotFoundError):
        load_settings(slurmfile, env="producton")


def test_absolute_base_dir_is_kept(tmp_path):
    target = tmp_path / "elsewhere"
    path = _write(tmp_path / "Slurmfile", f'[default]\nbase_dir = "{target.as_posix()}"\n')

    assert load_settings(path).base_dir == target


def test_pyproject_tool_table(tmp_path):
    path = _write(
        tmp_path / "Slurmfile",
        """
        [tool.slurmjobs.default]
        dir_prefix = "job_"
        """,
    )
    assert load_settings(path).dir_prefix == "job_"


def test_environments_table(tmp_path):
    path = _write(
        tmp_path / "Slurmfile",
        """
        [environments.default]
        poll_interval = 2

        [environments.gpu]
        poll_interval = 30
        """,
    )
    assert load_settings(path, env="gpu").poll_interval == 30


def test_invalid_toml(tmp_path):
    path = _write(tmp_path / "Slurmfile", "[default\nbase_dir = 1\n")
    with pytest.raises(SlurmfileInvalidError):
        load_settings(path)


@pytest.mark.parametrize(
    "config",
    [
        {"base_dir": 3},
        {"poll_interval": "fast"},
        {"timeout": True},
        {"backend_config": "host"},
        {"poll_interval": -1},
    ],
)
def test_settings_from_mapping_rejects_bad_values(config, tmp_path):
    with pytest.raises(SlurmfileInvalidError):
        settings_from_mapping(config, relative_to=tmp_path)


def test_settings_from_mapping_ignores_unknown_keys(tmp_path):
    settings = settings_from_mapping({"hostname": "x", "poll_interval": 1}, relative_to=tmp_path)
    assert settings.poll_interval == 1
    assert settings.base_dir == tmp_path / "."


def test_discover_slurmfile_walks_up(slurmfile, tmp_path):
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    assert discover_slurmfile(nested) == slurmfile.resolve()


def test_discover_slurmfile_missing(tmp_path):
    with pytest.raises(SlurmfileNotFoundError):
        resolve_slurmfile_path(tmp_path / "nope")


def test_slurmfile_env_var(slurmfile, monkeypatch):
    monkeypatch.setenv("SLURMFILE", str(slurmfile.parent))
    assert resolve_slurmfile_path() == slurmfile
