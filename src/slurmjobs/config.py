"""Loading of controller settings from a project Slurmfile.

A Slurmfile is a TOML file with one table per environment. Settings from a
``[default]`` table are deep-merged under the selected environment::

    [default]
    base_dir = "~/scratch/jobs"
    poll_interval = 10

    [production]
    backend = "ssh"
    timeout = 3600

    [production.backend_config]
    hostname = "login.cluster.example.org"

The same tables may live under ``[tool.slurmjobs]`` in ``pyproject.toml``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

try:  # pragma: no cover - import guard
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - python <3.11 fallback
    import tomli as tomllib  # type: ignore[assignment]

from .errors import (
    SlurmfileEnvironmentNotFoundError,
    SlurmfileInvalidError,
    SlurmfileNotFoundError,
)
from .job import DEFAULT_DIR_PREFIX
from .output import DEFAULT_OUTPUT_TEMPLATE

logger = logging.getLogger(__name__)

TOMLDecodeError = getattr(tomllib, "TOMLDecodeError", ValueError)

SLURM_ENV_VAR = "SLURM_ENV"
SLURMFILE_ENV_VAR = "SLURMFILE"
DEFAULT_SLURMFILE_NAMES = (
    "Slurmfile",
    "Slurmfile.toml",
    "slurmfile",
    "slurmfile.toml",
)

PathLike = Union[str, os.PathLike]


@dataclass
class ControllerSettings:
    """Where job directories live, how they are named, and how to wait.

    Attributes:
        base_dir: Directory containing the ``<dir_prefix><job name>`` folders.
        dir_prefix: Prefix of each job's working directory name.
        output_template: Per-node output file name, with an ``{index}`` field.
        poll_interval: Default seconds between status queries while waiting.
        timeout: Default seconds to wait for a job, or None to wait forever.
        backend: Scheduler client type ("local" or "ssh").
        backend_config: Keyword arguments for the scheduler client.
    """

    base_dir: Path
    dir_prefix: str = DEFAULT_DIR_PREFIX
    output_template: str = DEFAULT_OUTPUT_TEMPLATE
    poll_interval: float = 5.0
    timeout: Optional[float] = None
    backend: str = "local"
    backend_config: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.base_dir = Path(os.path.expandvars(str(self.base_dir))).expanduser()
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.timeout is not None and self.timeout < 0:
            raise ValueError(f"timeout must be non-negative, got {self.timeout}")
        separators = {"/", os.sep}
        if not self.dir_prefix or any(sep in self.dir_prefix for sep in separators):
            raise ValueError(
                f"dir_prefix must be non-empty without path separators, got {self.dir_prefix!r}"
            )
        if "{index" not in self.output_template:
            raise ValueError(
                f"output_template must contain an '{{index}}' field, got {self.output_template!r}"
            )


_NUMBER_KEYS = ("poll_interval", "timeout")
_STRING_KEYS = ("base_dir", "dir_prefix", "output_template", "backend")


def settings_from_mapping(
    config: Dict[str, Any], *, relative_to: Optional[PathLike] = None
) -> ControllerSettings:
    """Build settings from a resolved environment table.

    A relative ``base_dir`` is taken relative to ``relative_to`` (the
    Slurmfile's directory) when given.
    """
    known = {f.name for f in fields(ControllerSettings)}
    values: Dict[str, Any] = {}
    for key, value in config.items():
        if key not in known:
            logger.debug("Ignoring unknown Slurmfile key '%s'", key)
            continue
        if key in _STRING_KEYS and not isinstance(value, str):
            raise SlurmfileInvalidError(f"'{key}' must be a string, got {value!r}.")
        if key in _NUMBER_KEYS and (
            isinstance(value, bool) or not isinstance(value, (int, float))
        ):
            raise SlurmfileInvalidError(f"'{key}' must be a number, got {value!r}.")
        if key == "backend_config" and not isinstance(value, dict):
            raise SlurmfileInvalidError("'backend_config' must be a table.")
        values[key] = value

    base_dir = Path(values.pop("base_dir", "."))
    base_dir = Path(os.path.expandvars(str(base_dir))).expanduser()
    if not base_dir.is_absolute() and relative_to is not None:
        base_dir = Path(relative_to) / base_dir

    try:
        return ControllerSettings(base_dir=base_dir, **values)
    except ValueError as exc:
        raise SlurmfileInvalidError(str(exc)) from exc


def load_settings(
    slurmfile: Optional[PathLike] = None,
    *,
    env: Optional[str] = None,
    start_dir: Optional[PathLike] = None,
) -> ControllerSettings:
    """Load controller settings for an environment of a Slurmfile."""

    resolved_path = resolve_slurmfile_path(slurmfile, start_dir=start_dir)
    raw_data = _read_toml(resolved_path)
    root_table = _extract_root_table(raw_data)
    env_table = _extract_environment_table(root_table)

    env_name = (env or os.getenv(SLURM_ENV_VAR) or "default").strip() or "default"
    resolved_config = _resolve_environment_config(root_table, env_table, env_name)
    logger.debug("Loaded environment '%s' from %s", env_name, resolved_path)

    return settings_from_mapping(resolved_config, relative_to=resolved_path.parent)


def resolve_slurmfile_path(
    slurmfile: Optional[PathLike] = None,
    *,
    start_dir: Optional[PathLike] = None,
) -> Path:
    """Pick the Slurmfile to load.

    An explicit ``slurmfile`` wins, then the ``SLURMFILE`` environment
    variable, then upward discovery from ``start_dir``. Explicit paths may
    name a directory containing a Slurmfile.
    """
    hint = slurmfile if slurmfile is not None else os.getenv(SLURMFILE_ENV_VAR)
    if not hint:
        return discover_slurmfile(start_dir=start_dir)

    path = Path(hint).expanduser()
    if path.is_file():
        return path
    if path.is_dir():
        found = _find_in_directory(path)
        if found is not None:
            return found
        raise SlurmfileNotFoundError(
            f"Slurmfile not found inside directory '{path}'. Checked {DEFAULT_SLURMFILE_NAMES}."
        )
    raise SlurmfileNotFoundError(f"Slurmfile path '{path}' does not exist.")


def discover_slurmfile(start_dir: Optional[PathLike] = None) -> Path:
    """Search ``start_dir`` (or ``cwd``) and its parents for a Slurmfile."""

    start = Path(start_dir).expanduser() if start_dir is not None else Path.cwd()
    start = start.resolve()

    for directory in (start, *start.parents):
        found = _find_in_directory(directory)
        if found is not None:
            return found

    raise SlurmfileNotFoundError(
        f"No Slurmfile found starting from '{start}'. Checked {DEFAULT_SLURMFILE_NAMES}."
    )


def _find_in_directory(directory: Path) -> Optional[Path]:
    for name in DEFAULT_SLURMFILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except TOMLDecodeError as exc:
        raise SlurmfileInvalidError(f"Invalid TOML in Slurmfile '{path}'.") from exc


def _extract_root_table(data: Dict[str, Any]) -> Dict[str, Any]:
    """Use ``[tool.slurmjobs]`` when the file is a pyproject.toml."""
    tool = data.get("tool")
    if isinstance(tool, dict) and isinstance(tool.get("slurmjobs"), dict):
        return tool["slurmjobs"]
    return data


def _extract_environment_table(root: Dict[str, Any]) -> Dict[str, Any]:
    environments = root.get("environments")
    return environments if isinstance(environments, dict) else root


def _resolve_environment_config(
    root_table: Dict[str, Any],
    env_table: Dict[str, Any],
    env_name: str,
) -> Dict[str, Any]:
    layers = [("[default]", root_table.get("default"))]
    if env_table is not root_table:
        layers.append(("[environments.default]", env_table.get("default")))
    if env_name != "default":
        if env_name not in env_table:
            raise SlurmfileEnvironmentNotFoundError(
                f"Environment '{env_name}' not defined in Slurmfile."
            )
        layers.append((f"[{env_name}]", env_table[env_name]))

    result: Dict[str, Any] = {}
    for label, table in layers:
        if table is None:
            continue
        if not isinstance(table, dict):
            raise SlurmfileInvalidError(f"{label} section must be a table.")
        result = _deep_merge(result, table)
    return result


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
