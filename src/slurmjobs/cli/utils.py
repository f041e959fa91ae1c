"""Shared utilities for the slurmjobs CLI."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Optional

from ..api import get_client_from_config
from ..config import ControllerSettings, load_settings
from ..controller import JobController
from ..errors import SlurmfileNotFoundError

logger = logging.getLogger(__name__)


def get_settings(
    env: Optional[str] = None,
    slurmfile: Optional[str] = None,
    base_dir: Optional[str] = None,
) -> ControllerSettings:
    """Resolve settings from CLI args.

    An explicit ``--slurmfile`` or ``--env`` must resolve. Otherwise a missing
    Slurmfile falls back to defaults rooted at ``--base-dir`` or the current
    directory. ``--base-dir`` always wins over the Slurmfile's value.
    """
    try:
        settings = load_settings(slurmfile, env=env)
    except SlurmfileNotFoundError:
        if slurmfile is not None or env is not None:
            raise
        logger.debug("No Slurmfile found, using default settings")
        settings = ControllerSettings(base_dir=Path.cwd())

    if base_dir is not None:
        settings = dataclasses.replace(settings, base_dir=Path(base_dir))
    return settings


def get_controller(
    env: Optional[str] = None,
    slurmfile: Optional[str] = None,
    base_dir: Optional[str] = None,
) -> JobController:
    """Create a JobController from CLI args."""
    settings = get_settings(env=env, slurmfile=slurmfile, base_dir=base_dir)
    client = get_client_from_config(
        {"backend": settings.backend, "backend_config": settings.backend_config}
    )
    return JobController(client, settings)
