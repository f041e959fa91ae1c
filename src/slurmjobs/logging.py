"""
Logging setup for slurmjobs scripts and the CLI.

Library modules only create loggers; `configure_logging` installs the
handler. Scheduler command lines and their raw output are logged at DEBUG,
so ``SLURMJOBS_LOG_LEVEL=DEBUG`` shows exactly what was sent to Slurm.
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVEL_ENV_VAR = "SLURMJOBS_LOG_LEVEL"


def _level_from_env(default: int) -> int:
    name = os.getenv(LOG_LEVEL_ENV_VAR, "").strip().upper()
    if not name:
        return default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def configure_logging(level: int = logging.INFO, use_rich: bool = True) -> logging.Handler:
    """Send log records to stderr, keeping stdout free for command output.

    Args:
        level: Root logging level. ``SLURMJOBS_LOG_LEVEL`` overrides it.
        use_rich: Install a Rich handler; otherwise a plain stream handler
            with timestamps and logger names.

    Returns:
        logging.Handler: The handler now attached to the root logger.
    """
    level = _level_from_env(level)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.setLevel(level)

    # paramiko reports every transport event at INFO
    logging.getLogger("paramiko").setLevel(max(level, logging.WARNING))

    handler: logging.Handler
    if use_rich:
        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s")
        )
    root.addHandler(handler)
    return handler
