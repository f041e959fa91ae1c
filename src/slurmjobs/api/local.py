"""
Local scheduler client.

This module provides a client that runs the Slurm commands directly on the
local machine, for use on a login node or inside another Slurm job.
"""

import logging
import os
import subprocess
from typing import Dict, Optional, Tuple

from .base import CommandSchedulerClient
from ..errors import SchedulerCommandError, SchedulerTimeout

logger = logging.getLogger(__name__)


class LocalSchedulerClient(CommandSchedulerClient):
    """
    Scheduler client that executes ``squeue``/``scancel`` as local processes.
    """

    def __init__(
        self,
        env: Optional[Dict[str, str]] = None,
        timeout: int = 30,
        squeue: str = "squeue",
        scancel: str = "scancel",
    ):
        """
        Initialize the local scheduler client.

        Args:
            env: Optional environment variables to use when executing commands.
            timeout: Command timeout in seconds.
            squeue: Name or path of the squeue executable.
            scancel: Name or path of the scancel executable.
        """
        self.env = env or {}
        self.timeout = timeout
        self.squeue = squeue
        self.scancel = scancel

    def _run_command(
        self, cmd: str, timeout: Optional[int] = None
    ) -> Tuple[str, str, int]:
        """
        Run a command on the local system.

        Args:
            cmd: The command to run
            timeout: Timeout in seconds (defaults to self.timeout)

        Returns:
            Tuple[str, str, int]: A tuple of (stdout, stderr, return_code)

        Raises:
            SchedulerTimeout: If the command times out
            SchedulerCommandError: If the command could not be started
        """
        if timeout is None:
            timeout = self.timeout

        env = os.environ.copy()
        env.update(self.env)

        logger.debug("Running command: %s", cmd)
        try:
            result = subprocess.run(
                cmd,
                shell=True,
                capture_output=True,
                text=True,
                timeout=timeout,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise SchedulerTimeout(
                f"Command timed out after {timeout} seconds: {cmd}"
            ) from e
        except OSError as e:
            raise SchedulerCommandError(
                f"Failed to execute command: {e}", command=cmd
            ) from e

        logger.debug("Command exit code: %d", result.returncode)
        if result.stdout:
            logger.debug("Command stdout: %s", result.stdout[:500])
        if result.stderr:
            logger.debug("Command stderr: %s", result.stderr[:500])

        return result.stdout, result.stderr, result.returncode
