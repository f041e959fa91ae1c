"""
SSH scheduler client.

This module provides a client that runs the Slurm commands on a remote
login node over SSH. Job working directories are expected on a file system
shared with the local machine.
"""

import logging
import os
import shlex
import socket
import time
from typing import Any, Dict, Optional, Tuple

import paramiko

from .base import CommandSchedulerClient
from ..errors import SchedulerCommandError, SchedulerTimeout, SchedulerUnavailable

logger = logging.getLogger(__name__)


def _lookup_host(alias: str) -> Dict[str, Any]:
    """Return the ~/.ssh/config entry for ``alias`` (empty if there is none)."""
    path = os.path.expanduser("~/.ssh/config")
    if not os.path.exists(path):
        return {}
    ssh_config = paramiko.SSHConfig()
    with open(path) as f:
        ssh_config.parse(f)
    return dict(ssh_config.lookup(alias))


class SSHSchedulerClient(CommandSchedulerClient):
    """
    Scheduler client that executes ``squeue``/``scancel`` on a login node.

    Host aliases, users, ports and identity files from ``~/.ssh/config``
    are honoured; explicit arguments take precedence over them.
    """

    def __init__(
        self,
        hostname: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        key_filename: Optional[str] = None,
        port: int = 22,
        env: Optional[Dict[str, str]] = None,
        timeout: int = 10,
        command_timeout: int = 30,
        connection_attempts: int = 3,
        retry_delay: int = 2,
    ):
        """
        Initialize the SSH scheduler client and connect.

        Args:
            hostname: The login node, or a Host alias from ~/.ssh/config.
            username: Remote user. Defaults to the ssh config's User.
            password: Password, if key authentication is not used.
            key_filename: Private key. Defaults to the ssh config's IdentityFile.
            port: SSH port, unless the ssh config names one.
            env: Environment variables set for each remote command.
            timeout: Socket timeout for connecting, in seconds.
            command_timeout: Timeout for each scheduler command, in seconds.
            connection_attempts: Connection attempts before giving up.
            retry_delay: Seconds between connection attempts.

        Raises:
            SchedulerUnavailable: If no connection could be established.
        """
        self.hostname = hostname
        self.username = username
        self.password = password
        self.key_filename = key_filename
        self.port = port
        self.env = env or {}
        self.timeout = timeout
        self.command_timeout = command_timeout
        self.connection_attempts = max(1, connection_attempts)
        self.retry_delay = retry_delay
        self.location = f"on {hostname}"

        self.client = paramiko.SSHClient()
        self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        self._connect()

    def _connect_kwargs(self) -> Dict[str, Any]:
        host = _lookup_host(self.hostname)
        kwargs: Dict[str, Any] = {
            "hostname": host.get("hostname", self.hostname),
            "port": int(host.get("port", self.port)),
            "username": self.username or host.get("user"),
            "password": self.password,
            "timeout": self.timeout,
        }
        identity = self.key_filename or (host.get("identityfile") or [None])[0]
        if identity:
            kwargs["key_filename"] = identity
        return kwargs

    def _connect(self) -> None:
        kwargs = self._connect_kwargs()
        last_error: Optional[Exception] = None
        for attempt in range(1, self.connection_attempts + 1):
            logger.debug(
                "Connecting to %s as %s (attempt %d/%d)",
                kwargs["hostname"],
                kwargs["username"],
                attempt,
                self.connection_attempts,
            )
            try:
                self.client.connect(**kwargs)
            except (paramiko.SSHException, OSError) as e:
                last_error = e
                logger.warning("SSH connection attempt %d failed: %s", attempt, e)
                if attempt < self.connection_attempts:
                    time.sleep(self.retry_delay)
                continue
            logger.info("Connected to %s", self.hostname)
            return

        raise SchedulerUnavailable(
            f"Failed to connect to {self.hostname} after {self.connection_attempts} attempts.\n"
            f"Last error: {last_error}\n"
            f"Check that `ssh {self.hostname}` works from this shell and that "
            "~/.ssh/config is correct."
        )

    def _run_command(self, cmd: str) -> Tuple[str, str, int]:
        if self.env:
            assignments = " ".join(
                f"{key}={shlex.quote(value)}" for key, value in self.env.items()
            )
            remote_cmd = f"env {assignments} {cmd}"
        else:
            remote_cmd = cmd

        logger.debug("Running on %s: %s", self.hostname, remote_cmd)
        try:
            _, stdout, stderr = self.client.exec_command(
                remote_cmd, timeout=self.command_timeout
            )
            return_code = stdout.channel.recv_exit_status()
            out = stdout.read().decode("utf-8", errors="replace")
            err = stderr.read().decode("utf-8", errors="replace")
        except socket.timeout as e:
            raise SchedulerTimeout(
                f"Command on {self.hostname} timed out after "
                f"{self.command_timeout} seconds: {cmd}"
            ) from e
        except (paramiko.SSHException, OSError) as e:
            raise SchedulerCommandError(
                f"Failed to execute command on {self.hostname}: {e}", command=cmd
            ) from e

        logger.debug("Exit code %d from %s", return_code, self.hostname)
        return out, err, return_code

    def close(self) -> None:
        self.client.close()
