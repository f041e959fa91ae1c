"""
This package provides clients for issuing scheduler commands to a Slurm
cluster through various backends.
"""

from typing import Any, Dict

from .base import CommandSchedulerClient, SchedulerClient
from .local import LocalSchedulerClient


def create_client(backend_type: str, **kwargs: Any) -> SchedulerClient:
    """
    Create a scheduler client of the specified type.

    Args:
        backend_type: The type of client to create ("local" or "ssh").
        **kwargs: Additional arguments to pass to the client constructor.

    Returns:
        A scheduler client instance.

    Raises:
        ValueError: If the specified backend type is not supported.
    """
    # Filter out None values to keep constructor defaults
    client_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    if backend_type == "local":
        return LocalSchedulerClient(**client_kwargs)
    elif backend_type == "ssh":
        from .ssh import SSHSchedulerClient

        return SSHSchedulerClient(**client_kwargs)
    else:
        raise ValueError(f"Unsupported backend type: {backend_type}")


def get_client_from_config(config: Dict[str, Any]) -> SchedulerClient:
    """
    Create a scheduler client based on a configuration dictionary.

    The configuration dictionary should have a "backend" key specifying the
    client type, and an optional "backend_config" table of constructor
    arguments.

    Raises:
        ValueError: If the configuration is invalid.
    """
    if "backend" not in config:
        raise ValueError("Configuration must specify a 'backend' key.")

    backend_type = config["backend"]
    backend_config = config.get("backend_config") or {}

    return create_client(backend_type, **backend_config)


__all__ = [
    "CommandSchedulerClient",
    "SchedulerClient",
    "LocalSchedulerClient",
    "create_client",
    "get_client_from_config",
]
