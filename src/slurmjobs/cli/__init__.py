"""Command-line interface for slurmjobs.

This module provides the `slurmjobs` CLI command for inspecting and
cleaning up named Slurm jobs.

Usage:
    slurmjobs status <name> [--nodes N] [--env ENV] [--slurmfile PATH] [--base-dir DIR]
    slurmjobs output <name> [--nodes N] [--tail LINES]
    slurmjobs wait <name> [--poll-interval S] [--timeout S]
    slurmjobs cancel <name>
    slurmjobs cleanup <name> [--no-wait] [--poll-interval S] [--timeout S]
"""

from .app import app, main

__all__ = ["app", "main"]
