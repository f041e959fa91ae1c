#!/usr/bin/env python3
"""Wait for a named job, print each node's output, then remove its folder.

Usage:
    python examples/wait_and_cleanup.py JOB_NAME NODES [--base-dir DIR]

Ctrl-C stops the wait immediately without deleting anything.
"""

import argparse
import logging
import signal
import threading

from slurmjobs import (
    ControllerSettings,
    Job,
    JobController,
    LocalSchedulerClient,
    WaitCancelled,
    WaitTimedOut,
)
from slurmjobs.logging import configure_logging

logger = logging.getLogger("wait_and_cleanup")


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("name")
    parser.add_argument("nodes", type=int)
    parser.add_argument("--base-dir", default=".")
    parser.add_argument("--timeout", type=float, default=3600)
    args = parser.parse_args()

    configure_logging()

    stop = threading.Event()
    signal.signal(signal.SIGINT, lambda *_: stop.set())

    controller = JobController(
        LocalSchedulerClient(),
        ControllerSettings(base_dir=args.base_dir, poll_interval=10, timeout=args.timeout),
    )
    job = Job(name=args.name, node_count=args.nodes)

    try:
        controller.wait_until_done(job, cancel_event=stop)
    except (WaitTimedOut, WaitCancelled) as exc:
        logger.warning("%s Leaving %s in place.", exc, controller.working_dir(job))
        return 1

    print(controller.report(job).render())
    controller.cleanup(job, wait=False)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
