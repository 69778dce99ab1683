#!/usr/bin/env python3
"""
entrypoint.py
- Manual entrypoint for triggering the network check via `docker exec`.
- Usage:
    docker exec <container> python /src/cli/entrypoint.py [run|once|cleanup]

- `cleanup` removes probe task groups orphaned by a killed run.
"""

import sys

from docker.errors import DockerException
from loguru import logger

from core.config import configure_logging
from core.config_loader import load_task_group_prefix
from lib.netcheck.cluster_client import SwarmClusterClient
from lib.netcheck.exceptions import ClusterClientError
from runner import network_check


def usage():
    print("Usage: python entrypoint.py <command>")
    print("Available commands:")
    print("  run       Run the network check loop until stopped")
    print("  once      Run a single network check cycle and exit")
    print("  cleanup   Remove leftover probe task groups from the cluster")
    sys.exit(1)


def cleanup(cluster=None, prefix=None):
    """
    Delete every service carrying the task group prefix.

    Returns:
        int: Number of groups that could not be removed.
    """
    prefix = prefix or load_task_group_prefix()
    try:
        cluster = cluster or SwarmClusterClient()
        groups = cluster.list_task_groups(prefix)
    except (ClusterClientError, DockerException) as e:
        logger.error(f"[cleanup] {e}")
        return 1

    if not groups:
        logger.info(f"[cleanup] No task groups matching {prefix}* found.")
        return 0

    failures = 0
    for name in groups:
        if not cluster.delete_task_group(name):
            failures += 1
    logger.info(f"[cleanup] Removed {len(groups) - failures} of {len(groups)} task group(s).")
    return failures


def main(argv=None):
    argv = sys.argv if argv is None else argv
    if len(argv) != 2:
        usage()

    configure_logging()
    command = argv[1]

    if command == "run":
        network_check.run(once=False)
    elif command == "once":
        network_check.run(once=True)
    elif command == "cleanup":
        sys.exit(1 if cleanup() else 0)
    else:
        print(f"❌ Unknown command: {command}")
        usage()


if __name__ == "__main__":
    main()
