"""
docker_helpers.py
- Provides low-level helpers for interacting with Docker via subprocess when the SDK is insufficient.
- Used for per-task log retrieval and for reading the registry login of the local CLI.
"""

import shutil
import subprocess

from loguru import logger

from core.constants import CLI_TIMEOUT
from lib.netcheck.exceptions import ClusterCommandError


def docker_binary():
    return shutil.which("docker") or "/usr/bin/docker"


def run_docker(args, timeout=CLI_TIMEOUT, merge_stderr=False):
    """
    Run a docker CLI command and return its stdout.

    Args:
        args (list[str]): Arguments after `docker`.
        timeout (int): Seconds before the call is abandoned.
        merge_stderr (bool): Fold stderr into the returned text.

    Raises:
        ClusterCommandError: Non-zero exit, timeout, or missing binary.
    """
    command = [docker_binary(), *args]
    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise ClusterCommandError(command, output=str(e)) from e

    if result.returncode != 0:
        output = result.stdout if merge_stderr else (result.stderr or result.stdout)
        raise ClusterCommandError(command, returncode=result.returncode, output=(output or "").strip())
    return result.stdout


def get_task_logs(task_id):
    """
    Return the raw combined stdout/stderr of one Swarm task.
    The SDK only exposes service-level logs, so this goes through `docker service logs`.
    """
    return run_docker(["service", "logs", "--raw", "--no-trunc", task_id], merge_stderr=True)


def get_registry_username():
    """
    Read the logged-in registry user from `docker info`.

    Returns:
        str or None: Username, or None if the CLI is not logged in.
    """
    try:
        output = run_docker(["info"])
    except ClusterCommandError as e:
        logger.error(f"[docker_helpers] Could not run docker info: {e}")
        return None

    for line in output.splitlines():
        line = line.strip()
        if line.startswith("Username:"):
            username = line[len("Username:"):].strip()
            return username or None
    return None
