"""
task_diagnostics.py
- Utility to inspect and log task-level state for a probe task group.
- Used when a task group never reaches a fully terminal state.
"""

from loguru import logger

from lib.common.docker_helpers import run_docker
from lib.netcheck.exceptions import ClusterCommandError


def log_task_status(service_name: str, context: str = "unknown"):
    """
    Logs the output of `docker service ps --no-trunc` for a given service.
    Used to diagnose which nodes kept a task group from finishing.

    Args:
        service_name (str): The task group name (e.g. "network-checker-web").
        context (str): Caller context (e.g. "stuck-poll").
    """
    try:
        output = run_docker(["service", "ps", "--no-trunc", service_name], timeout=5).strip()
    except ClusterCommandError as e:
        logger.debug(f"[task_diagnostics] Could not inspect {service_name} ({context}): {e}")
        return

    if output:
        logger.warning(f"[task_diagnostics] Task status for {service_name} ({context}):\n{output}")
    else:
        logger.debug(f"[task_diagnostics] No task output returned for {service_name} ({context})")
