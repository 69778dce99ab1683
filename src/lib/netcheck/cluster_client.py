"""
cluster_client.py
- Thin synchronous gateway to the Swarm control plane for probe task groups.
- Creates global, run-once services, counts nodes and terminal tasks, pulls task logs, removes groups.
- Read-side calls retry a bounded number of times; creation failures are fatal.
"""

from docker.errors import APIError, NotFound
from docker.types import RestartPolicy, ServiceMode
from loguru import logger
from requests.exceptions import ConnectionError as RequestsConnectionError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from core.constants import (
    TERMINAL_TASK_STATES,
    TRANSIENT_RETRY_ATTEMPTS,
    TRANSIENT_RETRY_MAX_WAIT,
    TRANSIENT_RETRY_MIN_WAIT,
)
from lib.common.docker_helpers import get_task_logs
from lib.netcheck.exceptions import ClusterClientError, ClusterCommandError, TaskGroupCreateError
from lib.netcheck.models import TaskGroupDescriptor

TRANSIENT_ERRORS = (APIError, RequestsConnectionError, ClusterCommandError)


def _log_retry(retry_state):
    logger.warning(
        f"[cluster] {retry_state.fn.__name__} failed (attempt {retry_state.attempt_number}/"
        f"{TRANSIENT_RETRY_ATTEMPTS}): {retry_state.outcome.exception()}. Retrying..."
    )


transient_retry = retry(
    reraise=True,
    stop=stop_after_attempt(TRANSIENT_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=1, min=TRANSIENT_RETRY_MIN_WAIT, max=TRANSIENT_RETRY_MAX_WAIT),
    retry=retry_if_exception_type(TRANSIENT_ERRORS),
    before_sleep=_log_retry,
)


class SwarmClusterClient:
    """Docker SDK implementation of the probe's control-plane operations."""

    def __init__(self, client=None):
        if client is None:
            from core.docker_client import client as shared_client
            client = shared_client
        if client is None:
            raise ClusterClientError("Docker daemon is not reachable (no client available)")
        self.client = client

    # --- Task group lifecycle ---

    def create_probe_task_group(self, name, network, image, env):
        """
        Run one task of `image` on every node, attached to `network`, never restarted.

        Args:
            name (str): Service name for the task group.
            network (str): Overlay network to attach.
            image (str): Diagnostic image reference.
            env (dict): Environment for each task (values may use Swarm templates).

        Returns:
            TaskGroupDescriptor

        Raises:
            TaskGroupCreateError: Any control-plane failure. Not retried.
        """
        self._remove_leftover(name)
        try:
            service = self.client.services.create(
                image,
                name=name,
                networks=[network],
                mode=ServiceMode("global"),
                env=[f"{key}={value}" for key, value in env.items()],
                restart_policy=RestartPolicy(condition="none"),
            )
        except (APIError, RequestsConnectionError) as e:
            raise TaskGroupCreateError(name, network, e) from e

        logger.info(f"[cluster] Created task group {name} on network {network} ({image})")
        return TaskGroupDescriptor(
            name=name,
            network=network,
            image=image,
            env=tuple(sorted(env.items())),
            service_id=getattr(service, "id", None),
        )

    def _remove_leftover(self, name):
        # A killed run can leave a group behind under the same name.
        try:
            leftovers = [s for s in self.client.services.list(filters={"name": name}) if s.name == name]
        except (APIError, RequestsConnectionError) as e:
            logger.debug(f"[cluster] Could not check for leftover group {name}: {e}")
            return
        for service in leftovers:
            logger.warning(f"[cluster] Removing leftover task group {name} from a previous run")
            self.delete_task_group(name)

    def delete_task_group(self, name):
        """
        Remove a task group. Best effort.

        Returns:
            bool: True if the group is gone, False if removal failed.
        """
        try:
            self.client.services.get(name).remove()
        except NotFound:
            logger.debug(f"[cluster] Task group {name} already removed")
            return True
        except (APIError, RequestsConnectionError) as e:
            logger.error(f"[cluster] Failed to delete task group {name}: {e}")
            return False
        logger.info(f"[cluster] Deleted task group {name}")
        return True

    def list_task_groups(self, prefix):
        """Names of all services whose name starts with `prefix`."""
        return sorted(s.name for s in self.client.services.list() if s.name.startswith(prefix))

    # --- Read side ---

    @transient_retry
    def count_nodes(self):
        return len(self.client.nodes.list())

    @transient_retry
    def list_node_hostnames(self):
        return sorted(
            n.attrs.get("Description", {}).get("Hostname", n.id)
            for n in self.client.nodes.list()
        )

    @transient_retry
    def _tasks(self, group_name):
        return self.client.services.get(group_name).tasks()

    def count_terminal_tasks(self, group_name):
        """How many of the group's tasks reached a state they will never leave."""
        tasks = self._tasks(group_name)
        return sum(
            1 for task in tasks
            if (task.get("Status", {}).get("State") or "").lower() in TERMINAL_TASK_STATES
        )

    def list_task_ids(self, group_name):
        return [task["ID"] for task in self._tasks(group_name) if task.get("ID")]

    @transient_retry
    def fetch_task_output(self, task_id):
        return get_task_logs(task_id)
