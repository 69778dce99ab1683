from unittest.mock import MagicMock

import pytest
from docker.errors import APIError, DockerException, NotFound
from docker.types import ServiceMode

from lib.netcheck import cluster_client as cluster_client_module
from lib.netcheck.cluster_client import SwarmClusterClient
from lib.netcheck.exceptions import ClusterClientError, ClusterCommandError, TaskGroupCreateError


@pytest.fixture(autouse=True)
def no_retry_sleep(monkeypatch):
    for fn in (
        SwarmClusterClient.count_nodes,
        SwarmClusterClient.list_node_hostnames,
        SwarmClusterClient._tasks,
        SwarmClusterClient.fetch_task_output,
    ):
        monkeypatch.setattr(fn.retry, "sleep", lambda seconds: None)


@pytest.fixture
def docker_client():
    client = MagicMock()
    client.services.list.return_value = []
    return client


def _service(name):
    service = MagicMock()
    service.name = name
    return service


def test_create_runs_global_service_without_restarts(docker_client):
    docker_client.services.create.return_value = MagicMock(id="svc123")
    cluster = SwarmClusterClient(docker_client)

    group = cluster.create_probe_task_group(
        "network-checker-web", "web", "tester/network-checker:latest", {"NODE_NAME": "{{.Node.Hostname}}"}
    )

    args, kwargs = docker_client.services.create.call_args
    assert args == ("tester/network-checker:latest",)
    assert kwargs["name"] == "network-checker-web"
    assert kwargs["networks"] == ["web"]
    assert kwargs["mode"] == ServiceMode("global")
    assert kwargs["restart_policy"]["Condition"] == "none"
    assert kwargs["env"] == ["NODE_NAME={{.Node.Hostname}}"]
    assert group.service_id == "svc123"
    assert group.network == "web"


def test_create_removes_leftover_group_first(docker_client):
    leftover = _service("network-checker-web")
    docker_client.services.list.return_value = [_service("network-checker-web-old"), leftover]
    cluster = SwarmClusterClient(docker_client)

    cluster.create_probe_task_group("network-checker-web", "web", "img", {})

    docker_client.services.get.assert_called_once_with("network-checker-web")
    docker_client.services.get.return_value.remove.assert_called_once()


def test_create_failure_raises_fatal_error(docker_client):
    docker_client.services.create.side_effect = APIError("network web not found")
    cluster = SwarmClusterClient(docker_client)

    with pytest.raises(TaskGroupCreateError) as excinfo:
        cluster.create_probe_task_group("network-checker-web", "web", "img", {})
    assert excinfo.value.network == "web"
    assert docker_client.services.create.call_count == 1


def test_count_terminal_tasks(docker_client):
    docker_client.services.get.return_value.tasks.return_value = [
        {"ID": "a", "Status": {"State": "complete"}},
        {"ID": "b", "Status": {"State": "running"}},
        {"ID": "c", "Status": {"State": "failed"}},
        {"ID": "d", "Status": {"State": "shutdown"}},
        {"ID": "e", "Status": {"State": "preparing"}},
        {"ID": "f", "Status": {}},
    ]
    cluster = SwarmClusterClient(docker_client)

    assert cluster.count_terminal_tasks("network-checker-web") == 3
    assert cluster.list_task_ids("network-checker-web") == ["a", "b", "c", "d", "e", "f"]


def test_count_nodes_and_hostnames(docker_client):
    nodes = [MagicMock(attrs={"Description": {"Hostname": h}}) for h in ("swarm-worker-2", "swarm-worker-1")]
    docker_client.nodes.list.return_value = nodes
    cluster = SwarmClusterClient(docker_client)

    assert cluster.count_nodes() == 2
    assert cluster.list_node_hostnames() == ["swarm-worker-1", "swarm-worker-2"]


def test_transient_failure_is_retried(docker_client):
    docker_client.nodes.list.side_effect = [APIError("temporarily unavailable"), [MagicMock(), MagicMock()]]
    cluster = SwarmClusterClient(docker_client)

    assert cluster.count_nodes() == 2
    assert docker_client.nodes.list.call_count == 2


def test_retries_are_bounded(docker_client):
    docker_client.nodes.list.side_effect = APIError("daemon gone")
    cluster = SwarmClusterClient(docker_client)

    with pytest.raises(APIError):
        cluster.count_nodes()
    assert docker_client.nodes.list.call_count == 3


def test_fetch_task_output_retries_cli_errors(docker_client, monkeypatch):
    responses = [ClusterCommandError(["docker"], returncode=1), "n1:DNS_NO_IPS:svc\n"]

    def fake_logs(task_id):
        response = responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(cluster_client_module, "get_task_logs", fake_logs)
    cluster = SwarmClusterClient(docker_client)

    assert cluster.fetch_task_output("t1") == "n1:DNS_NO_IPS:svc\n"


def test_delete_task_group(docker_client):
    cluster = SwarmClusterClient(docker_client)
    assert cluster.delete_task_group("network-checker-web") is True

    docker_client.services.get.side_effect = NotFound("gone")
    assert cluster.delete_task_group("network-checker-web") is True

    docker_client.services.get.side_effect = APIError("busy")
    assert cluster.delete_task_group("network-checker-web") is False


def test_list_task_groups_filters_by_prefix(docker_client):
    docker_client.services.list.return_value = [
        _service("network-checker-web"),
        _service("traefik"),
        _service("network-checker-internal"),
    ]
    cluster = SwarmClusterClient(docker_client)
    assert cluster.list_task_groups("network-checker") == ["network-checker-internal", "network-checker-web"]


def test_missing_docker_client(monkeypatch):
    import core.docker_client

    monkeypatch.setattr(core.docker_client, "client", None)
    with pytest.raises(ClusterClientError):
        SwarmClusterClient()


def test_connect_returns_none_without_daemon(monkeypatch):
    import core.docker_client

    def unreachable():
        raise DockerException("Error while fetching server API version")

    monkeypatch.setattr(core.docker_client.docker, "from_env", unreachable)
    assert core.docker_client.connect() is None


def test_connect_returns_sdk_client(monkeypatch):
    import core.docker_client

    sdk_client = MagicMock()
    monkeypatch.setattr(core.docker_client.docker, "from_env", lambda: sdk_client)
    assert core.docker_client.connect() is sdk_client
