import pytest

from cli import entrypoint
from conftest import FakeCluster


class PrefixCluster(FakeCluster):
    def list_task_groups(self, prefix):
        return sorted(name for name in self.groups if name.startswith(prefix))


def test_cleanup_removes_leftover_groups():
    cluster = PrefixCluster(["swarm-worker-1"])
    cluster.groups = {"network-checker-web": "web", "network-checker-internal": "internal", "traefik": "web"}

    assert entrypoint.cleanup(cluster, prefix="network-checker") == 0
    assert cluster.calls_named("delete") == [
        ("delete", "network-checker-internal"),
        ("delete", "network-checker-web"),
    ]
    assert list(cluster.groups) == ["traefik"]


def test_cleanup_reports_failures():
    cluster = PrefixCluster(["swarm-worker-1"], delete_ok=False)
    cluster.groups = {"network-checker-web": "web"}
    assert entrypoint.cleanup(cluster, prefix="network-checker") == 1


def test_unknown_command_exits_non_zero():
    with pytest.raises(SystemExit) as excinfo:
        entrypoint.main(["entrypoint.py", "bogus"])
    assert excinfo.value.code == 1


def test_missing_command_exits_non_zero():
    with pytest.raises(SystemExit) as excinfo:
        entrypoint.main(["entrypoint.py"])
    assert excinfo.value.code == 1
