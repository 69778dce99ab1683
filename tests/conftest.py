"""Shared pytest fixtures for the network check tests."""

import io
import threading

import pytest

from lib.netcheck.models import ProbeConfig, TaskGroupDescriptor


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now


class InstantEvent(threading.Event):
    """Stop event whose waits return immediately and advance a fake clock."""

    def __init__(self, clock=None, stop_after_waits=None):
        super().__init__()
        self.clock = clock
        self.waits = []
        self.stop_after_waits = stop_after_waits

    def wait(self, timeout=None):
        self.waits.append(timeout)
        if self.clock is not None and timeout:
            self.clock.now += timeout
        if self.stop_after_waits is not None and len(self.waits) >= self.stop_after_waits:
            self.set()
        return self.is_set()


class FakeCluster:
    """
    In-memory control plane.

    outputs: {network: {task_id: raw output}}
    terminal_schedule: successive count_terminal_tasks answers; the last one repeats.
    """

    def __init__(self, nodes, outputs=None, terminal_schedule=None, delete_ok=True):
        self.nodes = list(nodes)
        self.outputs = outputs or {}
        self.terminal_schedule = list(terminal_schedule) if terminal_schedule else None
        self.delete_ok = delete_ok
        self.groups = {}
        self.calls = []
        self.fetch_error = None

    def create_probe_task_group(self, name, network, image, env):
        self.calls.append(("create", name))
        self.groups[name] = network
        return TaskGroupDescriptor(name=name, network=network, image=image, env=tuple(sorted(env.items())))

    def count_nodes(self):
        return len(self.nodes)

    def list_node_hostnames(self):
        return sorted(self.nodes)

    def count_terminal_tasks(self, group_name):
        self.calls.append(("count_terminal", group_name))
        if self.terminal_schedule is None:
            return len(self.nodes)
        if len(self.terminal_schedule) > 1:
            return self.terminal_schedule.pop(0)
        return self.terminal_schedule[0]

    def list_task_ids(self, group_name):
        self.calls.append(("list", group_name))
        return list(self.outputs.get(self.groups[group_name], {}))

    def fetch_task_output(self, task_id):
        self.calls.append(("fetch", task_id))
        if self.fetch_error is not None:
            raise self.fetch_error
        for tasks in self.outputs.values():
            if task_id in tasks:
                return tasks[task_id]
        return ""

    def delete_task_group(self, group_name):
        self.calls.append(("delete", group_name))
        self.groups.pop(group_name, None)
        return self.delete_ok

    def calls_named(self, kind):
        return [c for c in self.calls if c[0] == kind]


def node_output(node, dns=(), get=()):
    """Build the text one probe task would print."""
    return "\n".join([f"{node}:{line}" for line in list(dns) + list(get)]) + "\n"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def probe_config():
    return ProbeConfig(
        networks=("web",),
        image="tester/network-checker:latest",
        poll_interval=2,
        cooldown_interval=13,
        max_poll_wait=None,
    )


@pytest.fixture
def three_node_cluster():
    nodes = ["swarm-worker-1", "swarm-worker-2", "swarm-worker-3"]
    outputs = {
        "web": {
            f"task-{i}": node_output(
                node,
                dns=[
                    "DNS_SUCCESS:network-breaker-global-1:10.0.1.5",
                    "DNS_FAIL:network-breaker-replicated-1:Host not found",
                ],
                get=["GET_SUCCESS:network-breaker-global-1:200:0.004"],
            )
            for i, node in enumerate(nodes, start=1)
        }
    }
    return FakeCluster(nodes, outputs)
