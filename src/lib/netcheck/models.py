"""
models.py
- Value types passed between the cluster client, parser, aggregator, renderer and orchestrator.
- Every value here lives for a single diagnostic cycle at most.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


class ProbeKind(str, Enum):
    DNS = "DNS"
    GET = "GET"


class PollOutcome(str, Enum):
    COMPLETE = "complete"
    STUCK = "stuck"
    CANCELLED = "cancelled"


class CycleState(str, Enum):
    IDLE = "idle"
    DEPLOYING = "deploying"
    POLLING = "polling"
    COLLECTING = "collecting"
    REPORTING = "reporting"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class ProbeResult:
    network: str
    node: str
    service: str
    kind: ProbeKind
    detail: str
    success: bool


@dataclass(frozen=True)
class TaskGroupDescriptor:
    name: str
    network: str
    image: str
    env: Tuple[Tuple[str, str], ...] = ()
    service_id: Optional[str] = None


@dataclass(frozen=True)
class ProbeConfig:
    """Immutable settings for one orchestrator process."""

    networks: Tuple[str, ...]
    image: str
    poll_interval: float
    cooldown_interval: float
    max_poll_wait: Optional[float] = None  # None waits forever
    task_group_prefix: str = "network-checker"
    node_env_var: str = "NODE_NAME"
    color: bool = False

    def task_group_name(self, network):
        return f"{self.task_group_prefix}-{network}"


@dataclass
class NetworkCollection:
    """What one network contributed to a cycle."""

    network: str
    outcome: PollOutcome
    expected_nodes: int
    terminal_tasks: int
    results: List[ProbeResult] = field(default_factory=list)
    unexpected_nodes: List[str] = field(default_factory=list)


# network -> node -> results sorted by service
GroupedReport = Dict[str, Dict[str, List[ProbeResult]]]
