#!/usr/bin/env python3
"""
orchestrator.py
- Control loop for the swarm network check.
- Per monitored network, strictly in order: deploy a global probe task group, poll until
  every node's task is terminal, collect and parse the logs, delete the group.
- Once all networks are done, prints the DNS and GET matrices, cools down, and repeats.
- Exposes basic metrics for Prometheus.
"""

import sys
import threading
import time
from datetime import datetime, timezone

from loguru import logger

from core.constants import NODE_HOSTNAME_TEMPLATE
from lib.common.task_diagnostics import log_task_status
from lib.netcheck.aggregator import group_results, split_by_kind, unexpected_nodes
from lib.netcheck.models import CycleState, NetworkCollection, PollOutcome
from lib.netcheck.renderer import print_report, render_report
from lib.netcheck.result_parser import parse_output

# --- Probe Metrics ---
probe_cycles_total = 0
probe_stuck_total = 0
probe_cleanup_failures_total = 0
probe_results_total = 0
probe_failed_checks_last_cycle = 0
probe_last_cycle_duration_seconds = 0.0


def utc_now():
    return datetime.now(timezone.utc)


class NetworkCheckOrchestrator:
    def __init__(self, cluster, config, stream=None, stop_event=None, clock=time.monotonic, now=utc_now):
        self.cluster = cluster
        self.config = config
        self.stream = stream or sys.stdout
        self.stop_event = stop_event or threading.Event()
        self.clock = clock
        self.now = now
        self.state = CycleState.IDLE

    # --- Loop ---

    def run_forever(self):
        logger.info(f"[network_check] Monitoring networks {', '.join(self.config.networks)} with {self.config.image}")
        while not self.stop_event.is_set():
            self.run_cycle()
            if self.stop_event.is_set():
                break
            self.state = CycleState.COOLDOWN
            logger.info(f"[network_check] Done, sleeping {self.config.cooldown_interval} seconds...")
            self.stop_event.wait(self.config.cooldown_interval)
        self.state = CycleState.IDLE
        logger.info("[network_check] Stop requested, leaving monitor loop.")

    def run_cycle(self):
        """
        One full diagnostic pass over every monitored network.

        Returns:
            list[NetworkCollection]: Per-network records, in configured order.
        """
        global probe_cycles_total, probe_results_total, probe_failed_checks_last_cycle, probe_last_cycle_duration_seconds

        started = self.clock()
        timestamp = self.now()
        collections = []

        for network in self.config.networks:
            if self.stop_event.is_set():
                break
            collections.append(self.probe_network(network))

        if self.stop_event.is_set() or any(c.outcome == PollOutcome.CANCELLED for c in collections):
            logger.info("[network_check] Cycle interrupted before all networks were probed; skipping report.")
            self.state = CycleState.IDLE
            return collections

        self.state = CycleState.REPORTING
        results = [r for c in collections for r in c.results]
        self.report(results, collections, timestamp)

        probe_cycles_total += 1
        probe_results_total += len(results)
        probe_failed_checks_last_cycle = sum(1 for r in results if not r.success)
        probe_last_cycle_duration_seconds = self.clock() - started
        return collections

    # --- Per-network steps ---

    def probe_network(self, network):
        global probe_cleanup_failures_total

        group_name = self.config.task_group_name(network)

        self.state = CycleState.DEPLOYING
        # TaskGroupCreateError propagates: creation failures are fatal.
        self.cluster.create_probe_task_group(
            group_name,
            network,
            self.config.image,
            {self.config.node_env_var: NODE_HOSTNAME_TEMPLATE},
        )

        try:
            self.state = CycleState.POLLING
            known_nodes = self.cluster.list_node_hostnames()
            outcome, terminal, expected = self.wait_for_completion(group_name)

            if outcome == PollOutcome.STUCK:
                log_task_status(group_name, context="stuck-poll")
            if outcome == PollOutcome.CANCELLED:
                return NetworkCollection(network, outcome, expected, terminal)

            self.state = CycleState.COLLECTING
            results = self.collect(group_name, network)
            strays = unexpected_nodes(results, known_nodes)
            if strays:
                logger.warning(
                    f"[network_check] {network}: results name nodes not in the cluster: {', '.join(strays)}"
                )
            return NetworkCollection(network, outcome, expected, terminal, results, strays)
        finally:
            if not self.cluster.delete_task_group(group_name):
                probe_cleanup_failures_total += 1

    def wait_for_completion(self, group_name):
        """
        Poll until the group's terminal task count reaches the cluster's node count.

        Returns:
            tuple: (PollOutcome, terminal_tasks, expected_nodes)
        """
        global probe_stuck_total

        deadline = None
        if self.config.max_poll_wait:
            deadline = self.clock() + self.config.max_poll_wait

        while True:
            expected = self.cluster.count_nodes()
            terminal = self.cluster.count_terminal_tasks(group_name)
            logger.info(f"[network_check] {group_name}: {terminal} of {expected} tasks completed.")

            if terminal >= expected:
                return PollOutcome.COMPLETE, terminal, expected

            if deadline is not None and self.clock() >= deadline:
                probe_stuck_total += 1
                logger.warning(
                    f"[network_check] {group_name} stuck: {terminal}/{expected} tasks terminal "
                    f"after {self.config.max_poll_wait}s. Collecting partial output."
                )
                return PollOutcome.STUCK, terminal, expected

            if self.stop_event.wait(self.config.poll_interval):
                return PollOutcome.CANCELLED, terminal, expected

    def collect(self, group_name, network):
        results = []
        task_ids = self.cluster.list_task_ids(group_name)
        for task_id in task_ids:
            output = self.cluster.fetch_task_output(task_id)
            results.extend(parse_output(output, network))
        logger.debug(f"[network_check] {network}: parsed {len(results)} result(s) from {len(task_ids)} task(s)")
        return results

    # --- Reporting ---

    def report(self, results, collections, timestamp):
        dns, get = split_by_kind(results)
        stuck = {
            c.network: (c.terminal_tasks, c.expected_nodes)
            for c in collections if c.outcome == PollOutcome.STUCK
        }
        lines = render_report(
            group_results(dns),
            group_results(get),
            self.config.networks,
            timestamp,
            stuck=stuck,
        )
        print_report(lines, self.stream, color=self.config.color)
