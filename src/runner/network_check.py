#!/usr/bin/env python3
"""
network_check.py
- Entrypoint script for the recurring swarm network diagnostic.
- Loads configuration, connects to the Swarm control plane, and runs the orchestrator loop.
- Can be run via main supervisor or manually via CLI (e.g., entrypoint.py).
"""

import signal
import sys
import threading

from docker.errors import DockerException
from loguru import logger
from requests.exceptions import ConnectionError as RequestsConnectionError

from core.config import NETWORK_CHECK_CONFIG_PATH, RUN_ONCE
from core.config_loader import load_probe_config, preview_yaml
from core.docker_client import DOCKER_SDK_VERSION
from lib.netcheck.cluster_client import SwarmClusterClient
from lib.netcheck.exceptions import NetworkCheckError
from lib.netcheck.orchestrator import NetworkCheckOrchestrator

stop_event = threading.Event()


def handle_exit(signum, frame):
    logger.info(f"📴 Received signal {signum}. Finishing current step and exiting...")
    stop_event.set()


def build_orchestrator(cluster=None, config=None, stream=None):
    """Wire config, cluster client and orchestrator together. Raises NetworkCheckError on startup failure."""
    if config is None:
        preview_yaml(NETWORK_CHECK_CONFIG_PATH, name="network_check.yml")
        config = load_probe_config()
    if cluster is None:
        logger.debug(f"[network_check] Docker SDK version {DOCKER_SDK_VERSION}")
        cluster = SwarmClusterClient()
    return NetworkCheckOrchestrator(cluster, config, stream=stream, stop_event=stop_event)


def run(once=RUN_ONCE):
    """
    Run the network check until stopped. Exits the process with status 1 on fatal errors.
    """
    if threading.current_thread() is threading.main_thread():
        signal.signal(signal.SIGINT, handle_exit)
        signal.signal(signal.SIGTERM, handle_exit)

    try:
        orchestrator = build_orchestrator()
        if once:
            logger.info("[network_check] RUN_ONCE=true, running a single cycle.")
            orchestrator.run_cycle()
        else:
            orchestrator.run_forever()
    except NetworkCheckError as e:
        logger.critical(f"[network_check] Fatal: {e}")
        sys.exit(1)
    except (DockerException, RequestsConnectionError) as e:
        logger.critical(f"[network_check] Control plane unavailable after retries: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
