"""
docker_client.py
- Shared Docker SDK client for the network check.
- Stays None when no daemon answers, so modules import cleanly; SwarmClusterClient refuses to start without one.
"""

import docker
from docker.errors import DockerException

DOCKER_SDK_VERSION = docker.__version__


def connect():
    """Client from DOCKER_HOST / the local socket, or None if the daemon is unreachable."""
    try:
        return docker.from_env()
    except DockerException:
        return None


client = connect()
