"""
exceptions.py
- Error taxonomy for the network check subsystem.
- Fatal errors bubble up to the runner, which logs them and exits non-zero.
"""


class NetworkCheckError(Exception):
    """Base class for all network check failures."""


class ConfigError(NetworkCheckError):
    """Startup configuration is missing or invalid."""


class ClusterClientError(NetworkCheckError):
    """A control-plane call failed."""


class TaskGroupCreateError(ClusterClientError):
    """The probe task group could not be created. Always fatal."""

    def __init__(self, name, network, cause):
        self.name = name
        self.network = network
        self.cause = cause
        super().__init__(f"Failed to create task group {name} on network {network}: {cause}")


class ClusterCommandError(ClusterClientError):
    """A docker CLI invocation exited non-zero or timed out."""

    def __init__(self, command, returncode=None, output=""):
        self.command = command
        self.returncode = returncode
        self.output = output
        detail = f" (exit {returncode})" if returncode is not None else ""
        super().__init__(f"Command failed{detail}: {' '.join(command)}")
