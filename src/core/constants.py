"""
constants.py
- Project-wide constants shared across the network check modules.
- Includes polling intervals, retry tuning, and report layout values.
"""

# --- Probe Topology Defaults ---
DEFAULT_NETWORKS = ["web", "internal"]
DEFAULT_IMAGE_NAME = "network-checker:latest"
DEFAULT_TASK_GROUP_PREFIX = "network-checker"
NODE_ENV_VAR = "NODE_NAME"
NODE_HOSTNAME_TEMPLATE = "{{.Node.Hostname}}"

# --- Loop Timing Defaults ---
DEFAULT_POLL_INTERVAL = 2  # seconds between terminal-task checks
DEFAULT_COOLDOWN_INTERVAL = 13  # seconds between report cycles
DEFAULT_MAX_POLL_WAIT = 600  # seconds before a task group is declared stuck (0 = wait forever)

# --- Transient Control-Plane Retries ---
TRANSIENT_RETRY_ATTEMPTS = 3
TRANSIENT_RETRY_MIN_WAIT = 1  # seconds
TRANSIENT_RETRY_MAX_WAIT = 8  # seconds
CLI_TIMEOUT = 30  # seconds for docker CLI calls

# --- Swarm Task States ---
# States a task never leaves once reached.
TERMINAL_TASK_STATES = {"complete", "shutdown", "failed", "rejected", "orphaned", "remove"}

# --- Report Layout ---
CELL_WIDTH = 15
CELL_SEPARATOR = "  "
HEADER_RULE = "=" * 42
