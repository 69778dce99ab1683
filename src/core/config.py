"""
config.py
- Defines global configuration values derived from environment variables.
- Used by the runner, entrypoints, and config loader for shared behavior control.
"""

import os
import sys

from loguru import logger

# --- Runtime Behavior Flags ---
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
RUN_ONCE = os.getenv("RUN_ONCE", "false").lower() == "true"

# --- Logging ---
LOG_LEVEL = "DEBUG" if DEBUG else "INFO"  # Loguru string levels
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# --- API Server ---
API_ENABLED = os.getenv("API_ENABLED", "true").lower() == "true"
API_PORT = int(os.getenv("API_PORT", "6060"))

# --- Error Reporting ---
SENTRY_DSN = os.getenv("SENTRY_DSN")

# --- Config Paths ---
NETWORK_CHECK_CONFIG_PATH = os.getenv("NETWORK_CHECK_CONFIG", "/etc/swarm-orchestration/network_check.yml")


def configure_logging(level=LOG_LEVEL):
    """Route loguru to stderr so stdout stays reserved for the report."""
    logger.remove()
    logger.add(
        sink=sys.stderr,
        level=level,
        format=LOG_FORMAT,
        colorize=True,
    )
