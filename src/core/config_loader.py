"""
config_loader.py
- Loads and previews the YAML configuration for the network check.
- Builds the immutable ProbeConfig from YAML values overlaid with environment variables.
"""

import os
import sys

import yaml
from loguru import logger

from core.config import NETWORK_CHECK_CONFIG_PATH
from core.constants import (
    DEFAULT_COOLDOWN_INTERVAL,
    DEFAULT_IMAGE_NAME,
    DEFAULT_MAX_POLL_WAIT,
    DEFAULT_NETWORKS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_TASK_GROUP_PREFIX,
    NODE_ENV_VAR,
)
from lib.netcheck.exceptions import ConfigError
from lib.netcheck.models import ProbeConfig


def load_yaml(path):
    """Safely load a YAML file and return a parsed dict. Returns {} on failure."""
    try:
        with open(path, "r") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.debug(f"[load_yaml] Failed to load {path}: {e}")
        return {}


def preview_yaml(path, name=None):
    """
    Log a human-readable preview of the YAML file contents for debugging.
    Typically used during startup to verify config presence and structure.
    """
    if not os.path.exists(path):
        logger.info(f"[config] File not found: {path} (using environment and defaults)")
        return

    try:
        with open(path, "r") as f:
            contents = f.read()
            logger.info(f"\n📄 Loaded {name or path}:\n" + "\n".join(f"│ {line}" for line in contents.strip().splitlines()))
    except OSError as e:
        logger.error(f"[config] Could not preview {path}: {e}")


def _parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _parse_seconds(key, value, allow_zero=False):
    try:
        seconds = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number of seconds, got {value!r}") from e
    if seconds < 0 or (seconds == 0 and not allow_zero):
        raise ConfigError(f"{key} must be {'non-negative' if allow_zero else 'positive'}, got {value!r}")
    return seconds


def _parse_networks(value):
    if isinstance(value, str):
        value = value.split(",")
    networks = []
    for network in value or []:
        network = str(network).strip()
        if network and network not in networks:
            networks.append(network)
    return tuple(networks)


def load_probe_config(path=NETWORK_CHECK_CONFIG_PATH, env=None, username_lookup=None, isatty=None):
    """
    Build the ProbeConfig for this process.

    Precedence: environment variable, then YAML key, then built-in default.

    Args:
        path (str): YAML file; a missing file is not an error.
        env (dict): Environment mapping (defaults to os.environ).
        username_lookup (callable): Returns the registry user when no image is configured.
        isatty (bool): Whether stdout is a terminal, used when color is not configured.

    Raises:
        ConfigError: Invalid values, no networks, or no way to name the probe image.
    """
    env = os.environ if env is None else env
    file_config = load_yaml(path)
    if not isinstance(file_config, dict):
        raise ConfigError(f"{path} must contain a mapping, got {type(file_config).__name__}")

    def setting(key, env_key, default):
        if env.get(env_key) not in (None, ""):
            return env[env_key]
        if file_config.get(key) is not None:
            return file_config[key]
        return default

    networks = _parse_networks(setting("networks", "NETWORKS", DEFAULT_NETWORKS))
    if not networks:
        raise ConfigError("At least one network must be monitored")

    image = setting("image", "PROBE_IMAGE", None)
    if not image:
        if username_lookup is None:
            from lib.common.docker_helpers import get_registry_username
            username_lookup = get_registry_username
        username = username_lookup()
        if not username:
            raise ConfigError("No docker user found and PROBE_IMAGE is not set. Are you logged in?")
        image = f"{username}/{DEFAULT_IMAGE_NAME}"

    max_poll_wait = _parse_seconds("max_poll_wait", setting("max_poll_wait", "MAX_POLL_WAIT", DEFAULT_MAX_POLL_WAIT), allow_zero=True)

    color = setting("color", "COLOR", None)
    if color is None:
        color = sys.stdout.isatty() if isatty is None else isatty

    return ProbeConfig(
        networks=networks,
        image=str(image),
        poll_interval=_parse_seconds("poll_interval", setting("poll_interval", "POLL_INTERVAL", DEFAULT_POLL_INTERVAL)),
        cooldown_interval=_parse_seconds(
            "cooldown_interval", setting("cooldown_interval", "COOLDOWN_INTERVAL", DEFAULT_COOLDOWN_INTERVAL)
        ),
        max_poll_wait=max_poll_wait or None,
        task_group_prefix=str(setting("task_group_prefix", "TASK_GROUP_PREFIX", DEFAULT_TASK_GROUP_PREFIX)),
        node_env_var=NODE_ENV_VAR,
        color=_parse_bool(color),
    )


def load_task_group_prefix(path=NETWORK_CHECK_CONFIG_PATH, env=None):
    """Task group prefix alone, for maintenance commands that must not need an image."""
    env = os.environ if env is None else env
    if env.get("TASK_GROUP_PREFIX"):
        return env["TASK_GROUP_PREFIX"]
    file_config = load_yaml(path)
    if isinstance(file_config, dict) and file_config.get("task_group_prefix"):
        return str(file_config["task_group_prefix"])
    return DEFAULT_TASK_GROUP_PREFIX
