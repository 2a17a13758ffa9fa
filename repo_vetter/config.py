"""
Configuration management for repo-vetter.

Loads settings from:
1. .repo-vetter.toml (local config)
2. pyproject.toml (project-level config)
"""

import os
import tomllib
from pathlib import Path

from dotenv import load_dotenv

from repo_vetter.errors import ConfigError

# Load environment variables from .env file
load_dotenv()

# project_root is the parent directory of repo_vetter/
PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Cumulative-share cutoff (percent) shared by the threshold-based metrics
DEFAULT_THRESHOLD = 50

# Global configuration for SSL verification
# Default: True (verify SSL certificates)
# Can be set to False by CLI --insecure flag
VERIFY_SSL = True

# LOG_LEVEL values understood by the console logger
LOG_LEVEL_SILENT = 0
LOG_LEVEL_INFO = 1
LOG_LEVEL_DEBUG = 2

# Global threshold setting (can be overridden)
_THRESHOLD: int | None = None


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {config_path}: {e}") from e


def get_tool_config() -> dict:
    """
    Return the ``[tool.repo-vetter]`` table.

    Priority:
    1. .repo-vetter.toml (local config, highest priority)
    2. pyproject.toml (project-level config, fallback)

    Returns:
        The tool table, or an empty dict when neither file defines one.
    """
    for filename in (".repo-vetter.toml", "pyproject.toml"):
        config_path = PROJECT_ROOT / filename
        if not config_path.exists():
            continue
        tool_config = load_config_file(config_path).get("tool", {}).get(
            "repo-vetter", {}
        )
        if tool_config:
            return tool_config
    return {}


def validate_threshold(value: object) -> int:
    """
    Validate a threshold percentage.

    Args:
        value: Candidate threshold (int, or a string holding an int).

    Returns:
        The threshold as an int in 1-100.

    Raises:
        ConfigError: If the value is not an integer in 1-100.
    """
    if isinstance(value, bool):
        raise ConfigError(f"Threshold must be an integer percentage, got {value!r}.")
    try:
        threshold = int(value)  # type: ignore[call-overload]
    except (TypeError, ValueError):
        raise ConfigError(
            f"Threshold must be an integer percentage, got {value!r}."
        ) from None
    if isinstance(value, float) and value != threshold:
        raise ConfigError(f"Threshold must be an integer percentage, got {value!r}.")
    if not 1 <= threshold <= 100:
        raise ConfigError(f"Threshold must be between 1 and 100, got {threshold}.")
    return threshold


def get_threshold() -> int:
    """
    Get the cumulative-share threshold percentage.

    Priority:
    1. Explicitly set value via set_threshold()
    2. REPO_VETTER_THRESHOLD environment variable
    3. .repo-vetter.toml / pyproject.toml ``threshold`` key
    4. Default: 50

    Returns:
        Threshold percentage.

    Raises:
        ConfigError: If the configured value is not an integer in 1-100.
    """
    if _THRESHOLD is not None:
        return _THRESHOLD

    env_threshold = os.getenv("REPO_VETTER_THRESHOLD")
    if env_threshold:
        return validate_threshold(env_threshold)

    tool_config = get_tool_config()
    if "threshold" in tool_config:
        return validate_threshold(tool_config["threshold"])

    return DEFAULT_THRESHOLD


def set_threshold(threshold: int | None) -> None:
    """
    Set the threshold explicitly. ``None`` clears the override.

    Args:
        threshold: Threshold percentage (1-100) or None.
    """
    global _THRESHOLD
    _THRESHOLD = None if threshold is None else validate_threshold(threshold)


def set_verify_ssl(verify: bool) -> None:
    """
    Set the SSL verification setting globally.

    Args:
        verify: Whether to verify SSL certificates.
    """
    global VERIFY_SSL
    VERIFY_SSL = verify


def get_verify_ssl() -> bool:
    """
    Get the current SSL verification setting.

    Returns:
        Whether SSL verification is enabled.
    """
    return VERIFY_SSL


def get_github_token() -> str | None:
    """Return GITHUB_TOKEN, or None when it is unset or empty."""
    return os.getenv("GITHUB_TOKEN") or None


def get_log_level() -> int:
    """
    Get the console log level from LOG_LEVEL.

    0 writes errors only, 1 adds progress messages, 2 adds debug detail.
    Unparseable or out-of-range values fall back to 0.
    """
    raw_level = os.getenv("LOG_LEVEL", "0")
    try:
        level = int(raw_level)
    except ValueError:
        return LOG_LEVEL_SILENT
    if level not in (LOG_LEVEL_SILENT, LOG_LEVEL_INFO, LOG_LEVEL_DEBUG):
        return LOG_LEVEL_SILENT
    return level


def get_log_file() -> Path | None:
    """Return the LOG_FILE path, or None to log to stderr."""
    log_file = os.getenv("LOG_FILE")
    return Path(log_file).expanduser() if log_file else None
