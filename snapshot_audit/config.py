"""
Configuration and path resolution for snapshot_audit.

Handles default cache directory determination and runtime settings.
"""

from __future__ import annotations

import os
from pathlib import Path

from .errors import ConfigurationError

CACHE_DIR_ENV_VAR = "SNAPSHOT_AUDIT_CACHE_DIR"
DEFAULT_CACHE_DIR = Path("./snapshot_audit_cache")

# Create and delete lookups are independent, one worker each.
EVENT_FETCH_WORKERS = 2

DATE_FORMAT = "%Y-%m-%d"
SUMMARY_DATE_FORMAT = "%d/%m/%y"


def resolve_cache_dir(cli_value: Path | str | None = None) -> Path:
    """Return the cache directory.

    Priority order:
      1. Explicit --cache-dir value
      2. SNAPSHOT_AUDIT_CACHE_DIR environment variable
      3. ./snapshot_audit_cache
    """
    if cli_value:
        return Path(cli_value).expanduser()
    env_val = os.environ.get(CACHE_DIR_ENV_VAR)
    if env_val is not None:
        if not env_val.strip():
            raise ConfigurationError(f"{CACHE_DIR_ENV_VAR} is set but empty")
        return Path(env_val).expanduser()
    return DEFAULT_CACHE_DIR


def ensure_cache_dir(cache_dir: Path) -> Path:
    """Create the cache directory if needed and return it."""
    if cache_dir.exists() and not cache_dir.is_dir():
        raise ConfigurationError(f"Cache path {cache_dir} exists and is not a directory")
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(f"Cannot create cache directory {cache_dir}: {exc}") from exc
    return cache_dir
