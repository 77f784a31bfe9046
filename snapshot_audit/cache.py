"""
Cache management for snapshot_audit.

Flat JSON files keyed by (start, end-or-now, region) plus a dataset tag. A
present entry is always used as-is; there is no expiry.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from .constants import REPORT_TAG
from .errors import CacheReadError
from .models import AuditWindow


def build_cache_key(window: AuditWindow, region: str) -> str:
    """Return the deterministic cache key for an audit run."""
    return f"snapshot_audit_{window.start.isoformat()}_to_{window.end_label}_{region}"


@dataclass
class CacheStore:
    """Read-through store for one audit run's datasets."""

    cache_dir: Path
    key: str
    refresh: bool = False

    def path_for(self, tag: str) -> Path:
        suffix = "txt" if tag == REPORT_TAG else "json"
        return self.cache_dir / f"{self.key}_{tag}.{suffix}"

    def has(self, tag: str) -> bool:
        return not self.refresh and self.path_for(tag).is_file()

    def get_json(self, tag: str) -> Optional[Any]:
        """Return cached content for tag, or None on a miss.

        Raises:
            CacheReadError: If the cache file exists but cannot be parsed
        """
        if not self.has(tag):
            return None
        cache_path = self.path_for(tag)
        try:
            payload = json.loads(cache_path.read_text())
        except (OSError, json.JSONDecodeError) as exc:
            raise CacheReadError(f"Failed to read cache {cache_path}: {exc}") from exc
        logging.info("[CACHED] %s", cache_path)
        return payload

    def put_json(self, tag: str, payload: Any) -> Path:
        """Write payload for tag and return the file path."""
        cache_path = self.path_for(tag)
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(json.dumps(payload, indent=2, default=str))
        logging.debug("Wrote cache %s", cache_path)
        return cache_path

    def write_text(self, tag: str, text: str) -> Path:
        cache_path = self.path_for(tag)
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_text(text)
        return cache_path
