#!/usr/bin/env python3
"""
Audit EBS snapshot lifecycle activity from CloudTrail.

Correlates CreateSnapshot/DeleteSnapshot events with current volume and
instance state and reports snapshots created but never deleted.

This is a thin wrapper around the snapshot_audit package.
"""
from __future__ import annotations

from snapshot_audit.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
