"""
Command-line interface and main entry point for snapshot_audit.

Runs the four stages in order: fetch events, resolve topology, correlate,
render. Any fetch failure aborts the run before a report is written.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from botocore.exceptions import BotoCoreError

from .args_parser import parse_args
from .aws_client_factory import AwsSession
from .cache import CacheStore, build_cache_key
from .config import ensure_cache_dir, resolve_cache_dir
from .constants import CLOUDTRAIL_TAG, INSTANCES_TAG, VOLUMES_TAG
from .correlator import correlate
from .errors import CacheReadError, ConfigurationError, EventParseError, FetchError
from .fetcher import fetch_snapshot_events
from .models import AuditWindow
from .reporting import log_output_files, publish_report, render_report
from .services import AuditLogService, CloudTrailAuditLog, Ec2Inventory, InventoryService
from .topology import resolve_topology


def _log_banner(region: str, window: AuditWindow) -> None:
    logging.info("=" * 46)
    logging.info("AWS Snapshot Audit")
    logging.info("Region: %s", region)
    logging.info("Date Range: %s to %s", window.start.isoformat(), window.end_label)
    logging.info("=" * 46)


def run_audit(
    args: argparse.Namespace,
    audit_log: AuditLogService,
    inventory: InventoryService,
    cache_dir: Path,
    today: Optional[date] = None,
) -> int:
    """Run the audit pipeline with explicit services. Returns exit code."""
    window = AuditWindow(start=args.start, end=args.end)
    cache = CacheStore(
        cache_dir=cache_dir,
        key=build_cache_key(window, args.region),
        refresh=args.refresh_cache,
    )
    _log_banner(args.region, window)

    try:
        events = fetch_snapshot_events(audit_log, cache, window)
        topology = resolve_topology(events, inventory, cache)
    except FetchError as exc:
        logging.error("ERROR %s", exc)
        return 1
    except (CacheReadError, EventParseError) as exc:
        logging.error("ERROR %s (delete the cache file or rerun with --refresh-cache)", exc)
        return 1

    logging.info("[PROCESSING] Generating report...")
    result = correlate(
        events,
        topology.volume_to_instance,
        topology.instance_to_name,
        window=window,
        today=today,
    )
    report_path = publish_report(render_report(result), cache)

    log_output_files(
        {
            "CloudTrail cache": cache.path_for(CLOUDTRAIL_TAG),
            "Volume cache": cache.path_for(VOLUMES_TAG),
            "Instance cache": cache.path_for(INSTANCES_TAG),
            "Report": report_path,
        }
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the snapshot_audit CLI."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        session = AwsSession.from_env(args.region, args.env_file)
        audit_log = CloudTrailAuditLog.from_session(session)
        inventory = Ec2Inventory.from_session(session)
    except BotoCoreError as exc:
        logging.error("ERROR %s", exc)
        return 2

    try:
        cache_dir = ensure_cache_dir(resolve_cache_dir(args.cache_dir))
    except ConfigurationError as exc:
        logging.error("ERROR %s", exc)
        return 2

    return run_audit(args, audit_log, inventory, cache_dir)
