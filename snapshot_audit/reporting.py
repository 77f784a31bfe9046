"""
Report generation and output functions for the snapshot audit.
Formats correlator output as column-aligned text for the console and a file.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .cache import CacheStore
from .constants import REPORT_TAG, TABLE_HEADERS
from .models import CorrelationResult, OrphanRecord

COLUMN_GUTTER = "  "
SUMMARY_LABEL_WIDTH = 34


def align_columns(table: Sequence[Sequence[str]]) -> list[str]:
    """Pad cells so columns line up; the last column is not padded."""
    if not table:
        return []
    widths = [max(len(row[col]) for row in table) for col in range(len(table[0]))]
    lines = []
    for row in table:
        cells = [cell.ljust(width) for cell, width in zip(row, widths)]
        lines.append(COLUMN_GUTTER.join(cells).rstrip())
    return lines


def _event_table(result: CorrelationResult) -> list[str]:
    separator = ["-" * len(header) for header in TABLE_HEADERS]
    table = [list(TABLE_HEADERS), separator]
    table.extend(row.as_columns() for row in result.rows)
    return align_columns(table)


def _summary_line(label: str, value: int) -> str:
    return f"{label:<{SUMMARY_LABEL_WIDTH}}{value}"


def _summary(result: CorrelationResult) -> list[str]:
    counters = result.counters
    lines = ["=== SUMMARY ===", ""]
    if result.date_range:
        lines.append(f"Date range: {result.date_range}")
    lines.extend(
        [
            _summary_line("Total events in log:", counters.total_events),
            _summary_line("  - CreateSnapshot (success):", counters.create_success),
            _summary_line("  - CreateSnapshot (failed):", counters.create_failure),
            _summary_line("  - DeleteSnapshot (success):", counters.delete_success),
            _summary_line("  - DeleteSnapshot (failed):", counters.delete_failure),
        ]
    )
    if counters.unclassified:
        lines.append(_summary_line("  - Unclassified:", counters.unclassified))
    lines.extend(
        [
            _summary_line("Unique instances:", counters.unique_instances),
            _summary_line("Orphaned snapshots:", counters.orphans),
            "",
        ]
    )
    return lines


def format_orphan(orphan: OrphanRecord) -> str:
    return (
        f"  {orphan.snapshot_id}  created: {orphan.created_at}  volume: {orphan.volume_id}  "
        f"instance: {orphan.instance_id} ({orphan.instance_name})"
    )


def _orphan_section(result: CorrelationResult) -> list[str]:
    if not result.orphans:
        return [
            "=== NO ORPHANED SNAPSHOTS ===",
            "(All snapshots created in this period were also deleted)",
            "",
        ]
    lines = [
        "=== ORPHANED SNAPSHOTS ===",
        "(These snapshots were created but not deleted within the audit period)",
        "",
    ]
    lines.extend(format_orphan(orphan) for orphan in result.orphans)
    lines.append("")
    return lines


def render_report(result: CorrelationResult) -> str:
    """Render the event log, summary and orphan section as text."""
    lines = ["=== EVENT LOG ===", ""]
    lines.extend(_event_table(result))
    lines.append("")
    lines.extend(_summary(result))
    lines.extend(_orphan_section(result))
    return "\n".join(lines) + "\n"


def publish_report(report: str, cache: CacheStore) -> Path:
    """Print the report and store identical content as the run's report entry."""
    print(report, end="")
    return cache.write_text(REPORT_TAG, report)


def log_output_files(paths: dict[str, Path]) -> None:
    """Log the cache and report file locations."""
    logging.info("Output Files:")
    for label, path in paths.items():
        logging.info("  %-18s%s", label + ":", path)
