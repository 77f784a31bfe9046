"""Tests for snapshot_audit/args_parser.py."""

from __future__ import annotations

import argparse
from datetime import date
from pathlib import Path

import pytest

from snapshot_audit.args_parser import build_parser, parse_args, parse_date
from tests.assertions import assert_equal


def test_parse_args_minimal():
    """Start and region are enough; everything else has defaults."""
    args = parse_args(["-s", "2025-01-01", "-r", "us-east-1"])

    assert_equal(args.start, date(2025, 1, 1))
    assert_equal(args.region, "us-east-1")
    assert args.end is None
    assert args.cache_dir is None
    assert args.env_file is None
    assert not args.refresh_cache
    assert not args.verbose


def test_parse_args_all_options(tmp_path):
    """Long options populate every field."""
    args = parse_args(
        [
            "--start",
            "2025-01-01",
            "--end",
            "2025-02-01",
            "--region",
            "ap-southeast-2",
            "--cache-dir",
            str(tmp_path),
            "--refresh-cache",
            "--env-file",
            "/tmp/creds.env",
            "--verbose",
        ]
    )

    assert_equal(args.end, date(2025, 2, 1))
    assert_equal(args.cache_dir, Path(tmp_path))
    assert_equal(args.env_file, "/tmp/creds.env")
    assert args.refresh_cache
    assert args.verbose


def test_parse_args_same_start_and_end_allowed():
    """A one-day window is valid."""
    args = parse_args(["-s", "2025-01-01", "-e", "2025-01-01", "-r", "us-east-1"])

    assert_equal(args.end, args.start)


def test_parse_date_rejects_bad_format():
    """Dates must be YYYY-MM-DD."""
    with pytest.raises(argparse.ArgumentTypeError):
        parse_date("01/02/2025")


@pytest.mark.parametrize(
    "argv",
    [
        ["-r", "us-east-1"],
        ["-s", "2025-01-01"],
        ["-s", "2025-13-01", "-r", "us-east-1"],
        ["-s", "2025-01-01", "-r", "us-east-1", "--bogus"],
        ["-s", "2025-02-01", "-e", "2025-01-01", "-r", "us-east-1"],
        ["-s", "2025-01-01", "-r", "  "],
        ["-s", "2025-01-01", "-r", "us east 1"],
        ["-s", "2025-01-01", "-r", "us-east-1/"],
    ],
)
def test_parse_args_usage_errors_exit_2(argv, capsys):
    """Usage errors print the message plus full help and exit with status 2."""
    with pytest.raises(SystemExit) as exc_info:
        parse_args(argv)

    assert_equal(exc_info.value.code, 2)
    err = capsys.readouterr().err
    assert err.startswith("ERROR: ")
    assert "usage: snapshot-audit" in err
    assert "Examples:" in err


def test_end_before_start_message(capsys):
    """The end-before-start error names the problem."""
    with pytest.raises(SystemExit):
        parse_args(["-s", "2025-02-01", "-e", "2025-01-01", "-r", "us-east-1"])

    assert "End date must not be before start date" in capsys.readouterr().err


def test_help_exits_zero(capsys):
    """--help prints usage and exits cleanly."""
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args(["--help"])

    assert_equal(exc_info.value.code, 0)
    assert "--refresh-cache" in capsys.readouterr().out


def test_invalid_region_message(capsys):
    """A region that is not a valid host label is rejected by name."""
    with pytest.raises(SystemExit):
        parse_args(["-s", "2025-01-01", "-r", "us east 1"])

    assert "Invalid region 'us east 1'" in capsys.readouterr().err
