"""Test suite package marker."""

import pytest

# Ensure helper modules shared across tests are assertion-rewritten before import.
pytest.register_assert_rewrite("tests.snapshot_audit_test_utils")
