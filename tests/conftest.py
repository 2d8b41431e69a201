"""
Pytest configuration and shared fixtures for merkledrop tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Keeps MERKLEDROP_* environment variables from leaking into tests
"""

import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_recipients = _common.make_recipients
make_leaves = _common.make_leaves
make_encoder = _common.make_encoder


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Remove MERKLEDROP_* variables (e.g. loaded from a .env file)."""
    for key in list(os.environ):
        if key.startswith("MERKLEDROP_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def recipients():
    """Provide five airdrop recipient records."""
    return make_recipients(5)


@pytest.fixture
def airdrop_encoder():
    """Provide the default (address, uint256) packed keccak256 encoder."""
    return make_encoder()


@pytest.fixture
def leaves():
    """Provide seven raw leaf digests."""
    return make_leaves(7)


@pytest.fixture
def records_file(tmp_path, recipients):
    """Write the recipients to a records JSON file and return its path."""
    import json

    path = tmp_path / "recipients.json"
    path.write_text(json.dumps({"recipients": recipients}))
    return path


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
