"""
Pytest configuration and shared fixtures for anchor_core tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

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

make_leaf = _common.make_leaf
make_sorted_leaves = _common.make_sorted_leaves
make_tree = _common.make_tree
make_blob = _common.make_blob
make_compound_inclusion = _common.make_compound_inclusion
make_compound_completeness = _common.make_compound_completeness

from anchor_core.config.runtime import ProofConfig


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def config():
    """Default (padded) proof config."""
    return ProofConfig()


@pytest.fixture
def chain_config():
    """Chain-compatible proof config (no group padding)."""
    return ProofConfig.chain_compatible()


@pytest.fixture(params=["padded", "chain"])
def any_config(request):
    """Run a test under both padding modes."""
    if request.param == "chain":
        return ProofConfig.chain_compatible()
    return ProofConfig()


@pytest.fixture
def tree_17(any_config):
    """Seventeen-leaf tree: one full group plus one leaf."""
    return make_tree(17, config=any_config)


@pytest.fixture
def blob_data():
    """A three-chunk blob at the default chunk size."""
    return make_blob("fixture", 2 * 915 + 100)


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


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert checks[0].ok, f"Check '{check_id}' failed: {checks[0].message}"
    return _assert


@pytest.fixture
def assert_rejected():
    """Helper to assert a VerificationResult failed at a stage with a code."""
    def _assert(result, stage: str, code: str):
        assert not result.ok, "Expected verification to fail"
        assert result.stage == stage, f"Failed at {result.stage!r}, expected {stage!r}: {result.error}"
        assert result.code == code, f"Failed with {result.code!r}, expected {code!r}: {result.error}"
    return _assert
