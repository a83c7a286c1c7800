"""
Pytest configuration for tests under tests/.

Tests import the package as `traceprof` and fixtures as `tests.fixtures.*`.
This conftest puts the repository root on sys.path so both resolve without
an installed package, regardless of invocation cwd.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]

if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture
def basic_file():
    """Decoded File for the basic columnar capture."""
    from tests.fixtures.captures import basic_capture
    from traceprof.profile import File

    return File(basic_capture())


@pytest.fixture
def basic_thread(basic_file):
    return basic_file.threads[0]
