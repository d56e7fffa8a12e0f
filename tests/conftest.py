from __future__ import annotations

"""Pytest configuration.

This file is imported during *collection*, so it's the right place to set
process-wide environment variables needed for stable imports.
"""

import os
import tempfile

import pytest

# Force a non-interactive backend in test environments.
os.environ.setdefault("MPLBACKEND", "Agg")

# Isolate matplotlib cache to avoid flaky font-cache locking.
os.environ.setdefault("MPLCONFIGDIR", tempfile.mkdtemp(prefix="mplconfig-"))

from tdoa_twin.models import Station  # noqa: E402


@pytest.fixture
def equilateral_stations() -> list[Station]:
    return [
        Station("S0", 0.0, 0.0),
        Station("S1", 100.0, 0.0),
        Station("S2", 50.0, 86.6),
    ]


@pytest.fixture
def square_stations() -> list[Station]:
    return [
        Station("A", 0.0, 0.0),
        Station("B", 1000.0, 0.0),
        Station("C", 1000.0, 1000.0),
        Station("D", 0.0, 1000.0),
    ]
