# tests/conftest.py
"""Pytest configuration and shared fixtures for eventstack tests."""
from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest


def pytest_configure() -> None:
    # Ensure eventstack is importable when running tests from the repo root.
    repo_root = Path(__file__).resolve().parents[1]
    src_dir = repo_root / "src"
    if src_dir.exists() and str(src_dir) not in sys.path:
        sys.path.insert(0, str(src_dir))


@pytest.fixture
def day_events() -> tuple[pd.DatetimeIndex, pd.DatetimeIndex]:
    """Three events under 24h on different days; the last one crosses midnight."""
    starts = pd.to_datetime(["2024-03-05 09:00", "2024-03-07 13:15", "2024-03-09 23:30"])
    ends = pd.to_datetime(["2024-03-05 10:00", "2024-03-07 15:45", "2024-03-10 00:30"])
    return pd.DatetimeIndex(starts), pd.DatetimeIndex(ends)


@pytest.fixture
def year_events() -> tuple[pd.DatetimeIndex, pd.DatetimeIndex]:
    """Multi-week events across two years; the last one crosses New Year."""
    starts = pd.to_datetime(["2024-01-10", "2023-06-01", "2023-11-20"])
    ends = pd.to_datetime(["2024-03-15", "2023-06-20", "2024-02-10"])
    return pd.DatetimeIndex(starts), pd.DatetimeIndex(ends)


@pytest.fixture
def gray_palette() -> list[list[float]]:
    return [[0.0, 0.0, 0.0], [0.5, 0.5, 0.5], [1.0, 1.0, 1.0]]
