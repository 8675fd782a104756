"""Unit tests for CyclicNormalizer."""

from __future__ import annotations

import logging

import pandas as pd
import pytest

from eventstack.event_stack_chart.chart_types import TimePeriod
from eventstack.event_stack_chart.cyclic_normalizer import CyclicNormalizer


@pytest.fixture
def normalizer() -> CyclicNormalizer:
    return CyclicNormalizer()


def _index(*values: str, tz: str | None = None) -> pd.DatetimeIndex:
    idx = pd.DatetimeIndex(pd.to_datetime(list(values), format="ISO8601"))
    return idx.tz_localize(tz) if tz else idx


def test_day_keeps_only_time_of_day(normalizer):
    out = normalizer.normalize(_index("2023-07-04 13:45:30", "2019-12-31 23:59"), 2024, TimePeriod.DAY)
    assert list(out) == [pd.Timestamp("2024-01-01 13:45:30"), pd.Timestamp("2024-01-01 23:59")]


def test_year_keeps_date_within_year(normalizer):
    out = normalizer.normalize(_index("2023-07-04 13:45"), 2024, TimePeriod.YEAR)
    assert out[0] == pd.Timestamp("2024-07-04 13:45")


def test_year_leap_day_rolls_to_march_first(normalizer):
    out = normalizer.normalize(_index("2024-02-29 06:00"), 2023, TimePeriod.YEAR)
    assert out[0] == pd.Timestamp("2023-03-01 06:00")


def test_events_on_different_days_become_comparable(normalizer):
    a = normalizer.normalize_time(pd.Timestamp("2024-03-05 09:00"), 2024, TimePeriod.DAY)
    b = normalizer.normalize_time(pd.Timestamp("2021-11-30 09:00"), 2024, TimePeriod.DAY)
    assert a == b


def test_timezone_stripped_keeps_wall_clock(normalizer):
    out = normalizer.normalize(_index("2024-03-05 23:30", tz="America/New_York"), 2024, TimePeriod.DAY)
    assert out.tz is None
    assert out[0] == pd.Timestamp("2024-01-01 23:30")


def test_timezone_warning_only_once(normalizer, caplog):
    times = _index("2024-03-05 23:30", tz="UTC")
    with caplog.at_level(logging.WARNING):
        normalizer.normalize(times, 2024, TimePeriod.DAY)
        normalizer.normalize(times, 2024, TimePeriod.YEAR)
        normalizer.cycle_window(times, TimePeriod.DAY)
    messages = [r.getMessage() for r in caplog.records if "TimeZone" in r.getMessage()]
    assert messages == ["TimeZone is being ignored"]
    assert normalizer.timezone_warned


def test_naive_times_do_not_warn(normalizer, caplog):
    with caplog.at_level(logging.WARNING):
        normalizer.normalize(_index("2024-03-05 23:30"), 2024, TimePeriod.DAY)
    assert not caplog.records
    assert not normalizer.timezone_warned


def test_cycle_window_day(normalizer):
    window = normalizer.cycle_window(_index("2024-03-07 13:15", "2024-03-05 09:00"), TimePeriod.DAY)
    assert window.start == pd.Timestamp("2024-01-01")
    assert window.end - window.start == pd.Timedelta(hours=24)
    assert window.year == 2024


def test_cycle_window_year_uses_earliest_start(normalizer):
    window = normalizer.cycle_window(_index("2024-01-10", "2023-06-01 08:00"), TimePeriod.YEAR)
    assert window.start == pd.Timestamp("2023-01-01")
    assert window.end == pd.Timestamp("2024-01-01")


def test_cycle_window_leap_year_is_366_days(normalizer):
    window = normalizer.cycle_window(_index("2024-05-01"), TimePeriod.YEAR)
    assert window.end - window.start == pd.Timedelta(days=366)


def test_cycle_window_empty(normalizer):
    assert normalizer.cycle_window(pd.DatetimeIndex([]), TimePeriod.DAY) is None
