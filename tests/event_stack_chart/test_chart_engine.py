"""Unit tests for ChartDataEngine: pipeline, caching and advisories."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

import numpy as np
import pandas as pd
import pytest

from eventstack.event_stack_chart.chart_config import EventStackConfig
from eventstack.event_stack_chart.chart_engine import ChartDataEngine
from eventstack.event_stack_chart.chart_types import ColorMethod, DataMode, TimePeriod
from eventstack.event_stack_chart.errors import (
    ColorDataSizeMismatch,
    InvalidLimits,
    NameSizeMismatch,
    NegativeDuration,
    PeriodTooNarrow,
    SizeMismatch,
)


@pytest.fixture
def day_engine(day_events, gray_palette) -> ChartDataEngine:
    starts, ends = day_events
    return ChartDataEngine.from_end_times(starts, ends, palette=gray_palette)


# --- construction ---


def test_from_end_times_starts_dirty(day_engine):
    assert day_engine.dirty
    assert day_engine.state is None


def test_from_durations_matches_end_times(day_events):
    starts, ends = day_events
    a = ChartDataEngine.from_end_times(starts, ends)
    b = ChartDataEngine.from_durations(starts, ends - starts)
    assert list(a.end_times) == list(b.end_times)
    np.testing.assert_allclose(a.get_y_data(), b.get_y_data())


def test_from_durations_accepts_python_objects():
    engine = ChartDataEngine.from_durations(
        [datetime(2024, 3, 5, 9, 0)], [timedelta(minutes=90)]
    )
    assert engine.end_times[0] == pd.Timestamp("2024-03-05 10:30")


def test_from_end_times_accepts_mixed_iso_strings():
    """Date-only and date-time ISO strings may be mixed in one sequence."""
    engine = ChartDataEngine.from_end_times(
        ["2024-03-05 09:00", "2024-03-06"],
        ["2024-03-05 10:00", "2024-03-06 08:00:30"],
    )
    assert list(engine.start_times) == [pd.Timestamp("2024-03-05 09:00"), pd.Timestamp("2024-03-06")]
    assert engine.end_times[1] == pd.Timestamp("2024-03-06 08:00:30")


def test_from_dataframe_with_names():
    df = pd.DataFrame({
        "start": pd.to_datetime(["2024-03-05 09:00", "2024-03-06 22:00"]),
        "end": pd.to_datetime(["2024-03-05 11:00", "2024-03-07 01:00"]),
        "label": ["standup", "deploy"],
    })
    engine = ChartDataEngine.from_dataframe(df, "start", end_col="end", name_col="label")
    assert engine.event_names == ("standup", "deploy")
    np.testing.assert_allclose(engine.get_y_data(), [2.0, 3.0])


def test_from_dataframe_requires_one_end_column():
    df = pd.DataFrame({"start": pd.to_datetime(["2024-03-05"]), "end": pd.to_datetime(["2024-03-06"])})
    with pytest.raises(ValueError):
        ChartDataEngine.from_dataframe(df, "start")
    with pytest.raises(ValueError):
        ChartDataEngine.from_dataframe(df, "start", end_col="end", duration_col="end")
    with pytest.raises(ValueError):
        ChartDataEngine.from_dataframe(df, "start", end_col="missing")


def test_construction_rejects_size_mismatch():
    starts = pd.to_datetime(["2024-01-01 09:00", "2024-01-02 09:00", "2024-01-03 09:00"])
    ends = pd.to_datetime(["2024-01-01 10:00", "2024-01-02 10:00"])
    with pytest.raises(SizeMismatch):
        ChartDataEngine.from_end_times(starts, ends)
    with pytest.raises(SizeMismatch):
        ChartDataEngine.from_durations(starts, pd.to_timedelta(["1h"]))


def test_construction_rejects_negative_duration():
    with pytest.raises(NegativeDuration):
        ChartDataEngine.from_end_times(pd.to_datetime(["2024-01-01 10:00"]), pd.to_datetime(["2024-01-01 09:00"]))


@pytest.mark.parametrize("bad", [[1, 2], "2024-01-01", None, [pd.Timedelta("1h")]])
def test_construction_rejects_non_timestamps(bad):
    with pytest.raises(TypeError):
        ChartDataEngine.from_end_times(bad, pd.to_datetime(["2024-01-01", "2024-01-02"]))


def test_durations_must_be_durations():
    with pytest.raises(TypeError):
        ChartDataEngine.from_durations(pd.to_datetime(["2024-01-01"]), pd.to_datetime(["2024-01-02"]))


def test_unknown_option_rejected(day_events):
    starts, ends = day_events
    with pytest.raises(TypeError):
        ChartDataEngine.from_end_times(starts, ends, colour="red")


# --- pipeline scenarios ---


def test_normal_scenario_day_period():
    """09:00-10:00 auto-selects day and fills position 3 only."""
    engine = ChartDataEngine.from_end_times(
        pd.to_datetime(["2024-03-05 09:00"]), pd.to_datetime(["2024-03-05 10:00"])
    )
    assert engine.get_time_period() == TimePeriod.DAY
    data = engine.render_data()
    assert data.segments[0].y == (None, 1.0, 1.0, 1.0, None)
    assert data.tick_label_format == "HH:mm"


def test_wraparound_scenario():
    engine = ChartDataEngine.from_end_times(
        pd.to_datetime(["2024-03-05 23:30"]), pd.to_datetime(["2024-03-06 00:30"])
    )
    seg = engine.render_data().segments[0]
    assert seg.y[0] == seg.y[4] == 1.0
    assert seg.y[2] is None


def test_year_scenario_auto_selects_year():
    engine = ChartDataEngine.from_end_times(pd.to_datetime(["2024-01-10"]), pd.to_datetime(["2024-03-15"]))
    assert engine.get_time_period() == TimePeriod.YEAR
    np.testing.assert_allclose(engine.get_y_data(), [65.0])
    data = engine.render_data()
    assert data.tick_label_format == "MMM"
    assert data.cycle_window.start == pd.Timestamp("2024-01-01")
    assert data.cycle_window.end == pd.Timestamp("2025-01-01")


def test_year_scenario_forced_day_is_too_narrow(caplog):
    engine = ChartDataEngine.from_end_times(
        pd.to_datetime(["2024-01-10"]), pd.to_datetime(["2024-03-15"]), time_period="day"
    )
    with caplog.at_level(logging.WARNING):
        assert engine.recompute() is False
    assert isinstance(engine.last_error, PeriodTooNarrow)
    assert engine.last_error.period == TimePeriod.DAY
    assert engine.render_data() is None
    assert any("PeriodTooNarrow" in r.getMessage() for r in caplog.records)


def test_y_data_units_follow_period(day_engine):
    np.testing.assert_allclose(day_engine.get_y_data(), [1.0, 2.5, 1.0])
    np.testing.assert_allclose(day_engine.get_color_data(), day_engine.get_y_data())


def test_colors_follow_y_data(day_engine):
    data = day_engine.render_data()
    assert data.colors.clim == (1.0, 2.5)
    assert data.colors.indices == (1, 3, 1)
    assert data.colorbar_visible


def test_solid_color_hides_colorbar(day_engine, gray_palette):
    day_engine.set_color_method("solid")
    data = day_engine.render_data()
    assert not data.colorbar_visible
    assert set(data.colors.colors) == {tuple(gray_palette[0])}


def test_set_palette_switches_back_to_colormapped(day_engine, gray_palette):
    day_engine.set_color_method(ColorMethod.SOLID)
    day_engine.set_palette(gray_palette[::-1])
    data = day_engine.render_data()
    assert data.colors.method == ColorMethod.COLORMAPPED
    assert data.palette[0] == (1.0, 1.0, 1.0)


def test_empty_engine_renders_nothing():
    engine = ChartDataEngine()
    data = engine.render_data()
    assert data.segments == ()
    assert data.cycle_window is None
    assert not data.colorbar_visible


# --- caching ---


def test_recompute_is_idempotent(day_engine):
    assert day_engine.recompute() is True
    first = day_engine.state
    assert day_engine.dirty is False
    assert day_engine.recompute() is True
    assert day_engine.state is first
    assert day_engine.dirty is False


def test_input_change_marks_dirty(day_engine, day_events):
    day_engine.recompute()
    starts, _ = day_events
    day_engine.set_start_times(starts - pd.Timedelta(minutes=30))
    assert day_engine.dirty
    np.testing.assert_allclose(day_engine.get_y_data(), [1.5, 3.0, 1.5])
    assert not day_engine.dirty


def test_event_durations_recompute_when_dirty(day_engine, day_events):
    durations = day_engine.get_event_durations()
    assert not day_engine.dirty
    assert list(durations) == [pd.Timedelta(hours=1), pd.Timedelta(hours=2, minutes=30), pd.Timedelta(hours=1)]

    starts, _ = day_events
    day_engine.set_start_times(starts - pd.Timedelta(minutes=30))
    assert day_engine.dirty
    assert day_engine.get_event_durations()[0] == pd.Timedelta(hours=1, minutes=30)
    assert not day_engine.dirty


def test_event_durations_empty_engine():
    assert len(ChartDataEngine().get_event_durations()) == 0


def test_manual_y_data_read_does_not_recompute(day_engine):
    day_engine.set_y_data([10.0, 20.0, 30.0])
    assert day_engine.y_data_mode == DataMode.MANUAL
    np.testing.assert_allclose(day_engine.get_y_data(), [10.0, 20.0, 30.0])
    assert day_engine.dirty
    assert day_engine.state is None


def test_manual_y_data_drives_geometry_and_auto_color(day_engine):
    day_engine.set_y_data([10.0, 20.0, 30.0])
    data = day_engine.render_data()
    assert [seg.y[1] for seg in data.segments] == [10.0, 20.0, 30.0]
    np.testing.assert_allclose(day_engine.get_color_data(), [10.0, 20.0, 30.0])


def test_empty_override_reverts_to_auto(day_engine):
    day_engine.set_y_data([10.0, 20.0, 30.0])
    day_engine.set_y_data([])
    assert day_engine.y_data_mode == DataMode.AUTO
    np.testing.assert_allclose(day_engine.get_y_data(), [1.0, 2.5, 1.0])

    day_engine.set_time_period("year")
    assert day_engine.time_period_mode == DataMode.MANUAL
    day_engine.set_time_period(None)
    assert day_engine.time_period_mode == DataMode.AUTO
    assert day_engine.get_time_period() == TimePeriod.DAY


def test_manual_color_data(day_engine):
    day_engine.set_color_data([0.0, 0.0, 9.0])
    data = day_engine.render_data()
    assert data.colors.clim == (0.0, 9.0)
    assert data.colors.indices == (1, 1, 3)
    np.testing.assert_allclose(day_engine.get_y_data(), [1.0, 2.5, 1.0])


@pytest.mark.parametrize("bad", [[1.0, np.nan, 2.0], [[1.0, 2.0, 3.0]], ["a", "b", "c"]])
def test_invalid_overrides_raise_immediately(day_engine, bad):
    with pytest.raises((TypeError, ValueError)):
        day_engine.set_y_data(bad)
    assert day_engine.y_data_mode == DataMode.AUTO


# --- advisories keep the last good state ---


def test_size_mismatch_keeps_previous_state(day_engine, caplog):
    assert day_engine.recompute()
    good = day_engine.state
    good_render = day_engine.render_data()

    day_engine.set_end_times(pd.to_datetime(["2024-03-05 10:00", "2024-03-07 15:45"]))
    with caplog.at_level(logging.WARNING):
        assert day_engine.recompute() is False
    assert isinstance(day_engine.last_error, SizeMismatch)
    assert day_engine.state is good
    assert day_engine.dirty
    assert day_engine.render_data().segments == good_render.segments
    assert any("SizeMismatch" in r.getMessage() for r in caplog.records)


def test_negative_duration_via_setter_aborts(day_engine):
    day_engine.recompute()
    good = day_engine.state
    day_engine.set_events(pd.to_datetime(["2024-01-01 10:00"]), pd.to_datetime(["2024-01-01 09:00"]))
    assert day_engine.recompute() is False
    assert isinstance(day_engine.last_error, NegativeDuration)
    assert day_engine.state is good


def test_color_data_and_names_size_mismatch(day_engine):
    day_engine.set_color_data([1.0, 2.0])
    assert day_engine.recompute() is False
    assert isinstance(day_engine.last_error, ColorDataSizeMismatch)

    day_engine.set_color_data(None)
    day_engine.set_event_names(["only one"])
    assert day_engine.recompute() is False
    assert isinstance(day_engine.last_error, NameSizeMismatch)

    day_engine.set_event_names(["a", "b", "c"])
    assert day_engine.recompute() is True
    assert day_engine.last_error is None
    assert day_engine.render_data().names == ("a", "b", "c")


def test_timezone_advisory_once_per_engine(caplog):
    starts = pd.DatetimeIndex(pd.to_datetime(["2024-03-05 23:30"])).tz_localize("Europe/Berlin")
    engine = ChartDataEngine.from_end_times(starts, starts + pd.Timedelta(hours=2))
    with caplog.at_level(logging.WARNING):
        engine.recompute()
        engine.set_end_times(starts + pd.Timedelta(hours=3))
        engine.recompute()
    tz_records = [r for r in caplog.records if "TimeZone is being ignored" in r.getMessage()]
    assert len(tz_records) == 1
    seg = engine.render_data().segments[0]
    assert seg.is_wrapped
    assert seg.x[3] == pd.Timestamp("2024-01-01 23:30")


def test_tolerances_from_config():
    config = EventStackConfig(day_tolerance_hours=24.0)
    engine = ChartDataEngine.from_end_times(
        pd.to_datetime(["2024-03-31 00:00"]),
        pd.to_datetime(["2024-04-01 00:30"]),
        time_period="day",
        config=config,
    )
    assert engine.recompute() is False
    assert isinstance(engine.last_error, PeriodTooNarrow)


# --- styling and limits ---


def test_styling_validation(day_engine):
    with pytest.raises(ValueError):
        day_engine.set_marker("star")
    with pytest.raises(ValueError):
        day_engine.set_line_width(0)
    with pytest.raises(ValueError):
        day_engine.set_time_period("week")
    with pytest.raises(ValueError):
        day_engine.set_color_method("rainbow")
    day_engine.set_marker("o")
    day_engine.set_line_width(3)
    data = day_engine.render_data()
    assert data.marker == "o"
    assert data.line_width == 3.0


def test_styling_does_not_mark_dirty(day_engine):
    day_engine.recompute()
    day_engine.set_marker("s")
    day_engine.set_line_width(2.0)
    day_engine.set_y_limits((0, 5))
    assert not day_engine.dirty


def test_axis_limits(day_engine):
    day_engine.set_x_limits(("2024-01-01 06:00", "2024-01-01 18:00"))
    day_engine.set_y_limits([0, 4])
    data = day_engine.render_data()
    assert data.x_limits == (pd.Timestamp("2024-01-01 06:00"), pd.Timestamp("2024-01-01 18:00"))
    assert data.y_limits == (0.0, 4.0)
    day_engine.set_x_limits(None)
    assert day_engine.render_data().x_limits is None


@pytest.mark.parametrize("limits", [(5, 1), (1, 1), (1,), ("a", "b")])
def test_invalid_y_limits(day_engine, limits):
    with pytest.raises(InvalidLimits):
        day_engine.set_y_limits(limits)
    assert day_engine.get_y_limits() is None


def test_invalid_x_limits(day_engine):
    with pytest.raises(InvalidLimits):
        day_engine.set_x_limits(("2024-01-02", "2024-01-01"))
    with pytest.raises(InvalidLimits):
        day_engine.set_x_limits(("2024-01-01", "not a date"))
