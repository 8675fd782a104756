"""Event stack chart data engine.

ChartDataEngine owns the inputs of an event stack chart (start/end times,
names, optional YData/ColorData/TimePeriod overrides, palette and styling)
and turns them into render-ready geometry and colors:

    validate -> select period -> cycle window -> YData/ColorData
             -> normalize -> segments -> colors

Derived data is cached in an immutable EngineState and only rebuilt when an
input changed (the dirty flag). A failing pass logs a warning, records the
error in ``last_error`` and keeps the previous EngineState, so a renderer
keeps showing the last good chart.

Public API:

- **from_end_times(starts, ends, ...)** / **from_durations(starts, durations, ...)**
  / **from_dataframe(df, start_col, ...)** - explicit constructors.
- **set_*()** - replace one input; data inputs mark the engine dirty.
- **get_y_data() / get_color_data() / get_time_period()** - lazily recompute
  when dirty and the field is in auto mode.
- **recompute()** - run the pipeline if dirty; returns False on failure.
- **render_data()** - full update pass, returns RenderData or None.
- **get_chart_state() / load_chart_state()** - manual values for save/restore.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence

import numpy as np
import pandas as pd

from eventstack.event_stack_chart.chart_config import EventStackConfig
from eventstack.event_stack_chart.chart_state import ChartState
from eventstack.event_stack_chart.chart_types import (
    MARKERS,
    RGB,
    ColorAssignment,
    ColorMethod,
    CycleWindow,
    DataMode,
    RenderSegment,
    TimePeriod,
)
from eventstack.event_stack_chart.color_mapper import ColorMapper, PaletteLike, resolve_palette
from eventstack.event_stack_chart.cyclic_normalizer import (
    DISPLAY_FORMATS,
    TICK_LABEL_FORMATS,
    CyclicNormalizer,
)
from eventstack.event_stack_chart.errors import EventStackError, InvalidLimits, SizeMismatch
from eventstack.event_stack_chart.interval_validator import validate_events, validate_limits
from eventstack.event_stack_chart.period_selector import PeriodSelector
from eventstack.event_stack_chart.segment_generator import SegmentGenerator
from eventstack.utils.logging import get_logger

logger = get_logger(__name__)

_PERIOD_UNITS = {
    TimePeriod.DAY: pd.Timedelta(hours=1),
    TimePeriod.YEAR: pd.Timedelta(days=1),
}


@dataclass(frozen=True, eq=False)
class EngineState:
    """Everything derived by one successful recompute pass."""

    durations: pd.TimedeltaIndex
    time_period: TimePeriod
    cycle_window: Optional[CycleWindow]
    start_norm: pd.DatetimeIndex
    end_norm: pd.DatetimeIndex
    y_data: np.ndarray
    color_data: np.ndarray
    names: tuple[str, ...]
    segments: tuple[RenderSegment, ...]
    colors: ColorAssignment
    palette: tuple[RGB, ...]

    @property
    def tick_label_format(self) -> str:
        return TICK_LABEL_FORMATS[self.time_period]

    @property
    def display_format(self) -> str:
        return DISPLAY_FORMATS[self.time_period]


@dataclass(frozen=True, eq=False)
class RenderData:
    """What a renderer needs to draw the chart.

    One polyline (segments[i]) and one color (colors.colors[i]) per event.
    x_limits/y_limits are None when the renderer should fit the data.
    """

    segments: tuple[RenderSegment, ...]
    colors: ColorAssignment
    palette: tuple[RGB, ...]
    names: tuple[str, ...]
    time_period: TimePeriod
    tick_label_format: str
    display_format: str
    cycle_window: Optional[CycleWindow]
    x_limits: Optional[tuple[pd.Timestamp, pd.Timestamp]]
    y_limits: Optional[tuple[float, float]]
    marker: str
    marker_size: int
    line_width: float
    title: str = ""
    x_label: str = ""
    y_label: str = ""
    colorbar_label: str = ""

    @property
    def colorbar_visible(self) -> bool:
        return self.colors.method == ColorMethod.COLORMAPPED and self.colors.clim is not None


# ----------------------------
# Input coercion
# ----------------------------

def _as_datetimes(values: Any, what: str) -> pd.DatetimeIndex:
    """Coerce a sequence of timestamps to a DatetimeIndex, rejecting other kinds."""
    if values is None or isinstance(values, (str, bytes)) or np.isscalar(values):
        raise TypeError(f"{what} must be a sequence of timestamps, got {type(values).__name__}")
    index = values if isinstance(values, pd.Index) else pd.Index(values)
    if len(index) == 0:
        return pd.DatetimeIndex([])
    if not isinstance(index, pd.DatetimeIndex):
        if index.dtype.kind != "O":
            raise TypeError(f"{what} must contain timestamps, got dtype {index.dtype}")
        try:
            index = pd.DatetimeIndex(pd.to_datetime(index, format="ISO8601"))
        except (TypeError, ValueError) as e:
            raise TypeError(f"{what} must contain timestamps: {e}") from e
    if index.hasnans:
        raise ValueError(f"{what} must not contain missing (NaT) values")
    return index


def _as_durations(values: Any, what: str = "durations") -> pd.TimedeltaIndex:
    """Coerce a sequence of durations to a TimedeltaIndex, rejecting other kinds."""
    if values is None or isinstance(values, (str, bytes)) or np.isscalar(values):
        raise TypeError(f"{what} must be a sequence of durations, got {type(values).__name__}")
    index = values if isinstance(values, pd.Index) else pd.Index(values)
    if len(index) == 0:
        return pd.TimedeltaIndex([])
    if not isinstance(index, pd.TimedeltaIndex):
        if index.dtype.kind != "O":
            raise TypeError(f"{what} must contain durations, got dtype {index.dtype}")
        try:
            index = pd.TimedeltaIndex(pd.to_timedelta(index))
        except (TypeError, ValueError) as e:
            raise TypeError(f"{what} must contain durations: {e}") from e
    if index.hasnans:
        raise ValueError(f"{what} must not contain missing (NaT) values")
    return index


def _as_values(values: Any, what: str) -> np.ndarray:
    """Coerce an optional numeric override; None and empty mean auto."""
    if values is None:
        return np.array([], dtype=float)
    if isinstance(values, (str, bytes)) or np.isscalar(values):
        raise TypeError(f"{what} must be a sequence of numbers")
    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{what} must be numeric: {e}") from e
    if arr.ndim != 1:
        raise ValueError(f"{what} must be one-dimensional, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{what} must contain only finite values")
    return arr


def _as_names(values: Any) -> tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, (str, bytes)):
        raise TypeError("names must be a sequence of strings, not a single string")
    return tuple(str(v) for v in values)


def _strip_tz(ts: pd.Timestamp) -> pd.Timestamp:
    return ts.tz_localize(None) if ts.tz is not None else ts


class ChartDataEngine:
    """Computes event stack geometry and colors with dirty-flag caching.

    Attributes:
        config: EventStackConfig supplying tolerances and styling defaults.
    """

    def __init__(self, *, config: Optional[EventStackConfig] = None) -> None:
        """Create an engine with no events. Use the from_* constructors for data."""
        self.config = config if config is not None else EventStackConfig()

        self._starts = pd.DatetimeIndex([])
        self._ends = pd.DatetimeIndex([])
        self._names: tuple[str, ...] = ()

        self._y_data = np.array([], dtype=float)
        self._y_data_mode = DataMode.AUTO
        self._color_data = np.array([], dtype=float)
        self._color_data_mode = DataMode.AUTO
        self._time_period: Optional[TimePeriod] = None
        self._time_period_mode = DataMode.AUTO

        self._palette = resolve_palette(self.config.palette)
        self._color_method = ColorMethod(self.config.color_method)
        self._marker = self.config.marker
        self._marker_size = int(self.config.marker_size)
        self._line_width = float(self.config.line_width)
        self._x_limits: Optional[tuple[pd.Timestamp, pd.Timestamp]] = None
        self._y_limits: Optional[tuple[float, float]] = None
        self.title = ""
        self.x_label = ""
        self.y_label = ""
        self.colorbar_label = ""

        self._normalizer = CyclicNormalizer()
        self._period_selector = PeriodSelector(
            day_tolerance=self.config.day_tolerance,
            year_tolerance=self.config.year_tolerance,
        )
        self._segment_generator = SegmentGenerator()
        self._color_mapper = ColorMapper()

        self._state: Optional[EngineState] = None
        self._dirty = True
        self._last_error: Optional[EventStackError] = None

    # ----------------------------
    # Construction variants
    # ----------------------------

    @classmethod
    def from_end_times(cls, starts: Any, ends: Any, **options: Any) -> "ChartDataEngine":
        """Create an engine from start and end timestamps.

        Args:
            starts: Sequence of event start timestamps.
            ends: Sequence of event end timestamps, same length as starts.
            **options: Any of time_period, names, y_data, color_data, palette,
                color_method, marker, marker_size, line_width, title, x_label,
                y_label, colorbar_label, config.

        Raises:
            TypeError: If starts/ends are not timestamp sequences.
            SizeMismatch: If starts and ends differ in length.
            NegativeDuration: If an end precedes its start.
        """
        engine = cls(config=options.pop("config", None))
        starts = _as_datetimes(starts, "starts")
        ends = _as_datetimes(ends, "ends")
        validate_events(starts, ends)
        engine._starts = starts
        engine._ends = ends
        engine._apply_options(options)
        return engine

    @classmethod
    def from_durations(cls, starts: Any, durations: Any, **options: Any) -> "ChartDataEngine":
        """Create an engine from start timestamps and durations (end = start + duration).

        Raises:
            TypeError: If starts are not timestamps or durations are not durations.
            SizeMismatch: If starts and durations differ in length.
            NegativeDuration: If a duration is negative.
        """
        starts = _as_datetimes(starts, "starts")
        durations = _as_durations(durations)
        if len(starts) != len(durations):
            raise SizeMismatch(
                f"durations must have the same number of elements as starts "
                f"(got {len(durations)} and {len(starts)})."
            )
        return cls.from_end_times(starts, starts + durations, **options)

    @classmethod
    def from_dataframe(
        cls,
        df: pd.DataFrame,
        start_col: str,
        *,
        end_col: Optional[str] = None,
        duration_col: Optional[str] = None,
        name_col: Optional[str] = None,
        **options: Any,
    ) -> "ChartDataEngine":
        """Create an engine from dataframe columns.

        Exactly one of end_col and duration_col must be given.

        Raises:
            ValueError: If a column is missing or both/neither of end_col and
                duration_col are given.
        """
        if (end_col is None) == (duration_col is None):
            raise ValueError("Specify exactly one of end_col or duration_col")
        for col in (start_col, end_col, duration_col, name_col):
            if col is not None and col not in df.columns:
                raise ValueError(f"df must contain column {col!r}")
        if name_col is not None:
            options["names"] = df[name_col].astype(str).tolist()
        if end_col is not None:
            return cls.from_end_times(df[start_col], df[end_col], **options)
        return cls.from_durations(df[start_col], df[duration_col], **options)

    def _apply_options(self, options: dict[str, Any]) -> None:
        setters = {
            "time_period": self.set_time_period,
            "names": self.set_event_names,
            "y_data": self.set_y_data,
            "color_data": self.set_color_data,
            "palette": self.set_palette,
            "color_method": self.set_color_method,
            "marker": self.set_marker,
            "marker_size": self.set_marker_size,
            "line_width": self.set_line_width,
            "x_limits": self.set_x_limits,
            "y_limits": self.set_y_limits,
        }
        for key, value in options.items():
            if key in setters:
                setters[key](value)
            elif key in ("title", "x_label", "y_label", "colorbar_label"):
                setattr(self, key, str(value))
            else:
                raise TypeError(f"Unknown option {key!r}")

    # ----------------------------
    # Inputs
    # ----------------------------

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def last_error(self) -> Optional[EventStackError]:
        """Condition reported by the most recent failed recompute, None after a success."""
        return self._last_error

    @property
    def start_times(self) -> pd.DatetimeIndex:
        return self._starts

    @property
    def end_times(self) -> pd.DatetimeIndex:
        return self._ends

    @property
    def event_names(self) -> tuple[str, ...]:
        return self._names

    @property
    def y_data_mode(self) -> DataMode:
        return self._y_data_mode

    @property
    def color_data_mode(self) -> DataMode:
        return self._color_data_mode

    @property
    def time_period_mode(self) -> DataMode:
        return self._time_period_mode

    def set_start_times(self, starts: Any) -> None:
        self._starts = _as_datetimes(starts, "starts")
        self._dirty = True

    def set_end_times(self, ends: Any) -> None:
        self._ends = _as_datetimes(ends, "ends")
        self._dirty = True

    def set_events(self, starts: Any, ends: Any) -> None:
        """Replace start and end times together."""
        starts = _as_datetimes(starts, "starts")
        ends = _as_datetimes(ends, "ends")
        self._starts = starts
        self._ends = ends
        self._dirty = True

    def set_durations(self, durations: Any) -> None:
        """Set end times as start times + durations."""
        durations = _as_durations(durations)
        if len(durations) != len(self._starts):
            raise SizeMismatch(
                f"durations must have the same number of elements as StartTimes "
                f"(got {len(durations)} and {len(self._starts)})."
            )
        self.set_end_times(self._starts + durations)

    def set_event_names(self, names: Any) -> None:
        self._names = _as_names(names)
        self._dirty = True

    def set_y_data(self, y_data: Any) -> None:
        """Set manual YData; None or empty switches back to auto (event durations)."""
        self._y_data = _as_values(y_data, "y_data")
        self._y_data_mode = DataMode.MANUAL if len(self._y_data) else DataMode.AUTO
        self._dirty = True

    def set_color_data(self, color_data: Any) -> None:
        """Set manual ColorData; None or empty switches back to auto (a copy of YData)."""
        self._color_data = _as_values(color_data, "color_data")
        self._color_data_mode = DataMode.MANUAL if len(self._color_data) else DataMode.AUTO
        self._dirty = True

    def set_time_period(self, period: Optional[Any]) -> None:
        """Fix the period to "day" or "year"; None or "" switches back to auto selection."""
        if period is None or (isinstance(period, str) and period == ""):
            self._time_period_mode = DataMode.AUTO
        else:
            value = period.lower() if isinstance(period, str) else period
            try:
                self._time_period = TimePeriod(value)
            except ValueError:
                raise ValueError(f"time_period must be 'day' or 'year', got {period!r}") from None
            self._time_period_mode = DataMode.MANUAL
        self._dirty = True

    def set_palette(self, palette: PaletteLike) -> None:
        """Set the palette and switch to colormapped coloring."""
        self._palette = resolve_palette(palette)
        self._color_method = ColorMethod.COLORMAPPED
        self._dirty = True

    def set_color_method(self, method: Any) -> None:
        try:
            self._color_method = ColorMethod(method)
        except ValueError:
            raise ValueError(f"color_method must be 'colormapped' or 'solid', got {method!r}") from None
        self._dirty = True

    def set_marker(self, marker: str) -> None:
        if marker not in MARKERS:
            raise ValueError(f"marker must be one of {MARKERS}, got {marker!r}")
        self._marker = marker

    def set_marker_size(self, size: int) -> None:
        if size <= 0:
            raise ValueError(f"marker_size must be positive, got {size}")
        self._marker_size = int(size)

    def set_line_width(self, width: float) -> None:
        if not np.isfinite(width) or width <= 0:
            raise ValueError(f"line_width must be positive, got {width}")
        self._line_width = float(width)

    def set_x_limits(self, limits: Optional[Sequence[Any]]) -> None:
        """Fix the x range (two increasing timestamps); None returns to auto."""
        if limits is None:
            self._x_limits = None
            return
        try:
            values = tuple(_strip_tz(pd.Timestamp(v)) for v in limits)
        except (TypeError, ValueError) as e:
            raise InvalidLimits(f"Specify limits as two increasing values ({e}).") from e
        self._x_limits = validate_limits(values)

    def set_y_limits(self, limits: Optional[Sequence[Any]]) -> None:
        """Fix the y range (two increasing numbers); None returns to auto."""
        if limits is None:
            self._y_limits = None
            return
        try:
            values = tuple(float(v) for v in limits)
        except (TypeError, ValueError) as e:
            raise InvalidLimits(f"Specify limits as two increasing values ({e}).") from e
        self._y_limits = validate_limits(values)

    def get_x_limits(self) -> Optional[tuple[pd.Timestamp, pd.Timestamp]]:
        return self._x_limits

    def get_y_limits(self) -> Optional[tuple[float, float]]:
        return self._y_limits

    # ----------------------------
    # Derived values
    # ----------------------------

    @property
    def state(self) -> Optional[EngineState]:
        """Last good EngineState (does not recompute)."""
        return self._state

    def get_y_data(self) -> np.ndarray:
        """YData, recomputing first when dirty and in auto mode."""
        if self._y_data_mode == DataMode.MANUAL:
            return self._y_data.copy()
        if self._dirty:
            self.recompute()
        return self._state.y_data.copy() if self._state is not None else np.array([], dtype=float)

    def get_color_data(self) -> np.ndarray:
        """ColorData, recomputing first when dirty and in auto mode."""
        if self._color_data_mode == DataMode.MANUAL:
            return self._color_data.copy()
        if self._dirty:
            self.recompute()
        return self._state.color_data.copy() if self._state is not None else np.array([], dtype=float)

    def get_time_period(self) -> Optional[TimePeriod]:
        """TimePeriod, recomputing first when dirty and in auto mode."""
        if self._time_period_mode == DataMode.MANUAL:
            return self._time_period
        if self._dirty:
            self.recompute()
        return self._state.time_period if self._state is not None else None

    def get_event_durations(self) -> pd.TimedeltaIndex:
        if self._dirty:
            self.recompute()
        return self._state.durations if self._state is not None else pd.TimedeltaIndex([])

    def recompute(self) -> bool:
        """Rebuild derived data if any input changed.

        Returns:
            True if the cached state is current, False if the pass failed. On
            failure the previous state is kept and the engine stays dirty.
        """
        if not self._dirty:
            return True
        try:
            state = self._compute_state()
        except EventStackError as e:
            self._last_error = e
            logger.warning(f"{type(e).__name__}: {e}")
            return False

        self._state = state
        self._dirty = False
        self._last_error = None
        logger.info(
            f"recomputed {len(state.segments)} events, period={state.time_period.value}, "
            f"wrapped={sum(seg.is_wrapped for seg in state.segments)}"
        )
        return True

    def _compute_state(self) -> EngineState:
        y_manual = self._y_data_mode == DataMode.MANUAL
        color_manual = self._color_data_mode == DataMode.MANUAL

        durations = validate_events(
            self._starts,
            self._ends,
            y_data=self._y_data if y_manual else None,
            color_data=self._color_data if color_manual else None,
            names=self._names,
        )

        period = self._period_selector.select(durations, self._time_period_mode, self._time_period)

        if y_manual:
            y_data = self._y_data.copy()
        else:
            y_data = np.asarray(durations / _PERIOD_UNITS[period], dtype=float)
        color_data = self._color_data.copy() if color_manual else y_data.copy()

        window = self._normalizer.cycle_window(self._starts, period)
        if window is None:
            start_norm = end_norm = pd.DatetimeIndex([])
            segments: tuple[RenderSegment, ...] = ()
        else:
            start_norm = self._normalizer.normalize(self._starts, window.year, period)
            end_norm = self._normalizer.normalize(self._ends, window.year, period)
            segments = self._segment_generator.generate(start_norm, end_norm, durations, y_data, window)

        colors = self._color_mapper.assign(color_data, self._palette, self._color_method)

        return EngineState(
            durations=durations,
            time_period=period,
            cycle_window=window,
            start_norm=start_norm,
            end_norm=end_norm,
            y_data=y_data,
            color_data=color_data,
            names=self._names,
            segments=segments,
            colors=colors,
            palette=tuple(tuple(float(c) for c in row) for row in self._palette),
        )

    def render_data(self) -> Optional[RenderData]:
        """Run an update pass and return data for the last good state.

        Returns None until a recompute has succeeded at least once.
        """
        self.recompute()
        state = self._state
        if state is None:
            return None
        return RenderData(
            segments=state.segments,
            colors=state.colors,
            palette=state.palette,
            names=state.names,
            time_period=state.time_period,
            tick_label_format=state.tick_label_format,
            display_format=state.display_format,
            cycle_window=state.cycle_window,
            x_limits=self._x_limits,
            y_limits=self._y_limits,
            marker=self._marker,
            marker_size=self._marker_size,
            line_width=self._line_width,
            title=self.title,
            x_label=self.x_label,
            y_label=self.y_label,
            colorbar_label=self.colorbar_label,
        )

    # ----------------------------
    # Save / restore
    # ----------------------------

    def get_chart_state(self) -> ChartState:
        """Manual values only: auto fields are derived again on restore."""
        return ChartState(
            y_data=self._y_data.tolist() if self._y_data_mode == DataMode.MANUAL else None,
            color_data=self._color_data.tolist() if self._color_data_mode == DataMode.MANUAL else None,
            time_period=self._time_period if self._time_period_mode == DataMode.MANUAL else None,
            x_limits=self._x_limits,
            y_limits=self._y_limits,
        )

    def load_chart_state(self, state: ChartState) -> None:
        """Restore manual values through the regular setters."""
        if state.x_limits is not None:
            self.set_x_limits(state.x_limits)
        if state.y_limits is not None:
            self.set_y_limits(state.y_limits)
        if state.y_data is not None:
            self.set_y_data(state.y_data)
        if state.color_data is not None:
            self.set_color_data(state.color_data)
        if state.time_period is not None:
            self.set_time_period(state.time_period)
