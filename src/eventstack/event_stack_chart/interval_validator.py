"""Validation of raw (start, end) intervals and their parallel arrays."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np
import pandas as pd

from eventstack.event_stack_chart.errors import (
    ColorDataSizeMismatch,
    InvalidLimits,
    NameSizeMismatch,
    NegativeDuration,
    SizeMismatch,
    TimezoneMismatch,
    YDataSizeMismatch,
)


def event_durations(starts: pd.DatetimeIndex, ends: pd.DatetimeIndex) -> pd.TimedeltaIndex:
    """Elapsed time of each event (ends - starts), zone aware."""
    if len(starts) != len(ends):
        raise SizeMismatch(
            f"EndTimes must have the same number of elements as StartTimes "
            f"(got {len(ends)} and {len(starts)})."
        )
    if len(starts) and (starts.tz is None) != (ends.tz is None):
        raise TimezoneMismatch("StartTimes and EndTimes must both have a time zone or both have none.")
    return pd.TimedeltaIndex(ends - starts)


def validate_events(
    starts: pd.DatetimeIndex,
    ends: pd.DatetimeIndex,
    *,
    y_data: Optional[np.ndarray] = None,
    color_data: Optional[np.ndarray] = None,
    names: Optional[Sequence[str]] = None,
) -> pd.TimedeltaIndex:
    """Check an event set and return its durations.

    Checks run in order and the first failure is raised:

    1. starts and ends have equal length (SizeMismatch)
    2. every end >= start (NegativeDuration)
    3. manual y_data has one value per event (YDataSizeMismatch)
    4. color_data has one value per event (ColorDataSizeMismatch)
    5. names has one entry per event (NameSizeMismatch)

    Empty or None overrides mean "derive automatically" and are not checked.
    """
    durations = event_durations(starts, ends)

    n_negative = int((durations < pd.Timedelta(0)).sum())
    if n_negative:
        raise NegativeDuration(
            f"EndTimes must be greater than or equal to StartTimes ({n_negative} negative durations)."
        )

    n_events = len(starts)
    if y_data is not None and len(y_data) and len(y_data) != n_events:
        raise YDataSizeMismatch(
            f"YData must have the same number of elements as StartTimes (got {len(y_data)}, expected {n_events})."
        )
    if color_data is not None and len(color_data) and len(color_data) != n_events:
        raise ColorDataSizeMismatch(
            f"ColorData must have the same number of elements as StartTimes (got {len(color_data)}, expected {n_events})."
        )
    if names is not None and len(names) and len(names) != n_events:
        raise NameSizeMismatch(
            f"EventNames must have the same number of elements as StartTimes (got {len(names)}, expected {n_events})."
        )
    return durations


def validate_limits(limits) -> tuple:
    """Return limits as a 2-tuple, raising InvalidLimits unless strictly increasing."""
    try:
        values = tuple(limits)
    except TypeError:
        raise InvalidLimits("Specify limits as two increasing values.") from None
    if len(values) != 2:
        raise InvalidLimits("Specify limits as two increasing values.")
    try:
        increasing = bool(values[1] > values[0])
    except TypeError as e:
        raise InvalidLimits(f"Specify limits as two increasing values ({e}).") from None
    if not increasing:
        raise InvalidLimits("Specify limits as two increasing values.")
    return values
