"""Value types shared by the event stack chart pipeline.

This module defines the enums (TimePeriod, DataMode, ColorMethod) and the
immutable geometry/color results produced by the pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np
import pandas as pd

RGB = tuple[float, float, float]

# Number of points in every event polyline.
SEGMENT_POINTS = 5


class TimePeriod(str, Enum):
    """Cyclic period events are arranged over."""

    DAY = "day"
    YEAR = "year"


class DataMode(str, Enum):
    """Whether a derived quantity is computed by the engine or supplied by the caller."""

    AUTO = "auto"
    MANUAL = "manual"


class ColorMethod(str, Enum):
    """How lines are colored."""

    COLORMAPPED = "colormapped"
    SOLID = "solid"


# Marker symbols accepted for line vertices ("none" hides markers).
MARKERS = (
    "o", "*", "+", "p", "h", "^", "v", ">", "<", "x", "s", "d", ".", "|", "_", "none",
)


@dataclass(frozen=True)
class CycleWindow:
    """One representative day or year used as the shared x coordinate frame."""

    start: pd.Timestamp
    end: pd.Timestamp

    @property
    def year(self) -> int:
        return self.start.year


@dataclass(frozen=True)
class RenderSegment:
    """Polyline for one event.

    x holds five timestamps: period start, earlier time, midpoint, later time,
    period end. y holds the matching values, where None means "lift the pen":
    a normal event fills position 3 (index 2), a wrapped event fills positions
    1 and 5 (indices 0 and 4). Positions 2 and 4 always carry the value.
    """

    x: tuple[pd.Timestamp, ...]
    y: tuple[Optional[float], ...]

    def __post_init__(self) -> None:
        if len(self.x) != SEGMENT_POINTS or len(self.y) != SEGMENT_POINTS:
            raise ValueError(
                f"RenderSegment needs {SEGMENT_POINTS} x and y points, got {len(self.x)} and {len(self.y)}"
            )

    @property
    def is_wrapped(self) -> bool:
        return self.y[0] is not None

    def y_array(self) -> np.ndarray:
        """Y values as floats with NaN where a point is absent."""
        return np.array([np.nan if v is None else v for v in self.y], dtype=float)

    def x_list(self) -> list:
        """X values as python datetimes."""
        return [ts.to_pydatetime() for ts in self.x]


@dataclass(frozen=True)
class ColorAssignment:
    """Per-event line colors.

    indices are 1-based palette positions (colormapped only) and clim is the
    color scale domain reported to a colorbar (colormapped only).
    """

    method: ColorMethod
    colors: tuple[RGB, ...]
    indices: Optional[tuple[int, ...]] = None
    clim: Optional[tuple[float, float]] = None
