"""Saved view state for an event stack chart.

ChartState holds only what the caller set explicitly: manual YData,
ColorData and TimePeriod plus manual axis limits. Everything else is
derived again from the events on restore. The host decides where the
dictionary form is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

import pandas as pd

from eventstack.event_stack_chart.chart_types import TimePeriod


@dataclass
class ChartState:
    """Manual (caller-supplied) chart values. None means "not set"."""

    y_data: Optional[list[float]] = None
    color_data: Optional[list[float]] = None
    time_period: Optional[TimePeriod] = None
    x_limits: Optional[tuple[pd.Timestamp, pd.Timestamp]] = None
    y_limits: Optional[tuple[float, float]] = None

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.y_data, self.color_data, self.time_period, self.x_limits, self.y_limits)
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-friendly dict, omitting unset fields.

        Returns:
            Dictionary with any of the keys y_data, color_data, time_period,
            x_limits (ISO 8601 strings) and y_limits.
        """
        d: dict[str, Any] = {}
        if self.y_data is not None:
            d["y_data"] = [float(v) for v in self.y_data]
        if self.color_data is not None:
            d["color_data"] = [float(v) for v in self.color_data]
        if self.time_period is not None:
            d["time_period"] = TimePeriod(self.time_period).value
        if self.x_limits is not None:
            d["x_limits"] = [pd.Timestamp(v).isoformat() for v in self.x_limits]
        if self.y_limits is not None:
            d["y_limits"] = [float(v) for v in self.y_limits]
        return d

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChartState":
        """Deserialize from the output of to_dict().

        Raises:
            ValueError: If time_period is not "day" or "year".
        """
        time_period = data.get("time_period")
        x_limits = data.get("x_limits")
        y_limits = data.get("y_limits")
        y_data = data.get("y_data")
        color_data = data.get("color_data")
        return cls(
            y_data=[float(v) for v in y_data] if y_data is not None else None,
            color_data=[float(v) for v in color_data] if color_data is not None else None,
            time_period=TimePeriod(time_period) if time_period is not None else None,
            x_limits=tuple(pd.Timestamp(v) for v in x_limits) if x_limits is not None else None,
            y_limits=tuple(float(v) for v in y_limits) if y_limits is not None else None,
        )
