"""Error conditions reported by the event stack chart engine.

All conditions subclass ValueError so callers that only care about "bad
input" can catch that. ChartDataEngine turns the ones raised during a
recompute pass into logged advisories and keeps its last good state.
"""

from __future__ import annotations


class EventStackError(ValueError):
    """Base class for event stack chart input conditions."""


class SizeMismatch(EventStackError):
    """Parallel input arrays disagree in length."""


class YDataSizeMismatch(SizeMismatch):
    """Manual YData does not have one value per event."""


class ColorDataSizeMismatch(SizeMismatch):
    """Manual ColorData does not have one value per event."""


class NameSizeMismatch(SizeMismatch):
    """EventNames does not have one name per event."""


class TimezoneMismatch(EventStackError):
    """Start and end times mix zone-aware and naive timestamps."""


class NegativeDuration(EventStackError):
    """An event ends before it starts."""


class PeriodTooNarrow(EventStackError):
    """The time period cannot contain the longest event."""

    def __init__(self, period, message: str) -> None:
        super().__init__(message)
        self.period = period


class InvalidLimits(EventStackError):
    """Axis limits are not two strictly increasing values."""
