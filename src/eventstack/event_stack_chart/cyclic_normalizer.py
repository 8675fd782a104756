"""Projection of calendar timestamps onto one representative day or year.

Events from different days (or years) become directly comparable once their
year is rewritten to a shared reference year and, for the day period, their
month and day are forced to January 1st. Only the time of day (or the date
within the year) is left meaningful.
"""

from __future__ import annotations

from typing import Optional

import pandas as pd

from eventstack.event_stack_chart.chart_types import CycleWindow, TimePeriod
from eventstack.utils.logging import get_logger

logger = get_logger(__name__)

# strftime formats used to display normalized values (hover text, tables).
DISPLAY_FORMATS: dict[TimePeriod, str] = {
    TimePeriod.DAY: "%I:%M %p",
    TimePeriod.YEAR: "%d %m, %Y",
}

# Axis tick label convention handed to renderers.
TICK_LABEL_FORMATS: dict[TimePeriod, str] = {
    TimePeriod.DAY: "HH:mm",
    TimePeriod.YEAR: "MMM",
}


def _move_to_year(ts: pd.Timestamp, year: int) -> pd.Timestamp:
    """Rewrite the year of ts, rolling Feb 29 over to Mar 1 in non-leap years."""
    return ts.replace(year=year, day=1) + pd.Timedelta(days=ts.day - 1)


class CyclicNormalizer:
    """Maps timestamps onto a single cycle instance.

    Time zones are dropped (wall-clock time is kept). The first time that
    happens a warning is logged; later occurrences on the same normalizer
    are silent.
    """

    def __init__(self) -> None:
        self._timezone_warned = False

    @property
    def timezone_warned(self) -> bool:
        return self._timezone_warned

    def strip_timezone(self, times: pd.DatetimeIndex) -> pd.DatetimeIndex:
        if times.tz is None:
            return times
        if not self._timezone_warned:
            logger.warning("TimeZone is being ignored")
            self._timezone_warned = True
        return times.tz_localize(None)

    def normalize_time(self, ts, reference_year: int, period: TimePeriod) -> pd.Timestamp:
        """Normalize a single timestamp."""
        return self.normalize(pd.DatetimeIndex([pd.Timestamp(ts)]), reference_year, period)[0]

    def normalize(
        self,
        times: pd.DatetimeIndex,
        reference_year: int,
        period: TimePeriod,
    ) -> pd.DatetimeIndex:
        """Normalize timestamps into the reference year (and day, for TimePeriod.DAY).

        Args:
            times: Timestamps to normalize, zone aware or naive.
            reference_year: Year of the cycle window.
            period: DAY keeps only the time of day, YEAR keeps the date within the year.

        Returns:
            Naive DatetimeIndex of the same length.
        """
        naive = self.strip_timezone(pd.DatetimeIndex(times))
        if period == TimePeriod.DAY:
            day_start = pd.Timestamp(year=reference_year, month=1, day=1)
            return pd.DatetimeIndex(day_start + (naive - naive.normalize()))
        return pd.DatetimeIndex([_move_to_year(ts, reference_year) for ts in naive])

    def cycle_window(self, starts: pd.DatetimeIndex, period: TimePeriod) -> Optional[CycleWindow]:
        """Representative cycle derived from the earliest start.

        Returns None for an empty event set.
        """
        if len(starts) == 0:
            return None
        earliest = self.strip_timezone(pd.DatetimeIndex(starts)).min()
        start = self.normalize_time(earliest, earliest.year, period).normalize()
        if period == TimePeriod.DAY:
            return CycleWindow(start=start, end=start + pd.Timedelta(hours=24))
        start = start.replace(month=1, day=1)
        return CycleWindow(start=start, end=start + pd.DateOffset(years=1))
