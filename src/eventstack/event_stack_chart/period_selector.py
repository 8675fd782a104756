"""Selection and sanity check of the cyclic time period."""

from __future__ import annotations

from typing import Optional

import pandas as pd

from eventstack.event_stack_chart.chart_types import DataMode, TimePeriod
from eventstack.event_stack_chart.errors import PeriodTooNarrow
from eventstack.utils.logging import get_logger

logger = get_logger(__name__)

ONE_DAY = pd.Timedelta(days=1)

# Overflow tolerances: one extra hour for a daylight saving shift and one
# extra day for leap years.
DEFAULT_DAY_TOLERANCE = pd.Timedelta(hours=25)
DEFAULT_YEAR_TOLERANCE = pd.Timedelta(days=366)


class PeriodSelector:
    """Chooses between a day and a year period from event durations.

    Attributes:
        day_tolerance: Longest duration accepted for TimePeriod.DAY.
        year_tolerance: Longest duration accepted for TimePeriod.YEAR.
    """

    def __init__(
        self,
        *,
        day_tolerance: pd.Timedelta = DEFAULT_DAY_TOLERANCE,
        year_tolerance: pd.Timedelta = DEFAULT_YEAR_TOLERANCE,
    ) -> None:
        self.day_tolerance = pd.Timedelta(day_tolerance)
        self.year_tolerance = pd.Timedelta(year_tolerance)

    def select(
        self,
        durations: pd.TimedeltaIndex,
        mode: DataMode,
        period: Optional[TimePeriod] = None,
    ) -> TimePeriod:
        """Return the period to use and check that every event fits in it.

        Args:
            durations: Event durations (already validated as non-negative).
            mode: MANUAL returns ``period`` unchanged, AUTO picks DAY when the
                longest event is at most 24 hours and YEAR otherwise.
            period: The caller's period, required when mode is MANUAL.

        Raises:
            PeriodTooNarrow: If an event is longer than the selected period allows.
        """
        if mode == DataMode.MANUAL:
            if period is None:
                raise ValueError("A manual time period requires a period value")
            selected = TimePeriod(period)
        else:
            selected = self.auto_period(durations)
        self.check_fits(durations, selected)
        return selected

    def auto_period(self, durations: pd.TimedeltaIndex) -> TimePeriod:
        if len(durations) == 0 or durations.max() <= ONE_DAY:
            return TimePeriod.DAY
        return TimePeriod.YEAR

    def check_fits(self, durations: pd.TimedeltaIndex, period: TimePeriod) -> None:
        if len(durations) == 0:
            return
        longest = durations.max()
        if period == TimePeriod.DAY and longest > self.day_tolerance:
            raise PeriodTooNarrow(
                TimePeriod.DAY,
                'EndTimes must be less than one full day after StartTimes when TimePeriod set to "day". '
                'Consider setting TimePeriod to "year" instead.',
            )
        if period == TimePeriod.YEAR and longest > self.year_tolerance:
            raise PeriodTooNarrow(
                TimePeriod.YEAR,
                "EndTimes must be less than one full year after StartTimes.",
            )
        logger.debug(f"period={period.value} fits longest event {longest}")
