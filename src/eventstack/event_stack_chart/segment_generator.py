"""Five-point polyline geometry for events on a cyclic axis.

Each event becomes

    x = [window start, earlier time, midpoint, later time, window end]

with y set to the event value at positions 2 and 4. A normal event also
fills position 3, drawing one line from its start to its end. An event whose
normalized start falls after its normalized end (e.g. 23:30 to 00:30) crosses
the cycle boundary: it fills positions 1 and 5 instead and leaves position 3
absent, which draws two stubs running out to the axis edges.
"""

from __future__ import annotations

import numpy as np
import pandas as pd

from eventstack.event_stack_chart.chart_types import CycleWindow, RenderSegment
from eventstack.utils.logging import get_logger

logger = get_logger(__name__)


class SegmentGenerator:
    """Builds RenderSegment geometry for normalized events."""

    def generate(
        self,
        start_norm: pd.DatetimeIndex,
        end_norm: pd.DatetimeIndex,
        durations: pd.TimedeltaIndex,
        values: np.ndarray,
        window: CycleWindow,
    ) -> tuple[RenderSegment, ...]:
        """Generate one segment per event.

        Args:
            start_norm: Normalized start times.
            end_norm: Normalized end times.
            durations: Original (un-normalized) event durations.
            values: Y value of each event.
            window: Cycle window providing the first and last x positions.

        Returns:
            Tuple of RenderSegment in event order.
        """
        in_order = start_norm <= end_norm
        earlier = start_norm.where(in_order, end_norm)
        later = end_norm.where(in_order, start_norm)
        midpoint = earlier + durations / 2
        wrapped = np.asarray(start_norm > end_norm)

        segments = []
        for i in range(len(start_norm)):
            value = float(values[i])
            x = (window.start, earlier[i], midpoint[i], later[i], window.end)
            if wrapped[i]:
                y = (value, value, None, value, value)
            else:
                y = (None, value, value, value, None)
            segments.append(RenderSegment(x=x, y=y))

        logger.debug(f"generated {len(segments)} segments, {int(wrapped.sum())} wrapped")
        return tuple(segments)
