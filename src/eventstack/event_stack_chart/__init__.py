"""Event stack chart engine: intervals on a cyclic time-of-day or time-of-year axis."""

from eventstack.event_stack_chart.chart_config import EventStackConfig, EventStackConfigFile
from eventstack.event_stack_chart.chart_engine import ChartDataEngine, EngineState, RenderData
from eventstack.event_stack_chart.chart_state import ChartState
from eventstack.event_stack_chart.chart_types import (
    ColorAssignment,
    ColorMethod,
    CycleWindow,
    DataMode,
    RenderSegment,
    TimePeriod,
)
from eventstack.event_stack_chart.errors import (
    ColorDataSizeMismatch,
    EventStackError,
    InvalidLimits,
    NameSizeMismatch,
    NegativeDuration,
    PeriodTooNarrow,
    SizeMismatch,
    TimezoneMismatch,
    YDataSizeMismatch,
)

__all__ = [
    "ChartDataEngine",
    "ChartState",
    "ColorAssignment",
    "ColorDataSizeMismatch",
    "ColorMethod",
    "CycleWindow",
    "DataMode",
    "EngineState",
    "EventStackConfig",
    "EventStackConfigFile",
    "EventStackError",
    "InvalidLimits",
    "NameSizeMismatch",
    "NegativeDuration",
    "PeriodTooNarrow",
    "RenderData",
    "RenderSegment",
    "SizeMismatch",
    "TimePeriod",
    "TimezoneMismatch",
    "YDataSizeMismatch",
]
