"""
eventstack: event stack charts on a cyclic time axis.

This package provides:
- ChartDataEngine: turns (start, end) intervals into time-of-day or
  time-of-year line geometry and per-event colors, with cached recomputation
- event_stack_plot_plotly: Plotly figure dict from the engine's RenderData
- EventStackWidget: NiceGUI widget that displays an engine's chart
- Logging utilities for library and application use

For logging configuration in standalone scripts/demos:
    ```python
    from eventstack.utils.logging import configure_logging
    configure_logging(level="DEBUG")
    ```

When used as a library, logging is handled by the parent application's
configuration.
"""

import logging

from eventstack.utils.logging import configure_logging, get_logger

from eventstack.event_stack_chart import (
    ChartDataEngine,
    ChartState,
    ColorMethod,
    EventStackConfig,
    RenderData,
    TimePeriod,
)

# NullHandler so records don't reach the root logger unless an application
# configured logging. Demos call configure_logging() to add a real handler.
_logger = logging.getLogger("eventstack")
if not _logger.handlers:
    _logger.addHandler(logging.NullHandler())

__all__ = [
    "ChartDataEngine",
    "ChartState",
    "ColorMethod",
    "EventStackConfig",
    "RenderData",
    "TimePeriod",
    "configure_logging",
    "get_logger",
]

__version__ = "0.1.0"
