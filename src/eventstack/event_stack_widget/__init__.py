"""NiceGUI/Plotly rendering for event stack charts."""

from eventstack.event_stack_widget.event_stack_plot import event_stack_plot_plotly
from eventstack.event_stack_widget.event_stack_widget import EventStackWidget
from eventstack.event_stack_widget.theme import ThemeMode

__all__ = [
    "EventStackWidget",
    "ThemeMode",
    "event_stack_plot_plotly",
]
