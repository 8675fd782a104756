"""NiceGUI widget displaying an event stack chart.

Hosts a ui.plotly element fed with Plotly dicts from event_stack_plot_plotly.
All computation lives in ChartDataEngine; the widget only asks it for
RenderData and shows its advisories as notifications.
"""

from __future__ import annotations

from typing import Callable, Optional, Union

from nicegui import ui

from eventstack.event_stack_chart.chart_engine import ChartDataEngine
from eventstack.event_stack_widget.event_stack_plot import event_stack_plot_plotly
from eventstack.event_stack_widget.theme import ThemeMode, resolve_theme
from eventstack.utils.logging import get_logger

logger = get_logger(__name__)


def _safe_call(func: Callable, *args, **kwargs) -> None:
    """Call func, ignoring only 'client deleted' RuntimeErrors."""
    try:
        func(*args, **kwargs)
    except RuntimeError as e:
        if "deleted" not in str(e).lower():
            raise


class EventStackWidget:
    """Reusable event stack chart widget.

    Usage:
        engine = ChartDataEngine.from_end_times(starts, ends)
        widget = EventStackWidget(engine)
        widget.render()
        ...
        engine.set_palette("Plasma")
        widget.refresh()
    """

    def __init__(
        self,
        engine: ChartDataEngine,
        *,
        theme: Optional[Union[str, ThemeMode]] = None,
        classes: str = "w-full h-96",
    ) -> None:
        self._engine = engine
        # None follows the engine config (EventStackConfig.theme).
        self._theme = resolve_theme(theme if theme is not None else engine.config.theme)
        self._classes = classes
        self._plot: Optional[ui.plotly] = None
        self._last_notified: Optional[tuple[str, str]] = None

    @property
    def engine(self) -> ChartDataEngine:
        return self._engine

    @property
    def theme(self) -> ThemeMode:
        return self._theme

    def render(self) -> None:
        """Create the plot inside the current container."""
        fig_dict = event_stack_plot_plotly(self._engine.render_data(), theme=self._theme)
        self._plot = ui.plotly(fig_dict).classes(self._classes)
        self._notify_error()

    def refresh(self) -> None:
        """Recompute (if needed) and redraw."""
        _safe_call(self._refresh_impl)

    def _refresh_impl(self) -> None:
        if self._plot is None:
            return
        fig_dict = event_stack_plot_plotly(self._engine.render_data(), theme=self._theme)
        self._plot.update_figure(fig_dict)
        self._notify_error()

    def set_engine(self, engine: ChartDataEngine) -> None:
        self._engine = engine
        self._last_notified = None
        self.refresh()

    def set_theme(self, theme: Union[str, ThemeMode]) -> None:
        self._theme = resolve_theme(theme)
        self.refresh()

    def _notify_error(self) -> None:
        """Show the engine's advisory once per distinct error."""
        error = self._engine.last_error
        if error is None:
            return
        key = (type(error).__name__, str(error))
        if key == self._last_notified:
            return
        self._last_notified = key
        logger.debug(f"notifying advisory: {error}")
        _safe_call(ui.notify, str(error), type="warning")
