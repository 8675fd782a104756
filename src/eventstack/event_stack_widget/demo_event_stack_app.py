# Demo app for EventStackWidget
"""Demo application showing sleep-like events on a time-of-day axis and
multi-week events on a time-of-year axis.

Controls switch the palette and color method and force the time period, so
the wraparound geometry and the PeriodTooNarrow advisory can be seen.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from nicegui import ui

from eventstack.event_stack_chart.chart_config import EventStackConfigFile
from eventstack.event_stack_chart.chart_engine import ChartDataEngine
from eventstack.event_stack_widget.event_stack_widget import EventStackWidget
from eventstack.utils.logging import configure_logging


def _sleep_events(n: int = 30, seed: int = 0) -> pd.DataFrame:
    """Nightly events starting around 23:00 and lasting 6-9 hours."""
    rng = np.random.default_rng(seed)
    first = pd.Timestamp("2024-03-01 23:00")
    starts = [first + pd.Timedelta(days=i, minutes=int(rng.integers(-90, 90))) for i in range(n)]
    durations = [pd.Timedelta(hours=float(rng.uniform(6, 9))) for _ in range(n)]
    return pd.DataFrame({
        "start": starts,
        "duration": durations,
        "name": [f"Night {i + 1}" for i in range(n)],
    })


def _project_events() -> pd.DataFrame:
    return pd.DataFrame({
        "start": pd.to_datetime(["2023-01-10", "2023-04-02", "2023-11-20", "2024-06-15"]),
        "end": pd.to_datetime(["2023-03-15", "2023-05-30", "2024-02-10", "2024-08-01"]),
        "name": ["Planning", "Build", "Winter release", "Summer release"],
    })


def main() -> None:
    configure_logging(level="INFO")
    config = EventStackConfigFile.load().data

    day_engine = ChartDataEngine.from_dataframe(
        _sleep_events(),
        "start",
        duration_col="duration",
        name_col="name",
        title="Sleep",
        config=config,
        y_label="Hours",
        colorbar_label="Hours",
    )
    year_engine = ChartDataEngine.from_dataframe(
        _project_events(),
        "start",
        end_col="end",
        name_col="name",
        title="Projects",
        config=config,
        y_label="Days",
        colorbar_label="Days",
    )

    ui.page_title("EventStackWidget Demo")

    with ui.column().classes("w-full gap-4 p-4"):
        day_widget = EventStackWidget(day_engine)
        year_widget = EventStackWidget(year_engine)

        def _on_palette(e) -> None:
            for w in (day_widget, year_widget):
                w.engine.set_palette(e.value)
                w.refresh()

        def _on_solid(e) -> None:
            for w in (day_widget, year_widget):
                w.engine.set_color_method("solid" if e.value else "colormapped")
                w.refresh()

        def _on_force_day(e) -> None:
            year_widget.engine.set_time_period("day" if e.value else None)
            year_widget.refresh()

        with ui.row().classes("w-full gap-4 items-center"):
            ui.select(["Viridis", "Plasma", "Inferno", "Cividis"], value="Viridis", label="Palette",
                      on_change=_on_palette).classes("w-48")
            ui.checkbox("Solid color", on_change=_on_solid)
            ui.checkbox("Force day period (projects)", on_change=_on_force_day)

        day_widget.render()
        year_widget.render()

    ui.run(reload=False, native=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()
