"""Plotly figure for an event stack chart.

Returns a Plotly figure dict (never go.Figure) for ui.plotly / update_figure.
One line trace is drawn per event; None y values break the line, which is
how wrapped events show up as two stubs at the axis edges.
"""

from __future__ import annotations

from typing import Optional, Union

import plotly.graph_objects as go

from eventstack.event_stack_chart.chart_engine import RenderData
from eventstack.event_stack_chart.chart_types import RGB
from eventstack.event_stack_widget.theme import (
    ThemeMode,
    get_grid_color,
    get_theme_colors,
    get_theme_template,
    resolve_theme,
)

# Engine tick label convention -> d3 time format.
TICK_FORMATS = {
    "HH:mm": "%H:%M",
    "MMM": "%b",
}

PLOTLY_MARKERS = {
    "o": "circle",
    "*": "asterisk",
    "+": "cross",
    "p": "pentagon",
    "h": "hexagon",
    "^": "triangle-up",
    "v": "triangle-down",
    ">": "triangle-right",
    "<": "triangle-left",
    "x": "x",
    "s": "square",
    "d": "diamond",
    ".": "circle",
    "|": "line-ns",
    "_": "line-ew",
}


def rgb_to_plotly(rgb: RGB) -> str:
    """(r, g, b) floats in [0, 1] -> 'rgb(R, G, B)'."""
    r, g, b = (int(round(c * 255)) for c in rgb)
    return f"rgb({r}, {g}, {b})"


def palette_to_colorscale(palette: tuple[RGB, ...]) -> list[list]:
    """Evenly spaced Plotly colorscale from palette colors."""
    if len(palette) == 1:
        color = rgb_to_plotly(palette[0])
        return [[0.0, color], [1.0, color]]
    n = len(palette) - 1
    return [[i / n, rgb_to_plotly(rgb)] for i, rgb in enumerate(palette)]


def event_stack_plot_plotly(
    render_data: Optional[RenderData],
    theme: Optional[Union[str, ThemeMode]] = None,
) -> dict:
    """Create the event stack figure.

    Args:
        render_data: Output of ChartDataEngine.render_data(), or None for an
            empty plot.
        theme: Theme mode (DARK or LIGHT). Defaults to LIGHT if None.

    Returns:
        Plotly figure dict ready for ui.plotly / update_figure.
    """
    theme_mode = resolve_theme(theme)
    template = get_theme_template(theme_mode)
    bg_color, fg_color = get_theme_colors(theme_mode)
    grid_color = get_grid_color(theme_mode)

    fig = go.Figure()
    fig.update_layout(
        template=template,
        paper_bgcolor=bg_color,
        plot_bgcolor=bg_color,
        font=dict(color=fg_color),
        showlegend=False,
    )
    if render_data is None:
        return fig.to_dict()

    mode = "lines" if render_data.marker == "none" else "lines+markers"
    symbol = PLOTLY_MARKERS.get(render_data.marker, "circle")
    marker_size = render_data.marker_size * (0.5 if render_data.marker == "." else 1)

    for i, segment in enumerate(render_data.segments):
        color = rgb_to_plotly(render_data.colors.colors[i])
        name = render_data.names[i] if render_data.names else f"Event {i + 1}"
        fig.add_trace(
            go.Scatter(
                x=segment.x_list(),
                y=list(segment.y),
                mode=mode,
                name=name,
                connectgaps=False,
                line=dict(color=color, width=render_data.line_width),
                marker=dict(symbol=symbol, size=marker_size, color=color),
                xhoverformat=render_data.display_format,
                hovertemplate=f"{name}<br>%{{x}}<br>%{{y:.3g}}<extra></extra>",
            )
        )

    if render_data.colorbar_visible:
        cmin, cmax = render_data.colors.clim
        # Invisible trace carrying the colorbar.
        fig.add_trace(
            go.Scatter(
                x=[None],
                y=[None],
                mode="markers",
                hoverinfo="skip",
                showlegend=False,
                marker=dict(
                    colorscale=palette_to_colorscale(render_data.palette),
                    cmin=cmin,
                    cmax=cmax,
                    color=[cmin],
                    showscale=True,
                    colorbar=dict(title=dict(text=render_data.colorbar_label)),
                ),
            )
        )

    if render_data.x_limits is not None:
        x_range = [ts.to_pydatetime() for ts in render_data.x_limits]
    elif render_data.cycle_window is not None:
        window = render_data.cycle_window
        x_range = [window.start.to_pydatetime(), window.end.to_pydatetime()]
    else:
        x_range = None

    xaxis = dict(
        type="date",
        title=render_data.x_label,
        tickformat=TICK_FORMATS.get(render_data.tick_label_format, render_data.tick_label_format),
        color=fg_color,
        gridcolor=grid_color,
    )
    if x_range is not None:
        xaxis["range"] = x_range
    yaxis = dict(title=render_data.y_label, color=fg_color, gridcolor=grid_color)
    if render_data.y_limits is not None:
        yaxis["range"] = list(render_data.y_limits)

    fig.update_layout(
        title=dict(text=render_data.title),
        xaxis=xaxis,
        yaxis=yaxis,
        margin=dict(l=40, r=20, t=40 if render_data.title else 10, b=40),
    )
    return fig.to_dict()
