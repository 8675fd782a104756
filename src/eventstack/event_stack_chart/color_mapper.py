"""Mapping of per-event values to line colors.

Palettes are (N, 3) arrays of RGB values in [0, 1]. A Plotly sequential
colorscale name (e.g. "Viridis") can be given instead and is sampled at its
defined color stops.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np
from plotly import colors as plotly_colors

from eventstack.event_stack_chart.chart_types import ColorAssignment, ColorMethod

DEFAULT_PALETTE_NAME = "Viridis"

PaletteLike = Union[str, Sequence[Sequence[float]], np.ndarray]


def _parse_plotly_color(color: str) -> tuple[float, float, float]:
    """Convert '#rrggbb' or 'rgb(r, g, b)' to floats in [0, 1]."""
    if color.startswith("#"):
        rgb = plotly_colors.hex_to_rgb(color)
    else:
        rgb = plotly_colors.unlabel_rgb(color)
    return tuple(float(c) / 255.0 for c in rgb[:3])


def resolve_palette(palette: PaletteLike) -> np.ndarray:
    """Return palette as a validated float array of shape (N, 3).

    Raises:
        ValueError: If the palette is empty, not N x 3, out of [0, 1], or an
            unknown colorscale name.
    """
    if isinstance(palette, str):
        scale = getattr(plotly_colors.sequential, palette, None)
        if not isinstance(scale, list):
            raise ValueError(f"Unknown Plotly sequential colorscale {palette!r}")
        return np.array([_parse_plotly_color(c) for c in scale], dtype=float)

    arr = np.asarray(palette, dtype=float)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"palette must have shape (N, 3), got {arr.shape}")
    if arr.shape[0] == 0:
        raise ValueError("palette must not be empty")
    if not np.all(np.isfinite(arr)) or arr.min() < 0 or arr.max() > 1:
        raise ValueError("palette values must be in the range [0, 1]")
    return arr


def color_limits(values: np.ndarray) -> tuple[float, float]:
    """(min, max) of values, widened by one when the range is degenerate."""
    lo = float(np.min(values))
    hi = float(np.max(values))
    if lo == hi:
        hi = lo + 1
    return lo, hi


def palette_indices(values: np.ndarray, n_colors: int) -> np.ndarray:
    """1-based palette index for each value.

    Values are rescaled linearly from [min, max] onto [1, n_colors + 0.99] and
    floored, so the maximum value lands on the last color.
    """
    values = np.asarray(values, dtype=float)
    lo = np.min(values)
    hi = np.max(values)
    if hi > lo:
        scaled = 1 + (values - lo) / (hi - lo) * (n_colors - 0.01)
    else:
        scaled = np.ones_like(values)
    return np.clip(np.floor(scaled).astype(int), 1, n_colors)


class ColorMapper:
    """Assigns an RGB color to every event."""

    def assign(
        self,
        values: np.ndarray,
        palette: np.ndarray,
        method: ColorMethod,
    ) -> ColorAssignment:
        """Color events by value (COLORMAPPED) or with palette[0] (SOLID).

        Args:
            values: One numeric color value per event.
            palette: (N, 3) RGB array from resolve_palette().
            method: Color method.
        """
        values = np.asarray(values, dtype=float)
        if method == ColorMethod.SOLID or len(values) == 0:
            solid = tuple(float(c) for c in palette[0])
            return ColorAssignment(method=ColorMethod(method), colors=tuple(solid for _ in values))

        indices = palette_indices(values, len(palette))
        colors = tuple(tuple(float(c) for c in palette[i - 1]) for i in indices)
        return ColorAssignment(
            method=ColorMethod.COLORMAPPED,
            colors=colors,
            indices=tuple(int(i) for i in indices),
            clim=color_limits(values),
        )
