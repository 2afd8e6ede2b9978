"""Scale-dependent grid metrics."""

from __future__ import annotations

import math
from dataclasses import dataclass

from josephs_squares.core.constants import (
    GRID_TARGET_PIXEL_SIZE,
    LINE_MARGIN_PX,
    MIN_GRID_CELL_SIZE,
    SQUARE_MARGIN_PX,
    VALIDATION_SEGMENT_LENGTH,
)


@dataclass(frozen=True, slots=True)
class GridMetrics:
    """Raster cell size and clearance margins, in board units."""

    cell_size: float
    square_margin: float
    line_margin: float
    resample_length: float = VALIDATION_SEGMENT_LENGTH


def derive_grid_metrics(scale: float = 1.0) -> GridMetrics:
    """Metrics for *scale* board units per rendered pixel.

    Keeps tolerances perceptually constant across zoom levels; degenerate
    scales fall back to 1.
    """
    if not (isinstance(scale, (int, float)) and math.isfinite(scale) and scale > 0):
        scale = 1.0

    return GridMetrics(
        cell_size=max(MIN_GRID_CELL_SIZE, scale * GRID_TARGET_PIXEL_SIZE),
        square_margin=scale * SQUARE_MARGIN_PX,
        line_margin=scale * LINE_MARGIN_PX,
    )


DEFAULT_GRID_METRICS = derive_grid_metrics(1.0)
