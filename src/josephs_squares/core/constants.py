"""Tunable constants for board layout, grid rasterisation and tolerances."""

from __future__ import annotations

# ── Tolerances ───────────────────────────────────────────────────────────────

EPSILON = 1e-6  # point equality / collinearity
INSIDE_EPSILON = EPSILON * 10  # strict point-in-square test
GRAZING_SPAN = 0.02  # parametric interior span tolerated at own endpoint squares

# ── Grid metrics (render pixels, multiplied by the current scale) ────────────

GRID_TARGET_PIXEL_SIZE = 4
LINE_MARGIN_PX = 12
SQUARE_MARGIN_PX = 12
MIN_GRID_CELL_SIZE = 4

VALIDATION_SEGMENT_LENGTH = 6

# ── Board layout ─────────────────────────────────────────────────────────────

MIN_SQUARES = 2
MAX_SQUARES = 6

SHAPE_SIZE = 200
GAP = 480
MAX_COLUMNS = 3
MAX_ROWS = 2
BOARD_WIDTH = MAX_COLUMNS * SHAPE_SIZE + (MAX_COLUMNS + 1) * GAP
BOARD_HEIGHT = MAX_ROWS * SHAPE_SIZE + (MAX_ROWS + 1) * GAP

ROW_PRESETS: dict[int, tuple[int, ...]] = {
    2: (2,),
    3: (2, 1),
    4: (2, 2),
    5: (3, 2),
    6: (3, 3),
}
