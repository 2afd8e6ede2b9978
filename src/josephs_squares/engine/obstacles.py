"""Obstacle field: rasterised occupancy grid over the board viewport.

A cell is blocked when its centre lies inside a square shrunk by the square
margin, within the line margin of any side midpoint, or within the line
margin of any committed connection segment. Each obstacle is stamped as a
vectorised mask over its own bounding-box window of the grid.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from josephs_squares.core.board import Board
from josephs_squares.core.connection import Connection
from josephs_squares.core.geometry import almost_equal, points_to_segments
from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, GridMetrics
from josephs_squares.core.types import Point

Cell = tuple[int, int]  # (col, row)


@dataclass(frozen=True, slots=True, eq=False)
class ObstacleField:
    """Occupancy grid plus the metrics it was built with.

    ``grid`` has shape ``(rows, cols)``; ``grid[row, col]`` is True when the
    cell is blocked. The array is made read-only on construction.
    """

    grid: NDArray[np.bool_]
    cell_size: float
    square_margin: float
    line_margin: float

    def __post_init__(self) -> None:
        self.grid.setflags(write=False)

    @property
    def rows(self) -> int:
        return int(self.grid.shape[0])

    @property
    def cols(self) -> int:
        return int(self.grid.shape[1])

    def index(self, col: int, row: int) -> int:
        """Flat (row-major) index of a cell."""
        return row * self.cols + col

    def blocked(self, col: int, row: int) -> bool:
        return bool(self.grid[row, col])

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.cols and 0 <= row < self.rows

    def cell_of(self, point: Point) -> Cell:
        """Cell containing *point*, clamped to the grid."""
        col = min(self.cols - 1, max(0, math.floor(point.x / self.cell_size)))
        row = min(self.rows - 1, max(0, math.floor(point.y / self.cell_size)))
        return col, row

    def cell_center(self, col: int, row: int) -> Point:
        half = self.cell_size / 2
        return Point(col * self.cell_size + half, row * self.cell_size + half)

    def blocked_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def open_cells(self, *always_open: Cell) -> NDArray[np.bool_]:
        """Writable passability mask; *always_open* cells are forced open."""
        mask = ~self.grid
        for col, row in always_open:
            mask[row, col] = True
        return mask


def build_obstacle_field(
    board: Board,
    connections: Sequence[Connection],
    metrics: GridMetrics | None = None,
) -> ObstacleField:
    """Rasterise *board* and *connections* under *metrics*."""
    active = metrics or DEFAULT_GRID_METRICS
    cell_size = active.cell_size
    cols = max(1, math.ceil(board.width / cell_size))
    rows = max(1, math.ceil(board.height / cell_size))
    grid = np.zeros((rows, cols), dtype=bool)
    raster = _Raster(grid, cell_size)

    for square in board.squares:
        raster.stamp_box(
            square.x + active.square_margin,
            square.y + active.square_margin,
            square.x + square.size - active.square_margin,
            square.y + square.size - active.square_margin,
        )

    for square in board.squares:
        for point in square.midpoints:
            raster.stamp_disc(point, active.line_margin)

    for start, end in _connection_segments(connections):
        raster.stamp_segment(start, end, active.line_margin)

    return ObstacleField(
        grid=grid,
        cell_size=cell_size,
        square_margin=active.square_margin,
        line_margin=active.line_margin,
    )


def _connection_segments(connections: Iterable[Connection]) -> list[tuple[Point, Point]]:
    segments: list[tuple[Point, Point]] = []
    for connection in connections:
        segments.extend(points_to_segments(connection.points))
    return segments


class _Raster:
    """Stamps obstacle masks into a ``(rows, cols)`` bool array."""

    __slots__ = ("_grid", "_cell_size", "_half")

    def __init__(self, grid: NDArray[np.bool_], cell_size: float) -> None:
        self._grid = grid
        self._cell_size = cell_size
        self._half = cell_size / 2

    def _span(self, lo: float, hi: float, count: int) -> tuple[int, int]:
        """Half-open index range of cells whose centres may fall in [lo, hi]."""
        first = max(0, math.floor((lo - self._half) / self._cell_size))
        last = min(count - 1, math.ceil((hi - self._half) / self._cell_size))
        return first, last + 1

    def _window(
        self, left: float, top: float, right: float, bottom: float
    ) -> tuple[slice, slice, NDArray[np.float64], NDArray[np.float64]] | None:
        rows, cols = self._grid.shape
        row_lo, row_hi = self._span(top, bottom, rows)
        col_lo, col_hi = self._span(left, right, cols)
        if row_lo >= row_hi or col_lo >= col_hi:
            return None
        # Column vector of row centres, row vector of column centres.
        ys = (np.arange(row_lo, row_hi) * self._cell_size + self._half)[:, np.newaxis]
        xs = (np.arange(col_lo, col_hi) * self._cell_size + self._half)[np.newaxis, :]
        return slice(row_lo, row_hi), slice(col_lo, col_hi), xs, ys

    def stamp_box(self, left: float, top: float, right: float, bottom: float) -> None:
        """Block centres strictly inside the open box."""
        if left >= right or top >= bottom:
            return
        window = self._window(left, top, right, bottom)
        if window is None:
            return
        row_slice, col_slice, xs, ys = window
        inside = ((ys > top) & (ys < bottom)) & ((xs > left) & (xs < right))
        self._grid[row_slice, col_slice] |= inside

    def stamp_disc(self, center: Point, radius: float) -> None:
        window = self._window(
            center.x - radius, center.y - radius, center.x + radius, center.y + radius
        )
        if window is None:
            return
        row_slice, col_slice, xs, ys = window
        self._grid[row_slice, col_slice] |= np.hypot(xs - center.x, ys - center.y) <= radius

    def stamp_segment(self, start: Point, end: Point, radius: float) -> None:
        window = self._window(
            min(start.x, end.x) - radius,
            min(start.y, end.y) - radius,
            max(start.x, end.x) + radius,
            max(start.y, end.y) + radius,
        )
        if window is None:
            return
        row_slice, col_slice, xs, ys = window
        dx = end.x - start.x
        dy = end.y - start.y
        length_sq = dx * dx + dy * dy
        if almost_equal(length_sq, 0.0):
            distance = np.hypot(xs - start.x, ys - start.y)
        else:
            t = np.clip(((xs - start.x) * dx + (ys - start.y) * dy) / length_sq, 0.0, 1.0)
            distance = np.hypot(xs - (start.x + t * dx), ys - (start.y + t * dy))
        self._grid[row_slice, col_slice] |= distance <= radius
