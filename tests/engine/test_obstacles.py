"""Tests for the rasterised obstacle field."""

import numpy as np
import pytest

from josephs_squares.core.board import Board
from josephs_squares.core.connection import Connection
from josephs_squares.core.enums import Player, Side
from josephs_squares.core.geometry import distance_point_to_segment
from josephs_squares.core.metrics import GridMetrics, derive_grid_metrics
from josephs_squares.core.types import Point, SideRef
from josephs_squares.engine.obstacles import build_obstacle_field


def _blocked_at(field, x: float, y: float) -> bool:
    col, row = field.cell_of(Point(x, y))
    return field.blocked(col, row)


class TestDimensions:
    def test_grid_covers_viewport(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        assert (field.cols, field.rows) == (630, 460)
        assert field.grid.shape == (field.rows, field.cols)
        assert field.grid.dtype == np.bool_

    def test_coarser_scale(self, board: Board) -> None:
        field = build_obstacle_field(board, [], derive_grid_metrics(2.0))
        assert (field.cols, field.rows) == (315, 230)
        assert field.line_margin == 24

    def test_cell_of_clamps(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        assert field.cell_of(Point(-5, 99_999)) == (0, field.rows - 1)
        assert field.in_bounds(0, 0)
        assert not field.in_bounds(field.cols, 0)

    def test_cell_center(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        assert field.cell_center(2, 3) == Point(10, 14)
        assert field.index(2, 3) == 3 * field.cols + 2


class TestBlocking:
    def test_square_interior_blocked(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        sq = board.squares[0]
        assert _blocked_at(field, sq.x + sq.size / 2, sq.y + sq.size / 2)

    def test_square_margin_band_left_open(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        sq = board.squares[0]
        # Inside the square, but within square_margin of its left edge and
        # far from any midpoint.
        assert not _blocked_at(field, sq.x + 3.33, sq.y + 60)

    def test_midpoints_blocked(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        for sq in board.squares:
            for point in sq.midpoints:
                assert _blocked_at(field, point.x, point.y)

    def test_open_space(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        assert not _blocked_at(field, 10, 10)
        assert not _blocked_at(field, 1260, 920)

    def test_connections_blocked(self, board: Board, metrics: GridMetrics) -> None:
        conn = Connection(
            Player.A,
            SideRef(0, Side.TOP),
            SideRef(1, Side.TOP),
            (Point(806, 808), Point(806, 500), Point(1713, 500), Point(1713, 808)),
        )
        empty = build_obstacle_field(board, [], metrics)
        field = build_obstacle_field(board, [conn], metrics)
        assert _blocked_at(field, 1260, 500)
        assert _blocked_at(field, 1260, 510)
        assert not _blocked_at(field, 1260, 530)
        assert field.blocked_count() > empty.blocked_count()

    def test_deterministic(self, board: Board, metrics: GridMetrics) -> None:
        first = build_obstacle_field(board, [], metrics)
        second = build_obstacle_field(board, [], metrics)
        assert np.array_equal(first.grid, second.grid)

    def test_grid_is_read_only(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        with pytest.raises(ValueError):
            field.grid[0, 0] = True

    def test_open_cells_forces_cells_open(self, board: Board, metrics: GridMetrics) -> None:
        field = build_obstacle_field(board, [], metrics)
        col, row = field.cell_of(board.squares[0].midpoints[0])
        assert field.blocked(col, row)
        mask = field.open_cells((col, row))
        assert mask[row, col]
        assert np.count_nonzero(~mask) == field.blocked_count() - 1
        assert field.blocked(col, row)


class TestSegmentMask:
    def test_matches_exact_distance(self, board: Board, metrics: GridMetrics) -> None:
        start, end = Point(300, 100), Point(500, 260)
        conn = Connection(Player.B, SideRef(0, Side.TOP), SideRef(1, Side.TOP), (start, end))
        field = build_obstacle_field(board, [conn], metrics)
        empty = build_obstacle_field(board, [], metrics)

        for row in range(10, 80):
            for col in range(60, 140):
                center = field.cell_center(col, row)
                near = distance_point_to_segment(center, start, end) <= metrics.line_margin
                assert field.blocked(col, row) == (near or empty.blocked(col, row))
