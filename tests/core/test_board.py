"""Tests for board layout and anchor lookup."""

import pytest

from josephs_squares.core.board import (
    Board,
    Square,
    anchor_point,
    build_row_breakdown,
    create_board,
    midpoint,
    straight_line,
)
from josephs_squares.core.constants import BOARD_HEIGHT, BOARD_WIDTH, SHAPE_SIZE
from josephs_squares.core.enums import SIDE_ORDER, Side
from josephs_squares.core.metrics import derive_grid_metrics
from josephs_squares.core.types import Point, SideRef


class TestSquare:
    def test_midpoints_follow_side_order(self) -> None:
        sq = Square.at(0, 100, 50, 200)
        assert sq.midpoint(Side.TOP) == Point(200, 50)
        assert sq.midpoint(Side.RIGHT) == Point(300, 150)
        assert sq.midpoint(Side.BOTTOM) == Point(200, 250)
        assert sq.midpoint(Side.LEFT) == Point(100, 150)

    def test_corners_with_offset(self) -> None:
        sq = Square.at(0, 100, 100, 200)
        assert sq.corners(10) == (
            Point(90, 90),
            Point(310, 90),
            Point(310, 310),
            Point(90, 310),
        )

    def test_side_refs(self) -> None:
        sq = Square.at(3, 0, 0)
        assert [r.side for r in sq.side_refs()] == list(SIDE_ORDER)
        assert all(r.square_id == 3 for r in sq.side_refs())


class TestRowBreakdown:
    @pytest.mark.parametrize(
        ("count", "rows"),
        [(2, (2,)), (3, (2, 1)), (4, (2, 2)), (5, (3, 2)), (6, (3, 3))],
    )
    def test_presets(self, count: int, rows: tuple[int, ...]) -> None:
        assert build_row_breakdown(count) == rows

    def test_fallback_packs_columns(self) -> None:
        assert build_row_breakdown(7) == (3, 3, 1)


class TestCreateBoard:
    @pytest.mark.parametrize("count", [2, 3, 4, 5, 6])
    def test_square_count_and_ids(self, count: int) -> None:
        board = create_board(count)
        assert [sq.id for sq in board.squares] == list(range(count))

    @pytest.mark.parametrize("count", [1, 7, 0])
    def test_out_of_range(self, count: int) -> None:
        with pytest.raises(ValueError):
            create_board(count)

    def test_squares_inside_viewport(self) -> None:
        for count in range(2, 7):
            for sq in create_board(count).squares:
                assert 0 < sq.x and sq.x + sq.size < BOARD_WIDTH
                assert 0 < sq.y and sq.y + sq.size < BOARD_HEIGHT

    def test_two_square_layout(self) -> None:
        board = create_board(2)
        left, right = board.squares
        assert left.y == right.y == pytest.approx((BOARD_HEIGHT - SHAPE_SIZE) / 2)
        assert left.x == pytest.approx((BOARD_WIDTH - 2 * SHAPE_SIZE) / 3)
        assert right.x > left.x + SHAPE_SIZE

    def test_view_box(self) -> None:
        assert create_board(2).view_box == "0 0 2520 1840"

    def test_lookup(self) -> None:
        board = create_board(3)
        assert board.square(2) is board.squares[2]
        assert board.square(9) is None
        assert len(board.side_refs()) == 12


class TestAnchors:
    def test_midpoint_without_offset(self, board: Board) -> None:
        ref = SideRef(0, Side.RIGHT)
        assert midpoint(board, ref) == board.squares[0].midpoint(Side.RIGHT)

    def test_offset_points_outward(self, board: Board) -> None:
        sq = board.squares[1]
        base = sq.midpoint(Side.TOP)
        assert midpoint(board, SideRef(1, Side.TOP), 12) == Point(base.x, base.y - 12)
        base = sq.midpoint(Side.LEFT)
        assert midpoint(board, SideRef(1, Side.LEFT), 12) == Point(base.x - 12, base.y)

    def test_anchor_uses_line_margin(self, board: Board) -> None:
        metrics = derive_grid_metrics(2.0)
        base = board.squares[0].midpoint(Side.BOTTOM)
        assert anchor_point(board, SideRef(0, Side.BOTTOM), metrics) == Point(base.x, base.y + 24)

    def test_unknown_square(self, board: Board) -> None:
        assert midpoint(board, SideRef(5, Side.TOP)) is None

    def test_straight_line(self, board: Board) -> None:
        metrics = derive_grid_metrics()
        line = straight_line(board, SideRef(0, Side.RIGHT), SideRef(1, Side.LEFT), metrics)
        assert line is not None and len(line) == 2
        assert straight_line(board, SideRef(0, Side.RIGHT), SideRef(4, Side.LEFT), metrics) is None
