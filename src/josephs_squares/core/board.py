"""Board layout: squares with per-side anchors inside a fixed viewport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from josephs_squares.core.constants import (
    BOARD_HEIGHT,
    BOARD_WIDTH,
    MAX_COLUMNS,
    MAX_SQUARES,
    MIN_SQUARES,
    ROW_PRESETS,
    SHAPE_SIZE,
)
from josephs_squares.core.enums import SIDE_ORDER, Side
from josephs_squares.core.types import Point, SideRef

if TYPE_CHECKING:
    from josephs_squares.core.metrics import GridMetrics

_SIDE_INDEX: dict[Side, int] = {side: index for index, side in enumerate(SIDE_ORDER)}


@dataclass(frozen=True, slots=True)
class Square:
    """Axis-aligned square; ``midpoints`` follow :data:`SIDE_ORDER`."""

    id: int
    x: float
    y: float
    size: float
    midpoints: tuple[Point, Point, Point, Point]

    @classmethod
    def at(cls, square_id: int, x: float, y: float, size: float = SHAPE_SIZE) -> Square:
        half = size / 2
        return cls(
            id=square_id,
            x=x,
            y=y,
            size=size,
            midpoints=(
                Point(x + half, y),
                Point(x + size, y + half),
                Point(x + half, y + size),
                Point(x, y + half),
            ),
        )

    def midpoint(self, side: Side) -> Point:
        return self.midpoints[_SIDE_INDEX[side]]

    def corners(self, offset: float = 0.0) -> tuple[Point, Point, Point, Point]:
        """Corners clockwise from top-left, pushed outward by *offset*."""
        left = self.x - offset
        top = self.y - offset
        right = self.x + self.size + offset
        bottom = self.y + self.size + offset
        return (
            Point(left, top),
            Point(right, top),
            Point(right, bottom),
            Point(left, bottom),
        )

    def side_refs(self) -> tuple[SideRef, ...]:
        return tuple(SideRef(self.id, side) for side in SIDE_ORDER)


@dataclass(frozen=True, slots=True)
class Board:
    """Immutable set of squares plus the viewport they live in."""

    squares: tuple[Square, ...]
    width: float = BOARD_WIDTH
    height: float = BOARD_HEIGHT

    def square(self, square_id: int) -> Square | None:
        for square in self.squares:
            if square.id == square_id:
                return square
        return None

    def side_refs(self) -> list[SideRef]:
        return [ref for square in self.squares for ref in square.side_refs()]

    @property
    def view_box(self) -> str:
        return f"0 0 {self.width:g} {self.height:g}"


def build_row_breakdown(square_count: int) -> tuple[int, ...]:
    """Squares per row, e.g. 5 → ``(3, 2)``."""
    preset = ROW_PRESETS.get(square_count)
    if preset is not None:
        return preset

    breakdown: list[int] = []
    max_per_row = min(MAX_COLUMNS, square_count)
    remaining = square_count
    while remaining > 0:
        slots = min(max_per_row, remaining)
        breakdown.append(slots)
        remaining -= slots
    return tuple(breakdown)


def create_board(square_count: int) -> Board:
    """Lay out *square_count* squares evenly inside the fixed viewport."""
    if not MIN_SQUARES <= square_count <= MAX_SQUARES:
        raise ValueError(
            f"Square count must be between {MIN_SQUARES} and {MAX_SQUARES}: {square_count}"
        )

    rows = build_row_breakdown(square_count)
    vertical_spacing = (BOARD_HEIGHT - len(rows) * SHAPE_SIZE) / (len(rows) + 1)

    squares: list[Square] = []
    for row_index, slots in enumerate(rows):
        row_y = vertical_spacing * (row_index + 1) + row_index * SHAPE_SIZE
        horizontal_spacing = (BOARD_WIDTH - slots * SHAPE_SIZE) / (slots + 1)
        for col_index in range(slots):
            x = horizontal_spacing * (col_index + 1) + col_index * SHAPE_SIZE
            squares.append(Square.at(len(squares), x, row_y))

    return Board(tuple(squares))


# -- Anchor lookup ---------------------------------------------------------


def midpoint(board: Board, ref: SideRef, offset: float = 0.0) -> Point | None:
    """Side midpoint pushed outward by *offset*, or None for unknown squares."""
    square = board.square(ref.square_id)
    if square is None:
        return None
    base = square.midpoint(ref.side)
    if offset <= 0:
        return base
    dx, dy = ref.side.outward
    return Point(base.x + dx * offset, base.y + dy * offset)


def anchor_point(board: Board, ref: SideRef, metrics: GridMetrics) -> Point | None:
    """Where a connection actually starts/ends: the margin-offset midpoint."""
    return midpoint(board, ref, metrics.line_margin)


def straight_line(
    board: Board, from_side: SideRef, to_side: SideRef, metrics: GridMetrics
) -> list[Point] | None:
    """Default two-point path between two anchors (click-to-connect)."""
    start = anchor_point(board, from_side, metrics)
    end = anchor_point(board, to_side, metrics)
    if start is None or end is None:
        return None
    return [start, end]
