"""Shared pytest fixtures used across the test suite."""

from __future__ import annotations

import os
import sys
from collections.abc import Callable, Iterator

import numpy as np
import pytest

from josephs_squares.core.board import Board, anchor_point, create_board
from josephs_squares.core.connection import Connection
from josephs_squares.core.metrics import GridMetrics, derive_grid_metrics
from josephs_squares.core.types import Point, parse_side_key
from josephs_squares.engine.obstacles import Cell, ObstacleField, build_obstacle_field
from josephs_squares.engine.validator import validate_connection

# Linux CI runners are often headless. Force an offscreen backend only there.
if (
    sys.platform.startswith("linux")
    and "QT_QPA_PLATFORM" not in os.environ
    and "DISPLAY" not in os.environ
    and "WAYLAND_DISPLAY" not in os.environ
):
    os.environ["QT_QPA_PLATFORM"] = "offscreen"

RouteBuilder = Callable[..., list[Point]]
CorridorBuilder = Callable[..., ObstacleField]


@pytest.fixture(scope="session")
def qapp() -> Iterator[object]:
    """Provide a singleton QCoreApplication for threaded worker tests."""
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def board() -> Board:
    """Two squares side by side: ids 0 (left) and 1 (right)."""
    return create_board(2)


@pytest.fixture
def metrics() -> GridMetrics:
    return derive_grid_metrics(1.0)


@pytest.fixture
def route(board: Board, metrics: GridMetrics) -> RouteBuilder:
    """``route('0:left', (600, 920), ..., end='1:right')`` → anchored polyline."""

    def _anchor(key: str) -> Point:
        point = anchor_point(board, parse_side_key(key), metrics)
        assert point is not None
        return point

    def _route(start: str, *via: tuple[float, float], end: str) -> list[Point]:
        return [_anchor(start), *(Point(x, y) for x, y in via), _anchor(end)]

    return _route


@pytest.fixture
def facing_cells(board: Board, metrics: GridMetrics) -> tuple[Cell, Cell]:
    """Raster cells of the `0:right` and `1:left` anchors, on one row."""
    template = build_obstacle_field(board, [], metrics)
    cells = []
    for key in ("0:right", "1:left"):
        point = anchor_point(board, parse_side_key(key), metrics)
        assert point is not None
        cells.append(template.cell_of(point))
    start, target = cells
    assert start[1] == target[1]
    return start, target


@pytest.fixture
def corridor(board: Board, metrics: GridMetrics) -> CorridorBuilder:
    """``corridor(*cells)`` → a fully blocked field with only *cells* open."""
    template = build_obstacle_field(board, [], metrics)

    def _build(*open_cells: Cell) -> ObstacleField:
        grid = np.ones_like(template.grid)
        for col, row in open_cells:
            grid[row, col] = False
        return ObstacleField(
            grid=grid,
            cell_size=metrics.cell_size,
            square_margin=metrics.square_margin,
            line_margin=metrics.line_margin,
        )

    return _build


# Four connections that use every side of the two-square board:
# the straight middle line, a loop over the top, one under the bottom and
# an outer loop from the left of square 0 to the right of square 1.
EXHAUSTING_MOVES: tuple[tuple[str, tuple[tuple[float, float], ...], str], ...] = (
    ("0:right", (), "1:left"),
    ("0:top", ((806.67, 700), (1713.33, 700)), "1:top"),
    ("0:bottom", ((806.67, 1140), (1713.33, 1140)), "1:bottom"),
    ("0:left", ((600, 920), (600, 600), (1900, 600), (1900, 920)), "1:right"),
)


@pytest.fixture
def exhausting_connections(
    board: Board, metrics: GridMetrics, route: RouteBuilder
) -> list[Connection]:
    """Validated connections for :data:`EXHAUSTING_MOVES`, in play order."""
    committed: list[Connection] = []
    used: set[str] = set()
    for start, via, end in EXHAUSTING_MOVES:
        outcome = validate_connection(
            route(start, *via, end=end),
            parse_side_key(start),
            parse_side_key(end),
            board,
            committed,
            metrics,
            used_sides=used,
        )
        assert isinstance(outcome, Connection), f"{start}-{end}: {outcome}"
        committed.append(outcome)
        used.update(outcome.keys)
    return committed


@pytest.fixture
def exhausting_moves() -> tuple[tuple[str, tuple[tuple[float, float], ...], str], ...]:
    return EXHAUSTING_MOVES
