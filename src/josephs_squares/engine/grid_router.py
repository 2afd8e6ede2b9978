"""Grid router: 8-neighbour BFS with exact-geometry re-validation.

A raster path is only a candidate. When it fails geometric validation the
target cell is un-visited so the search can reach it again through a
different parent; if the BFS runs dry the visibility graph gets the final
word.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence

from josephs_squares.core.board import Board, anchor_point
from josephs_squares.core.connection import Connection
from josephs_squares.core.geometry import resample_segments
from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, GridMetrics
from josephs_squares.core.types import Point, SideRef
from josephs_squares.engine.obstacles import ObstacleField, build_obstacle_field
from josephs_squares.engine.validator import find_path_violation
from josephs_squares.engine.visibility import VisibilityGraph

_LOGGER = logging.getLogger(__name__)

NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1),
    (0, -1),
    (1, -1),
    (-1, 0),
    (1, 0),
    (-1, 1),
    (0, 1),
    (1, 1),
)


def find_route(
    from_side: SideRef,
    to_side: SideRef,
    board: Board,
    connections: Sequence[Connection],
    field: ObstacleField | None = None,
    metrics: GridMetrics | None = None,
) -> list[Point] | None:
    """Shortest raster route that also passes exact validation, or None.

    The returned polyline runs from the start anchor through cell centres
    to the end anchor (not resampled). The start and target cells are
    always passable, even when an obstacle covers them. A diagonal step is
    refused when *either* orthogonal cell it cuts past is blocked, so the
    route never squeezes between two obstacles that touch only at a corner.
    """
    active = metrics or DEFAULT_GRID_METRICS
    grid = field or build_obstacle_field(board, connections, active)

    start_point = anchor_point(board, from_side, active)
    end_point = anchor_point(board, to_side, active)
    if start_point is None or end_point is None:
        return None

    cols = grid.cols
    rows = grid.rows
    start_cell = grid.cell_of(start_point)
    target_cell = grid.cell_of(end_point)
    start_index = grid.index(*start_cell)
    target_index = grid.index(*target_cell)
    passable = grid.open_cells(start_cell, target_cell).ravel().tolist()

    visited = bytearray(cols * rows)
    parents = [-1] * (cols * rows)
    visited[start_index] = 1
    queue: deque[int] = deque([start_index])

    while queue:
        current = queue.popleft()
        col, row = current % cols, current // cols

        if current == target_index:
            path = _cells_to_points(grid, parents, current, start_point, end_point)
            validation = resample_segments(path, active.resample_length)
            if (
                find_path_violation(
                    validation, from_side, to_side, board, connections, active
                )
                is None
            ):
                return path
            # Let another parent reach the target with a different path.
            visited[current] = 0
            continue

        for dx, dy in NEIGHBOR_OFFSETS:
            nx = col + dx
            ny = row + dy
            if nx < 0 or ny < 0 or nx >= cols or ny >= rows:
                continue
            neighbor = ny * cols + nx
            if visited[neighbor] or not passable[neighbor]:
                continue
            # No corner cutting past a blocked orthogonal cell.
            if dx and dy and (
                not passable[row * cols + nx] or not passable[ny * cols + col]
            ):
                continue

            visited[neighbor] = 1
            parents[neighbor] = current
            queue.append(neighbor)

    return None


def can_route_between_sides(
    from_side: SideRef,
    to_side: SideRef,
    board: Board,
    connections: Sequence[Connection],
    field: ObstacleField | None = None,
    metrics: GridMetrics | None = None,
    *,
    visibility: VisibilityGraph | None = None,
) -> bool:
    """Whether any legal connection joins the two sides.

    *visibility* lets callers share one fallback graph across many queries
    against the same state.
    """
    active = metrics or DEFAULT_GRID_METRICS
    if find_route(from_side, to_side, board, connections, field, active) is not None:
        return True

    if anchor_point(board, from_side, active) is None or anchor_point(
        board, to_side, active
    ) is None:
        return False

    _LOGGER.debug("No raster route %s -> %s, trying visibility graph", from_side, to_side)
    graph = visibility or VisibilityGraph(board, connections, active)
    return graph.reachable(from_side, to_side)


def _cells_to_points(
    field: ObstacleField,
    parents: list[int],
    end_index: int,
    start_point: Point,
    end_point: Point,
) -> list[Point]:
    chain: list[int] = []
    cursor = end_index
    while cursor != -1:
        chain.append(cursor)
        cursor = parents[cursor]
    chain.reverse()

    points = [start_point]
    for index in chain[1:-1]:
        points.append(field.cell_center(index % field.cols, index // field.cols))
    points.append(end_point)
    return points
