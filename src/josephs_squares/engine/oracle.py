"""Legal-move oracle and target highlighting.

``has_any_legal_move`` runs in two phases:

* **flood fill** — one multi-source BFS seeded from every unused anchor,
  each cell remembering which anchor reached it first. As soon as two
  fronts from different squares touch, a legal move exists.
* **visibility** — if the raster found nothing, every pair of unused
  anchors on different squares is asked against one shared
  :class:`VisibilityGraph`, catching corner-hugging routes below grid
  resolution.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable, Sequence

from josephs_squares.core.board import Board, anchor_point
from josephs_squares.core.connection import Connection
from josephs_squares.core.enums import SIDE_ORDER
from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, GridMetrics
from josephs_squares.core.types import SideRef, normalize_used_sides, side_key
from josephs_squares.engine.grid_router import NEIGHBOR_OFFSETS, can_route_between_sides
from josephs_squares.engine.obstacles import Cell, ObstacleField, build_obstacle_field
from josephs_squares.engine.visibility import VisibilityGraph

_LOGGER = logging.getLogger(__name__)


def list_available_sides(board: Board, used_sides: Iterable[str]) -> list[SideRef]:
    """Unused anchors in board order."""
    used = normalize_used_sides(used_sides)
    return [
        SideRef(square.id, side)
        for square in board.squares
        for side in SIDE_ORDER
        if side_key(square.id, side) not in used
    ]


def multi_source_path_exists(
    board: Board, available: Sequence[SideRef], field: ObstacleField
) -> bool:
    """Flood from all *available* anchors; True once two squares' fronts meet.

    Anchor cells are passable even when blocked. Steps follow the router's
    rule: a diagonal is refused when either orthogonal cell is blocked.
    """
    cols = field.cols
    rows = field.rows
    # 0 = unvisited, otherwise index into *available* + 1
    owner = [0] * (cols * rows)
    queue: deque[int] = deque()
    metrics = GridMetrics(field.cell_size, field.square_margin, field.line_margin)

    seeds: list[tuple[int, SideRef, Cell]] = []
    for index, ref in enumerate(available):
        point = anchor_point(board, ref, metrics)
        if point is not None:
            seeds.append((index, ref, field.cell_of(point)))
    passable = field.open_cells(*(cell for _, _, cell in seeds)).ravel().tolist()

    for index, ref, origin_cell in seeds:
        cell = field.index(*origin_cell)
        previous = owner[cell]
        if previous:
            if available[previous - 1].square_id != ref.square_id:
                return True
            continue
        owner[cell] = index + 1
        queue.append(cell)

    while queue:
        current = queue.popleft()
        col, row = current % cols, current // cols
        origin = owner[current]
        origin_square = available[origin - 1].square_id

        for dx, dy in NEIGHBOR_OFFSETS:
            nx = col + dx
            ny = row + dy
            if nx < 0 or ny < 0 or nx >= cols or ny >= rows:
                continue
            neighbor = ny * cols + nx
            if not passable[neighbor]:
                continue
            if dx and dy and (
                not passable[row * cols + nx] or not passable[ny * cols + col]
            ):
                continue

            previous = owner[neighbor]
            if not previous:
                owner[neighbor] = origin
                queue.append(neighbor)
                continue
            if previous == origin:
                continue
            if available[previous - 1].square_id != origin_square:
                return True

    return False


def has_any_legal_move(
    board: Board,
    used_sides: Iterable[str],
    connections: Sequence[Connection],
    metrics: GridMetrics | None = None,
    *,
    field: ObstacleField | None = None,
) -> bool:
    """Whether the player about to move can make any connection at all."""
    available = list_available_sides(board, used_sides)
    if len(available) < 2:
        return False

    active = metrics or DEFAULT_GRID_METRICS
    grid = field or build_obstacle_field(board, connections, active)
    if multi_source_path_exists(board, available, grid):
        _LOGGER.debug("Flood fill found a legal move (%d free anchors)", len(available))
        return True

    graph = VisibilityGraph(board, connections, active)
    for i, from_side in enumerate(available):
        for to_side in available[i + 1 :]:
            if from_side.square_id == to_side.square_id:
                continue
            if graph.reachable(from_side, to_side):
                _LOGGER.debug("Visibility graph found %s -> %s", from_side, to_side)
                return True

    _LOGGER.debug("No legal move remains")
    return False


def compute_available_targets(
    board: Board,
    connections: Sequence[Connection],
    used_sides: Iterable[str],
    from_side: SideRef | None,
    metrics: GridMetrics | None = None,
) -> frozenset[str]:
    """Keys of every unused anchor on another square reachable from *from_side*."""
    if from_side is None or board.square(from_side.square_id) is None:
        return frozenset()

    active = metrics or DEFAULT_GRID_METRICS
    used = normalize_used_sides(used_sides)
    field = build_obstacle_field(board, connections, active)
    graph = VisibilityGraph(board, connections, active)
    targets: set[str] = set()

    for square in board.squares:
        if square.id == from_side.square_id:
            continue
        for target in square.side_refs():
            if target.key in used:
                continue
            if can_route_between_sides(
                from_side, target, board, connections, field, active, visibility=graph
            ):
                targets.add(target.key)

    return frozenset(targets)


def evaluate_remaining_moves(
    board: Board,
    connections: Sequence[Connection],
    used_sides: Iterable[str],
    metrics: GridMetrics | None = None,
) -> bool:
    """Worker entry point: build the field once and ask the oracle."""
    active = metrics or DEFAULT_GRID_METRICS
    used = normalize_used_sides(used_sides)
    field = build_obstacle_field(board, connections, active)
    return has_any_legal_move(board, used, connections, active, field=field)
