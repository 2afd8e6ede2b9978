"""Visibility-graph fallback for routes finer than the raster grid.

Waypoints are the two query anchors, every square corner pushed outward by
``square_margin + line_margin`` (clamped to the viewport) and the four
viewport corners pulled inward by ``2 * line_margin``. Two waypoints are
joined when the straight segment between them passes the same square,
connection and anchor checks as a drawn path.

Corner-to-corner edges do not depend on the query, so a
:class:`VisibilityGraph` labels their connected components once and each
anchor only needs its own edges to those corners. Asking many anchor pairs
against one graph (the oracle's exhaustive phase) therefore validates each
edge at most once. Components are labelled lazily, on the first query that
needs them.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass

from josephs_squares.core.board import Board, anchor_point
from josephs_squares.core.connection import Connection
from josephs_squares.core.geometry import resample_segments
from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, GridMetrics
from josephs_squares.core.types import Point, SideRef
from josephs_squares.engine.validator import find_path_violation


@dataclass(frozen=True, slots=True)
class Waypoint:
    """Graph node; anchors carry the side they belong to."""

    point: Point
    side: SideRef | None = None


def build_corner_waypoints(board: Board, metrics: GridMetrics) -> list[Waypoint]:
    """Offset square corners followed by inset viewport corners."""
    offset = metrics.square_margin + metrics.line_margin
    border = metrics.line_margin * 2

    waypoints: list[Waypoint] = []
    for square in board.squares:
        for corner in square.corners(offset):
            waypoints.append(
                Waypoint(
                    Point(
                        min(max(corner.x, 0.0), board.width),
                        min(max(corner.y, 0.0), board.height),
                    )
                )
            )

    for x, y in (
        (border, border),
        (board.width - border, border),
        (board.width - border, board.height - border),
        (border, board.height - border),
    ):
        waypoints.append(Waypoint(Point(x, y)))
    return waypoints


def build_visibility_waypoints(
    from_side: SideRef,
    to_side: SideRef,
    board: Board,
    metrics: GridMetrics | None = None,
) -> list[Waypoint]:
    """Full waypoint list: start anchor, end anchor, then corners."""
    active = metrics or DEFAULT_GRID_METRICS
    start = anchor_point(board, from_side, active)
    end = anchor_point(board, to_side, active)
    if start is None or end is None:
        return []
    return [
        Waypoint(start, from_side),
        Waypoint(end, to_side),
        *build_corner_waypoints(board, active),
    ]


def segment_is_valid(
    node_a: Waypoint,
    node_b: Waypoint,
    board: Board,
    connections: Sequence[Connection],
    metrics: GridMetrics,
) -> bool:
    points = resample_segments([node_a.point, node_b.point], metrics.resample_length)
    reason = find_path_violation(
        points,
        node_a.side,
        node_b.side,
        board,
        connections,
        metrics,
        check_self_intersection=False,
    )
    return reason is None


class VisibilityGraph:
    """Shared corner graph answering anchor-to-anchor reachability."""

    __slots__ = (
        "_board",
        "_connections",
        "_metrics",
        "_corners",
        "_component",
        "_anchor_components",
    )

    def __init__(
        self,
        board: Board,
        connections: Sequence[Connection],
        metrics: GridMetrics | None = None,
    ) -> None:
        self._board = board
        self._connections = connections
        self._metrics = metrics or DEFAULT_GRID_METRICS
        self._corners = build_corner_waypoints(board, self._metrics)
        self._component: list[int] | None = None
        self._anchor_components: dict[SideRef, frozenset[int]] = {}

    @property
    def corners(self) -> list[Waypoint]:
        return list(self._corners)

    def _label_components(self) -> list[int]:
        count = len(self._corners)
        adjacency: list[list[int]] = [[] for _ in range(count)]
        for i in range(count):
            for j in range(i + 1, count):
                if self._valid(self._corners[i], self._corners[j]):
                    adjacency[i].append(j)
                    adjacency[j].append(i)

        component = [-1] * count
        label = 0
        for root in range(count):
            if component[root] != -1:
                continue
            component[root] = label
            queue = deque([root])
            while queue:
                node = queue.popleft()
                for neighbor in adjacency[node]:
                    if component[neighbor] == -1:
                        component[neighbor] = label
                        queue.append(neighbor)
            label += 1
        return component

    def _valid(self, node_a: Waypoint, node_b: Waypoint) -> bool:
        return segment_is_valid(node_a, node_b, self._board, self._connections, self._metrics)

    def _components_seen_from(self, side: SideRef, anchor: Waypoint) -> frozenset[int]:
        cached = self._anchor_components.get(side)
        if cached is not None:
            return cached
        if self._component is None:
            self._component = self._label_components()
        component = self._component
        seen = frozenset(
            component[index]
            for index, corner in enumerate(self._corners)
            if self._valid(anchor, corner)
        )
        self._anchor_components[side] = seen
        return seen

    def reachable(self, from_side: SideRef, to_side: SideRef) -> bool:
        """Whether a chain of valid straight segments joins the two anchors."""
        start = anchor_point(self._board, from_side, self._metrics)
        end = anchor_point(self._board, to_side, self._metrics)
        if start is None or end is None:
            return False

        start_node = Waypoint(start, from_side)
        end_node = Waypoint(end, to_side)
        if self._valid(start_node, end_node):
            return True
        return not self._components_seen_from(from_side, start_node).isdisjoint(
            self._components_seen_from(to_side, end_node)
        )


def has_visibility_path(
    from_side: SideRef,
    to_side: SideRef,
    board: Board,
    connections: Sequence[Connection],
    metrics: GridMetrics | None = None,
) -> bool:
    """One-off reachability query on a freshly built graph."""
    return VisibilityGraph(board, connections, metrics).reachable(from_side, to_side)
