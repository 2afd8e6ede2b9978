"""Connection validator: accept or reject a candidate path.

Pipeline, first failure wins:

1. reference checks (different squares, both sides free)
2. dedupe; at least two distinct points
3. resample to ``metrics.resample_length``
4. no self-intersection between non-adjacent segments
5. no crossing of a committed connection
6. no crossing of a square interior (own endpoint squares may be grazed)
7. no approach within ``line_margin`` of any other side midpoint

The validator never mutates shared state; the caller commits the returned
:class:`Connection` and marks both of its keys used.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from josephs_squares.core.board import Board, anchor_point
from josephs_squares.core.connection import Connection
from josephs_squares.core.enums import Player, RejectionReason
from josephs_squares.core.geometry import (
    bounding_box,
    boxes_overlap,
    dedupe_points,
    distance_point_to_segment,
    points_to_segments,
    resample_segments,
    segment_crosses_square_interior,
    segments_intersect_strict,
)
from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, GridMetrics
from josephs_squares.core.types import Point, SideRef, normalize_used_sides


def validate_connection(
    raw_points: Sequence[Point] | None,
    from_side: SideRef,
    to_side: SideRef,
    board: Board,
    connections: Sequence[Connection],
    metrics: GridMetrics | None = None,
    *,
    player: Player = Player.A,
    used_sides: Iterable[str] | None = None,
) -> Connection | RejectionReason | None:
    """Validate a freehand (or straight, when *raw_points* is empty) path.

    Returns the new :class:`Connection`, a :class:`RejectionReason`, or
    ``None`` when either side does not exist on *board*.
    """
    active = metrics or DEFAULT_GRID_METRICS

    start = anchor_point(board, from_side, active)
    end = anchor_point(board, to_side, active)
    if start is None or end is None:
        return None

    if from_side.square_id == to_side.square_id:
        return RejectionReason.SAME_SQUARE

    used = normalize_used_sides(used_sides)
    if from_side.key in used or to_side.key in used:
        return RejectionReason.SIDE_TAKEN

    if raw_points is not None and len(raw_points) >= 2:
        anchored = [start, *raw_points[1:-1], end]
    else:
        anchored = [start, end]

    points = dedupe_points(anchored)
    if len(points) < 2:
        return RejectionReason.TOO_SHORT

    validation_points = resample_segments(points, active.resample_length)
    reason = find_path_violation(
        validation_points, from_side, to_side, board, connections, active
    )
    if reason is not None:
        return reason

    return Connection(
        player=player,
        from_side=from_side,
        to_side=to_side,
        points=tuple(points),
    )


def find_path_violation(
    points: Sequence[Point],
    from_side: SideRef | None,
    to_side: SideRef | None,
    board: Board,
    connections: Sequence[Connection],
    metrics: GridMetrics,
    *,
    check_self_intersection: bool = True,
) -> RejectionReason | None:
    """Geometric checks on an already resampled path; None when it is clean."""
    if check_self_intersection and path_self_intersects(points):
        return RejectionReason.SELF_INTERSECTING
    if path_intersects_existing(points, connections):
        return RejectionReason.CROSSES_EXISTING

    allowed = {ref.square_id for ref in (from_side, to_side) if ref is not None}
    if path_crosses_squares(points, board, allowed):
        return RejectionReason.CROSSES_SQUARE
    if path_touches_anchors(points, board, from_side, to_side, metrics.line_margin):
        return RejectionReason.TOUCHES_ANCHOR
    return None


# -- Individual rules --------------------------------------------------------


def path_self_intersects(points: Sequence[Point]) -> bool:
    """Any two non-adjacent segments intersect."""
    segments = points_to_segments(points)
    boxes = [_segment_box(a, b) for a, b in segments]
    for i, (start_a, end_a) in enumerate(segments):
        box_a = boxes[i]
        for j in range(i + 2, len(segments)):
            if not boxes_overlap(box_a, boxes[j]):
                continue
            start_b, end_b = segments[j]
            if segments_intersect_strict(start_a, end_a, start_b, end_b):
                return True
    return False


def path_intersects_existing(
    points: Sequence[Point], connections: Iterable[Connection]
) -> bool:
    candidate = points_to_segments(points)
    if not candidate:
        return False
    candidate_box = bounding_box(points)

    for connection in connections:
        existing = connection.points
        if len(existing) < 2 or not boxes_overlap(candidate_box, bounding_box(existing)):
            continue
        for existing_start, existing_end in points_to_segments(existing):
            existing_box = _segment_box(existing_start, existing_end)
            for start, end in candidate:
                if not boxes_overlap(existing_box, _segment_box(start, end)):
                    continue
                if segments_intersect_strict(start, end, existing_start, existing_end):
                    return True
    return False


def path_crosses_squares(
    points: Sequence[Point], board: Board, allowed_square_ids: Iterable[int] = ()
) -> bool:
    segments = points_to_segments(points)
    if not segments:
        return False

    allowed = frozenset(allowed_square_ids)
    path_box = bounding_box(points)
    for square in board.squares:
        square_box = (square.x, square.y, square.x + square.size, square.y + square.size)
        if not boxes_overlap(path_box, square_box):
            continue
        for start, end in segments:
            if segment_crosses_square_interior(start, end, square, allowed):
                return True
    return False


def path_touches_anchors(
    points: Sequence[Point],
    board: Board,
    from_side: SideRef | None,
    to_side: SideRef | None,
    limit: float,
) -> bool:
    """Path passes within *limit* of a side midpoint it does not end at."""
    segments = points_to_segments(points)
    if not segments:
        return False

    skip = {ref for ref in (from_side, to_side) if ref is not None}
    min_x, min_y, max_x, max_y = bounding_box(points)

    for square in board.squares:
        for ref in square.side_refs():
            if ref in skip:
                continue
            target = square.midpoint(ref.side)
            if not (
                min_x - limit <= target.x <= max_x + limit
                and min_y - limit <= target.y <= max_y + limit
            ):
                continue
            for start, end in segments:
                if distance_point_to_segment(target, start, end) <= limit:
                    return True
    return False


def _segment_box(a: Point, b: Point) -> tuple[float, float, float, float]:
    return min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y)
