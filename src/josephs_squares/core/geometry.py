"""Geometry kernel: orientation, segment intersection, square clipping.

All functions are pure and operate on :class:`Point` values. Tolerances
default to the module constants and can be overridden per call.
"""

from __future__ import annotations

import math
from collections.abc import Collection, Sequence
from typing import TYPE_CHECKING

from josephs_squares.core.constants import EPSILON, GRAZING_SPAN, INSIDE_EPSILON
from josephs_squares.core.types import Point

if TYPE_CHECKING:
    from josephs_squares.core.board import Square

Segment = tuple[Point, Point]

COLLINEAR = 0
CLOCKWISE = 1
COUNTER_CLOCKWISE = 2


def almost_equal(a: float, b: float, eps: float = EPSILON) -> bool:
    return abs(a - b) < eps


def same_point(p1: Point, p2: Point, eps: float = EPSILON) -> bool:
    return almost_equal(p1.x, p2.x, eps) and almost_equal(p1.y, p2.y, eps)


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def orientation(a: Point, b: Point, c: Point, eps: float = EPSILON) -> int:
    """Turn direction of the triple, 0 when collinear within *eps*."""
    value = (b.y - a.y) * (c.x - b.x) - (b.x - a.x) * (c.y - b.y)
    if almost_equal(value, 0.0, eps):
        return COLLINEAR
    return CLOCKWISE if value > 0 else COUNTER_CLOCKWISE


def on_segment(a: Point, b: Point, c: Point, eps: float = EPSILON) -> bool:
    """Whether *b* lies inside the bounding box of segment *a*-*c*."""
    return (
        min(a.x, c.x) - eps <= b.x <= max(a.x, c.x) + eps
        and min(a.y, c.y) - eps <= b.y <= max(a.y, c.y) + eps
    )


def segments_intersect_strict(
    a1: Point, a2: Point, b1: Point, b2: Point, eps: float = EPSILON
) -> bool:
    """True if the segments cross or touch, unless they share an endpoint.

    Shared endpoints are how consecutive polyline segments (and connections
    meeting at an anchor) join, so they never count as a crossing.
    """
    if (
        same_point(a1, b1, eps)
        or same_point(a1, b2, eps)
        or same_point(a2, b1, eps)
        or same_point(a2, b2, eps)
    ):
        return False

    o1 = orientation(a1, a2, b1, eps)
    o2 = orientation(a1, a2, b2, eps)
    o3 = orientation(b1, b2, a1, eps)
    o4 = orientation(b1, b2, a2, eps)

    if o1 != o2 and o3 != o4:
        return True

    # Collinear touching cases
    if o1 == COLLINEAR and on_segment(a1, b1, a2, eps):
        return True
    if o2 == COLLINEAR and on_segment(a1, b2, a2, eps):
        return True
    if o3 == COLLINEAR and on_segment(b1, a1, b2, eps):
        return True
    return o4 == COLLINEAR and on_segment(b1, a2, b2, eps)


def point_inside_square(point: Point, square: Square, eps: float = INSIDE_EPSILON) -> bool:
    """Strictly inside the open interior of *square*."""
    return (
        square.x + eps < point.x < square.x + square.size - eps
        and square.y + eps < point.y < square.y + square.size - eps
    )


def point_inside_square_with_margin(point: Point, square: Square, margin: float) -> bool:
    """Inside *square* shrunk inward by *margin* on every side."""
    return (
        square.x + margin < point.x < square.x + square.size - margin
        and square.y + margin < point.y < square.y + square.size - margin
    )


def segment_crosses_square_interior(
    p1: Point,
    p2: Point,
    square: Square,
    allowed_square_ids: Collection[int] = (),
    *,
    eps: float = EPSILON,
    grazing_span: float = GRAZING_SPAN,
) -> bool:
    """Liang–Barsky clip of *p1*-*p2* against *square*.

    A clipped span whose midpoint is truly interior counts as a crossing,
    except a span of at most *grazing_span* (segment parameter units) on
    one of the path's own endpoint squares.
    """
    dx = p2.x - p1.x
    dy = p2.y - p1.y

    t0 = 0.0
    t1 = 1.0

    edges = (
        (-dx, p1.x - square.x),
        (dx, square.x + square.size - p1.x),
        (-dy, p1.y - square.y),
        (dy, square.y + square.size - p1.y),
    )

    for p, q in edges:
        if almost_equal(p, 0.0, eps):
            if q < 0:
                return False
            continue

        r = q / p
        if p < 0:
            if r > t1:
                return False
            if r > t0:
                t0 = r
        else:
            if r < t0:
                return False
            if r < t1:
                t1 = r

    if t0 > t1:
        return False

    entry_t = max(t0, 0.0)
    exit_t = min(t1, 1.0)
    if exit_t < 0 or entry_t > 1:
        return False

    mid_t = (entry_t + exit_t) / 2
    mid_point = Point(p1.x + mid_t * dx, p1.y + mid_t * dy)
    if not point_inside_square(mid_point, square):
        return False

    if square.id in allowed_square_ids and exit_t - entry_t <= grazing_span:
        return False

    return True


def distance_point_to_segment(point: Point, a: Point, b: Point, eps: float = EPSILON) -> float:
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy

    if almost_equal(length_sq, 0.0, eps):
        return math.hypot(point.x - a.x, point.y - a.y)

    t = ((point.x - a.x) * dx + (point.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point.x - (a.x + t * dx), point.y - (a.y + t * dy))


# -- Polyline helpers ------------------------------------------------------


def points_to_segments(points: Sequence[Point]) -> list[Segment]:
    if len(points) < 2:
        return []
    return [(points[i], points[i + 1]) for i in range(len(points) - 1)]


def dedupe_points(points: Sequence[Point], eps: float = EPSILON) -> list[Point]:
    """Drop consecutive duplicates."""
    if not points:
        return []
    deduped = [points[0]]
    for point in points[1:]:
        if not same_point(point, deduped[-1], eps):
            deduped.append(point)
    return deduped


def resample_segments(points: Sequence[Point], max_segment_length: float) -> list[Point]:
    """Subdivide every segment uniformly so none exceeds *max_segment_length*.

    First and last points are preserved exactly.
    """
    if len(points) < 2:
        return list(points)

    resampled = [points[0]]
    for start, end in points_to_segments(points):
        dx = end.x - start.x
        dy = end.y - start.y
        length = math.hypot(dx, dy)

        if length <= max_segment_length:
            resampled.append(end)
            continue

        steps = max(1, math.ceil(length / max_segment_length))
        for step in range(1, steps):
            t = step / steps
            resampled.append(Point(start.x + dx * t, start.y + dy * t))
        resampled.append(end)

    return resampled


def bounding_box(points: Sequence[Point]) -> tuple[float, float, float, float]:
    """``(min_x, min_y, max_x, max_y)`` of a non-empty point list."""
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return min(xs), min(ys), max(xs), max(ys)


def boxes_overlap(
    a: tuple[float, float, float, float],
    b: tuple[float, float, float, float],
    pad: float = EPSILON,
) -> bool:
    return not (
        a[2] + pad < b[0] or b[2] + pad < a[0] or a[3] + pad < b[1] or b[3] + pad < a[1]
    )
