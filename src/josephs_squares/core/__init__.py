"""Core domain layer — board, geometry and value types, no external dependencies.

Quick start::

    from josephs_squares.core import (
        Side, SideRef, anchor_point, create_board, derive_grid_metrics,
    )

    board = create_board(2)
    metrics = derive_grid_metrics(1.0)
    start = anchor_point(board, SideRef(0, Side.RIGHT), metrics)
"""

from josephs_squares.core.board import (
    Board,
    Square,
    anchor_point,
    build_row_breakdown,
    create_board,
    midpoint,
    straight_line,
)
from josephs_squares.core.connection import Connection
from josephs_squares.core.enums import SIDE_ORDER, Player, RejectionReason, Side
from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, GridMetrics, derive_grid_metrics
from josephs_squares.core.types import (
    Point,
    SideRef,
    normalize_used_sides,
    parse_side_key,
    side_key,
)

__all__ = [
    # Enums
    "Player",
    "RejectionReason",
    "SIDE_ORDER",
    "Side",
    # Types / helpers
    "Point",
    "SideRef",
    "normalize_used_sides",
    "parse_side_key",
    "side_key",
    # Board
    "Board",
    "Square",
    "anchor_point",
    "build_row_breakdown",
    "create_board",
    "midpoint",
    "straight_line",
    # Metrics
    "DEFAULT_GRID_METRICS",
    "GridMetrics",
    "derive_grid_metrics",
    # Domain objects
    "Connection",
]
