"""Path engine package: routing, validation, the legal-move oracle and Qt worker bridge."""

from josephs_squares.engine.grid_router import can_route_between_sides, find_route
from josephs_squares.engine.obstacles import ObstacleField, build_obstacle_field
from josephs_squares.engine.oracle import (
    compute_available_targets,
    evaluate_remaining_moves,
    has_any_legal_move,
    list_available_sides,
    multi_source_path_exists,
)
from josephs_squares.engine.tasks import (
    MovesQuery,
    TargetsQuery,
    TaskType,
    handle_message,
    run_task,
)
from josephs_squares.engine.validator import find_path_violation, validate_connection
from josephs_squares.engine.visibility import VisibilityGraph, has_visibility_path

__all__ = [
    "MovesQuery",
    "ObstacleField",
    "TargetsQuery",
    "TaskType",
    "VisibilityGraph",
    "build_obstacle_field",
    "can_route_between_sides",
    "compute_available_targets",
    "evaluate_remaining_moves",
    "find_path_violation",
    "find_route",
    "handle_message",
    "has_any_legal_move",
    "has_visibility_path",
    "list_available_sides",
    "multi_source_path_exists",
    "run_task",
    "validate_connection",
]
