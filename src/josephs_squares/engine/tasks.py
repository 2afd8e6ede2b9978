"""Worker task protocol: tagged request types and a synchronous dispatcher.

Queries are plain frozen values, so running one on a worker thread or
in-process gives identical results. The ``{id, type, payload}`` dict form
is what crosses a message channel; :func:`handle_message` answers it with
``{id, result}`` or ``{id, error}``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, TypeAlias

from josephs_squares.core.board import Board
from josephs_squares.core.connection import Connection
from josephs_squares.core.metrics import DEFAULT_GRID_METRICS, GridMetrics
from josephs_squares.core.types import SideRef, normalize_used_sides
from josephs_squares.engine.oracle import compute_available_targets, evaluate_remaining_moves


class TaskType(StrEnum):
    """Query classes; request ids are tracked per class."""

    COMPUTE_AVAILABLE_TARGETS = "computeAvailableTargets"
    EVALUATE_REMAINING_MOVES = "evaluateRemainingMoves"


@dataclass(frozen=True, slots=True)
class TargetsQuery:
    """Which anchors can *selected_side* currently reach?"""

    request_id: int
    board: Board
    connections: tuple[Connection, ...]
    used_sides: frozenset[str]
    selected_side: SideRef | None
    metrics: GridMetrics = DEFAULT_GRID_METRICS

    @property
    def task_type(self) -> TaskType:
        return TaskType.COMPUTE_AVAILABLE_TARGETS


@dataclass(frozen=True, slots=True)
class MovesQuery:
    """Does any legal move remain?"""

    request_id: int
    board: Board
    connections: tuple[Connection, ...]
    used_sides: frozenset[str]
    metrics: GridMetrics = DEFAULT_GRID_METRICS

    @property
    def task_type(self) -> TaskType:
        return TaskType.EVALUATE_REMAINING_MOVES


Query: TypeAlias = TargetsQuery | MovesQuery
TaskResult: TypeAlias = frozenset[str] | bool


def run_task(query: Query) -> TaskResult:
    """Execute *query* in the calling thread."""
    if isinstance(query, TargetsQuery):
        return compute_available_targets(
            query.board,
            query.connections,
            query.used_sides,
            query.selected_side,
            query.metrics,
        )
    if isinstance(query, MovesQuery):
        return evaluate_remaining_moves(
            query.board,
            query.connections,
            query.used_sides,
            query.metrics,
        )
    raise TypeError(f"Unknown worker task: {type(query).__name__}")


# -- Message form ------------------------------------------------------------


def to_message(query: Query) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "board": query.board,
        "connections": list(query.connections),
        "usedSides": sorted(query.used_sides),
        "metrics": query.metrics,
    }
    if isinstance(query, TargetsQuery):
        payload["selectedSide"] = query.selected_side
    return {"id": query.request_id, "type": query.task_type.value, "payload": payload}


def query_from_message(message: Mapping[str, Any]) -> Query:
    """Rebuild a query; raises ValueError for an unknown task type."""
    request_id = int(message["id"])
    payload = message.get("payload") or {}
    try:
        task_type = TaskType(message.get("type"))
    except ValueError:
        raise ValueError(f"Unknown worker task: {message.get('type')!r}") from None

    common = {
        "request_id": request_id,
        "board": payload["board"],
        "connections": tuple(payload.get("connections") or ()),
        "used_sides": normalize_used_sides(payload.get("usedSides")),
        "metrics": payload.get("metrics") or DEFAULT_GRID_METRICS,
    }
    if task_type is TaskType.COMPUTE_AVAILABLE_TARGETS:
        return TargetsQuery(selected_side=payload.get("selectedSide"), **common)
    return MovesQuery(**common)


def handle_message(message: Mapping[str, Any]) -> dict[str, Any]:
    """Answer one ``{id, type, payload}`` request."""
    request_id = message.get("id")
    try:
        query = query_from_message(message)
        result = run_task(query)
    except Exception as exc:
        return {"id": request_id, "error": {"message": str(exc)}}

    if isinstance(query, TargetsQuery):
        return {"id": request_id, "result": {"targets": sorted(result)}}
    return {"id": request_id, "result": {"movesRemain": bool(result)}}
