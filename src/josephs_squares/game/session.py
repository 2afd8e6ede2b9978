"""Path query session: worker-thread dispatch with stale-result dropping."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from josephs_squares.core.connection import Connection
from josephs_squares.core.enums import RejectionReason
from josephs_squares.core.types import Point, SideRef
from josephs_squares.engine.qt_bridge import PathWorker
from josephs_squares.engine.tasks import (
    MovesQuery,
    Query,
    TargetsQuery,
    TaskResult,
    TaskType,
    run_task,
)
from josephs_squares.game.controller import GameController
from josephs_squares.game.interfaces import GamePhase
from josephs_squares.game.state import GameState

_LOGGER = logging.getLogger(__name__)

ResultCallback = Callable[[TaskResult], None]
ErrorCallback = Callable[[str], None]

SHUTDOWN_MESSAGE = "Path session shut down"


class _PathCommandBus(QObject):
    """Signal bridge for issuing worker queries with queued delivery."""

    query_requested = pyqtSignal(object)


@dataclass(slots=True)
class _Pending:
    query: Query
    on_result: ResultCallback
    on_error: ErrorCallback | None


class PathSession:
    """Owns the worker thread and correlates responses by request id.

    Each query class (targets / remaining moves) remembers only its latest
    request id; any older response is dropped when it arrives. Until
    :meth:`setup` runs (or after :meth:`shutdown`) queries execute
    synchronously in-process.
    """

    __slots__ = (
        "__weakref__",
        "_controller",
        "_command_bus",
        "_thread",
        "_worker",
        "_runner",
        "_next_request_id",
        "_latest",
        "_pending",
        "_is_started",
        "_is_shutting_down",
    )

    def __init__(
        self,
        *,
        controller: GameController,
        parent: QObject | None = None,
        runner: Callable[[Query], TaskResult] = run_task,
    ) -> None:
        self._controller = controller
        self._runner = runner
        self._command_bus = _PathCommandBus(parent)
        self._thread = QThread(parent)
        self._worker = PathWorker(runner)
        self._next_request_id = 0
        self._latest: dict[TaskType, int] = {}
        self._pending: dict[int, _Pending] = {}
        self._is_started = False
        self._is_shutting_down = False

    @property
    def is_started(self) -> bool:
        return self._is_started

    def setup(self) -> None:
        """Start the worker in a dedicated thread and connect callbacks."""
        if self._is_started:
            return
        self._is_shutting_down = False
        self._worker.moveToThread(self._thread)
        self._command_bus.query_requested.connect(self._worker.run_query)
        self._worker.task_finished.connect(self._on_task_finished)
        self._worker.task_failed.connect(self._on_task_failed)
        self._thread.start()
        self._is_started = True

    def shutdown(self) -> None:
        """Stop the worker thread and discard in-flight queries.

        Each dropped query with an error hook is told so, which lets a
        pending move evaluation release the controller from CHECKING.
        """
        if not self._is_started:
            return
        self._is_shutting_down = True
        self._thread.quit()
        self._thread.wait(2000)
        dropped = list(self._pending.items())
        self._pending.clear()
        self._latest.clear()
        for request_id, pending in dropped:
            _LOGGER.debug(
                "Discarding %s request %d on shutdown", pending.query.task_type, request_id
            )
            if pending.on_error is not None:
                pending.on_error(SHUTDOWN_MESSAGE)
        self._is_started = False
        self._is_shutting_down = False

    def latest_request(self, task_type: TaskType) -> int | None:
        return self._latest.get(task_type)

    # ── Queries ──────────────────────────────────────────────────────────

    def request_targets(
        self,
        state: GameState,
        selected_side: SideRef | None,
        on_result: ResultCallback,
        on_error: ErrorCallback | None = None,
    ) -> int:
        """Ask which anchors *selected_side* can reach in *state*."""
        query = TargetsQuery(
            request_id=self._allocate_id(),
            board=state.board,
            connections=state.connections,
            used_sides=state.used_sides,
            selected_side=selected_side,
            metrics=state.metrics,
        )
        return self._dispatch(query, on_result, on_error)

    def request_evaluation(
        self,
        state: GameState,
        on_result: ResultCallback,
        on_error: ErrorCallback | None = None,
    ) -> int:
        """Ask whether any legal move remains in *state*."""
        query = MovesQuery(
            request_id=self._allocate_id(),
            board=state.board,
            connections=state.connections,
            used_sides=state.used_sides,
            metrics=state.metrics,
        )
        return self._dispatch(query, on_result, on_error)

    def refresh_targets(self, on_result: ResultCallback) -> int | None:
        """Highlight query for the controller's current selection."""
        selected = self._controller.selected_side
        if selected is None:
            return None
        return self.request_targets(self._controller.state, selected, on_result)

    def submit(
        self, target: SideRef, points: Sequence[Point] | None = None
    ) -> Connection | RejectionReason | None:
        """Validate now; evaluate remaining moves on the worker, then commit."""
        controller = self._controller
        outcome = controller.propose(target, points)
        if not isinstance(outcome, Connection):
            return outcome

        candidate = controller.begin_check(outcome)

        def _apply(result: TaskResult) -> None:
            if controller.phase != GamePhase.CHECKING:
                return
            controller.commit(outcome, bool(result))

        def _fail(message: str) -> None:
            _LOGGER.error("Unable to evaluate moves: %s", message)
            controller.abort_check()

        self.request_evaluation(candidate, _apply, _fail)
        return outcome

    # ── Internals ────────────────────────────────────────────────────────

    def _allocate_id(self) -> int:
        self._next_request_id += 1
        return self._next_request_id

    def _dispatch(
        self,
        query: Query,
        on_result: ResultCallback,
        on_error: ErrorCallback | None,
    ) -> int:
        self._latest[query.task_type] = query.request_id

        if not self._is_started or self._is_shutting_down:
            self._run_in_process(query, on_result, on_error)
            return query.request_id

        self._pending[query.request_id] = _Pending(query, on_result, on_error)
        self._command_bus.query_requested.emit(query)
        return query.request_id

    def _take_current(self, request_id: int) -> _Pending | None:
        pending = self._pending.pop(request_id, None)
        if pending is None or self._is_shutting_down:
            return None
        if self._latest.get(pending.query.task_type) != request_id:
            _LOGGER.debug(
                "Dropping stale %s response %d", pending.query.task_type, request_id
            )
            return None
        return pending

    def _on_task_finished(self, request_id: int, result: object) -> None:
        pending = self._take_current(request_id)
        if pending is None:
            return
        pending.on_result(result)  # type: ignore[arg-type]

    def _on_task_failed(self, request_id: int, message: str) -> None:
        pending = self._take_current(request_id)
        if pending is None:
            return

        _LOGGER.warning(
            "Worker failed %s request %d (%s); retrying in-process",
            pending.query.task_type,
            request_id,
            message,
        )
        self._run_in_process(pending.query, pending.on_result, pending.on_error)

    def _run_in_process(
        self,
        query: Query,
        on_result: ResultCallback,
        on_error: ErrorCallback | None,
    ) -> None:
        try:
            result = self._runner(query)
        except Exception as exc:
            if on_error is None:
                _LOGGER.exception(
                    "In-process run of %s request %d failed",
                    query.task_type,
                    query.request_id,
                )
                return
            on_error(str(exc) or type(exc).__name__)
            return
        on_result(result)
