"""Qt bridge to run path queries in a worker thread."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from josephs_squares.engine.tasks import MovesQuery, Query, TargetsQuery, TaskResult, run_task


class PathWorker(QObject):
    """Thread-affine worker that answers routing queries on demand.

    There is no mid-flight cancellation: a superseded query runs to
    completion and the session drops its result by request id.
    """

    task_finished = pyqtSignal(int, object)
    task_failed = pyqtSignal(int, str)

    __slots__ = ("_runner",)

    def __init__(self, runner: Callable[[Query], TaskResult] = run_task) -> None:
        super().__init__()
        self._runner = runner

    @pyqtSlot(object)
    def run_query(self, query_obj: object) -> None:
        """Execute *query_obj* and emit its result (or failure)."""
        if not isinstance(query_obj, (TargetsQuery, MovesQuery)):
            request_id = getattr(query_obj, "request_id", -1)
            self.task_failed.emit(
                request_id if isinstance(request_id, int) else -1,
                "Worker received invalid query",
            )
            return

        try:
            result = self._runner(query_obj)
        except Exception as exc:
            self.task_failed.emit(query_obj.request_id, str(exc) or type(exc).__name__)
            return

        self.task_finished.emit(query_obj.request_id, result)
