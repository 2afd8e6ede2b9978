"""GameController — the central orchestrator of a game.

Coordinates: GameState, the connection validator and the legal-move oracle.
Emits events via simple callbacks so the UI / tests can subscribe.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from josephs_squares.core.connection import Connection
from josephs_squares.core.enums import Player, RejectionReason
from josephs_squares.core.metrics import derive_grid_metrics
from josephs_squares.core.types import Point, SideRef
from josephs_squares.engine.oracle import evaluate_remaining_moves
from josephs_squares.engine.validator import validate_connection
from josephs_squares.game.interfaces import GamePhase
from josephs_squares.game.state import GameState

_LOGGER = logging.getLogger(__name__)

# ── Event definitions ────────────────────────────────────────────────────────

ConnectionCallback = Callable[[Connection, GameState], None]
RejectedCallback = Callable[[RejectionReason], None]
GameOverCallback = Callable[[Player], None]  # winner
PhaseCallback = Callable[[GamePhase], None]


@dataclass
class GameEvents:
    """Observable callbacks. Multiple handlers per event."""

    on_connection: list[ConnectionCallback] = field(default_factory=list)
    on_rejected: list[RejectedCallback] = field(default_factory=list)
    on_game_over: list[GameOverCallback] = field(default_factory=list)
    on_phase_changed: list[PhaseCallback] = field(default_factory=list)


# ── Controller ───────────────────────────────────────────────────────────────


class GameController:
    """Validates moves, commits connections, switches turns, decides the winner.

    A move is two-step: :meth:`propose` validates the drawn path, then
    :meth:`commit` applies the oracle's verdict for the resulting state.
    :meth:`submit` does both synchronously; ``PathSession`` runs the oracle
    on a worker thread in between.
    """

    __slots__ = ("_state", "_phase", "_selected", "events")

    def __init__(self) -> None:
        self._state = GameState.new()
        self._phase = GamePhase.NOT_STARTED
        self._selected: SideRef | None = None
        self.events = GameEvents()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def selected_side(self) -> SideRef | None:
        return self._selected

    @property
    def current_player(self) -> Player:
        return self._state.current_player

    # ── Setup ────────────────────────────────────────────────────────────

    def new_game(self, square_count: int = 2, scale: float = 1.0) -> None:
        """Reset board, connections and used sides in one step."""
        self._state = GameState.new(square_count, scale)
        self._selected = None
        self._emit_phase(GamePhase.AWAITING_MOVE)

    def set_scale(self, scale: float) -> None:
        """Re-derive grid metrics after a zoom / resize."""
        self._state = self._state.with_metrics(derive_grid_metrics(scale))

    # ── Selection ────────────────────────────────────────────────────────

    def select_side(self, ref: SideRef) -> bool:
        """Pick the starting anchor; picking it again clears the selection."""
        if self._phase != GamePhase.AWAITING_MOVE:
            return False
        if self._state.board.square(ref.square_id) is None:
            return False
        if self._state.is_used(ref):
            return False
        if self._selected == ref:
            self._selected = None
            return True
        self._selected = ref
        return True

    def clear_selection(self) -> None:
        self._selected = None

    # ── Moves ────────────────────────────────────────────────────────────

    def propose(
        self, target: SideRef, points: Sequence[Point] | None = None
    ) -> Connection | RejectionReason | None:
        """Validate a path from the selected side to *target*; no state change."""
        if self._phase != GamePhase.AWAITING_MOVE or self._selected is None:
            return None

        outcome = validate_connection(
            points,
            self._selected,
            target,
            self._state.board,
            self._state.connections,
            self._state.metrics,
            player=self._state.current_player,
            used_sides=self._state.used_sides,
        )
        if isinstance(outcome, RejectionReason):
            self._emit_rejected(outcome)
        return outcome

    def begin_check(self, connection: Connection) -> GameState:
        """Enter CHECKING and return the state the oracle must evaluate."""
        candidate = self._state.with_connection(connection)
        self._selected = None
        self._emit_phase(GamePhase.CHECKING)
        return candidate

    def commit(self, connection: Connection, moves_remain: bool) -> bool:
        """Apply the oracle verdict for *connection*. Returns True if committed."""
        if self._phase not in (GamePhase.AWAITING_MOVE, GamePhase.CHECKING):
            return False

        if not moves_remain and not self._state.connections:
            # Ending the game on the very first move is refused.
            self._emit_phase(GamePhase.AWAITING_MOVE)
            self._emit_rejected(RejectionReason.NO_MOVES_AFTER_FIRST)
            return False

        try:
            committed = self._state.with_connection(connection)
        except ValueError:
            _LOGGER.debug("Dropping stale connection %s", connection)
            self._emit_phase(GamePhase.AWAITING_MOVE)
            return False

        mover = committed.current_player
        self._selected = None
        if moves_remain:
            self._state = committed.next_turn()
            self._emit_connection(connection)
            self._emit_phase(GamePhase.AWAITING_MOVE)
            return True

        self._state = committed.won_by(mover)
        self._emit_connection(connection)
        self._emit_phase(GamePhase.GAME_OVER)
        self._emit_game_over(mover)
        return True

    def abort_check(self) -> None:
        """Evaluation failed; return to awaiting the same player's move."""
        if self._phase == GamePhase.CHECKING:
            self._emit_phase(GamePhase.AWAITING_MOVE)

    def submit(
        self, target: SideRef, points: Sequence[Point] | None = None
    ) -> Connection | RejectionReason | None:
        """Validate, evaluate and commit in the calling thread.

        Returns the committed connection, the reason it was refused, or None
        when the state moved on during evaluation and the move was dropped.
        """
        outcome = self.propose(target, points)
        if not isinstance(outcome, Connection):
            return outcome

        candidate = self.begin_check(outcome)
        moves_remain = evaluate_remaining_moves(
            candidate.board,
            candidate.connections,
            candidate.used_sides,
            candidate.metrics,
        )
        if self.commit(outcome, moves_remain):
            return outcome
        if not moves_remain and not self._state.connections:
            return RejectionReason.NO_MOVES_AFTER_FIRST
        return None

    # ── Emitters ─────────────────────────────────────────────────────────

    def _emit_connection(self, connection: Connection) -> None:
        for cb in self.events.on_connection:
            cb(connection, self._state)

    def _emit_rejected(self, reason: RejectionReason) -> None:
        for cb in self.events.on_rejected:
            cb(reason)

    def _emit_game_over(self, winner: Player) -> None:
        for cb in self.events.on_game_over:
            cb(winner)

    def _emit_phase(self, phase: GamePhase) -> None:
        self._phase = phase
        for cb in self.events.on_phase_changed:
            cb(phase)
