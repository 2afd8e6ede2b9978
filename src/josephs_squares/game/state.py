"""GameState — immutable snapshot passed into every engine call."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from josephs_squares.core.board import Board, create_board
from josephs_squares.core.connection import Connection
from josephs_squares.core.enums import Player
from josephs_squares.core.metrics import GridMetrics, derive_grid_metrics
from josephs_squares.core.types import SideRef


@dataclass(frozen=True, slots=True)
class GameState:
    """Board, committed connections and used sides for one game.

    Connections and used sides only grow, and always together: committing a
    connection adds both of its keys at once.
    """

    board: Board
    metrics: GridMetrics
    connections: tuple[Connection, ...] = ()
    used_sides: frozenset[str] = field(default_factory=frozenset)
    current_player: Player = Player.A
    winner: Player | None = None

    @classmethod
    def new(cls, square_count: int = 2, scale: float = 1.0) -> GameState:
        return cls(board=create_board(square_count), metrics=derive_grid_metrics(scale))

    @property
    def is_game_over(self) -> bool:
        return self.winner is not None

    def is_used(self, ref: SideRef) -> bool:
        return ref.key in self.used_sides

    def with_connection(self, connection: Connection) -> GameState:
        """New state with *connection* committed; both keys marked used."""
        first, second = connection.keys
        if first == second or first in self.used_sides or second in self.used_sides:
            raise ValueError(f"Connection reuses a side: {connection}")
        return replace(
            self,
            connections=(*self.connections, connection),
            used_sides=self.used_sides | {first, second},
        )

    def with_metrics(self, metrics: GridMetrics) -> GameState:
        return replace(self, metrics=metrics)

    def next_turn(self) -> GameState:
        return replace(self, current_player=self.current_player.opposite)

    def won_by(self, player: Player) -> GameState:
        return replace(self, winner=player)
