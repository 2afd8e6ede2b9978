"""Game phase states."""

from __future__ import annotations

from enum import IntEnum, auto


class GamePhase(IntEnum):
    """Finite-state-machine states for a game."""

    NOT_STARTED = auto()
    AWAITING_MOVE = auto()
    CHECKING = auto()  # remaining-move evaluation in flight
    GAME_OVER = auto()
