"""Game management layer — state, controller, phases and the worker session.

Quick start::

    from josephs_squares.core import Side, SideRef
    from josephs_squares.game import GameController

    ctrl = GameController()
    ctrl.new_game(square_count=2)
    ctrl.select_side(SideRef(0, Side.RIGHT))
    ctrl.submit(SideRef(1, Side.LEFT))
"""

from josephs_squares.game.controller import GameController, GameEvents
from josephs_squares.game.interfaces import GamePhase
from josephs_squares.game.state import GameState

__all__ = [
    "GameController",
    "GameEvents",
    "GamePhase",
    "GameState",
]
