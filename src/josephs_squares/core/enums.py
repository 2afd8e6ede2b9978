"""Core enumerations for the connection game."""

from __future__ import annotations

from enum import IntEnum, StrEnum


class Side(StrEnum):
    """One of the four anchor sides of a square, in clockwise order."""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def outward(self) -> tuple[int, int]:
        """Unit direction pointing away from the square (y grows downward)."""
        return _OUTWARD[self]


_OUTWARD: dict[Side, tuple[int, int]] = {
    Side.TOP: (0, -1),
    Side.RIGHT: (1, 0),
    Side.BOTTOM: (0, 1),
    Side.LEFT: (-1, 0),
}

SIDE_ORDER: tuple[Side, ...] = (Side.TOP, Side.RIGHT, Side.BOTTOM, Side.LEFT)


class Player(IntEnum):
    """The two symmetric players."""

    A = 0
    B = 1

    @property
    def opposite(self) -> Player:
        return Player(1 - self.value)

    def __str__(self) -> str:
        return self.name


class RejectionReason(StrEnum):
    """Why a candidate connection was refused."""

    SAME_SQUARE = "same-square"
    SIDE_TAKEN = "side-taken"
    TOO_SHORT = "too-short"
    SELF_INTERSECTING = "self-intersecting"
    CROSSES_EXISTING = "crosses-existing"
    CROSSES_SQUARE = "crosses-square"
    TOUCHES_ANCHOR = "touches-anchor"
    NO_MOVES_AFTER_FIRST = "no-moves-after-first"

    @property
    def message(self) -> str:
        """Player-facing explanation."""
        return _REJECTION_MESSAGES[self]


_REJECTION_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.SAME_SQUARE: "Pick a side on another square.",
    RejectionReason.SIDE_TAKEN: "That side's taken.",
    RejectionReason.TOO_SHORT: "Draw a longer path to connect.",
    RejectionReason.SELF_INTERSECTING: "Paths can't cross themselves.",
    RejectionReason.CROSSES_EXISTING: "Paths can't cross existing lines.",
    RejectionReason.CROSSES_SQUARE: "Paths cannot pass through squares.",
    RejectionReason.TOUCHES_ANCHOR: "Paths cannot pass through unused nodes.",
    RejectionReason.NO_MOVES_AFTER_FIRST: "Nice try, cheater. Try again!",
}
