"""Point and side-reference value types plus side-key helpers.

A side key is the string ``"<squareId>:<side>"`` used for set membership,
e.g. ``"0:right"``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from josephs_squares.core.enums import Side


@dataclass(frozen=True, slots=True)
class Point:
    """Immutable 2D point in board units (y grows downward)."""

    x: float
    y: float


@dataclass(frozen=True, slots=True)
class SideRef:
    """Identifies one anchor: a side of a particular square."""

    square_id: int
    side: Side

    @property
    def key(self) -> str:
        return side_key(self.square_id, self.side)

    def __str__(self) -> str:
        return self.key


def side_key(square_id: int, side: Side | str) -> str:
    """Composite set key, e.g. ``(0, Side.TOP)`` → ``'0:top'``."""
    return f"{square_id}:{Side(side).value}"


def parse_side_key(key: str) -> SideRef:
    """Parse a side key, e.g. ``'3:left'`` → ``SideRef(3, Side.LEFT)``."""
    square_part, sep, side_part = key.partition(":")
    if not sep or not square_part.lstrip("-").isdigit():
        raise ValueError(f"Invalid side key: {key!r}")
    try:
        side = Side(side_part)
    except ValueError:
        raise ValueError(f"Invalid side key: {key!r}") from None
    return SideRef(int(square_part), side)


def normalize_used_sides(used_sides: Iterable[str] | None) -> frozenset[str]:
    """Accept any iterable of side keys (worker payloads carry lists)."""
    if used_sides is None:
        return frozenset()
    if isinstance(used_sides, frozenset):
        return used_sides
    return frozenset(used_sides)
