"""Connection value object."""

from __future__ import annotations

from dataclasses import dataclass

from josephs_squares.core.enums import Player
from josephs_squares.core.types import Point, SideRef


@dataclass(frozen=True, slots=True)
class Connection:
    """A committed path between two anchors on different squares."""

    player: Player
    from_side: SideRef
    to_side: SideRef
    points: tuple[Point, ...]

    @property
    def start(self) -> Point:
        return self.points[0]

    @property
    def end(self) -> Point:
        return self.points[-1]

    @property
    def keys(self) -> tuple[str, str]:
        return self.from_side.key, self.to_side.key

    def __str__(self) -> str:
        return f"{self.player.name}: {self.from_side}-{self.to_side}"
