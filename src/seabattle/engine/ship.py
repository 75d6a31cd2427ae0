"""Ship catalog and coordinate primitives for the battle engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate; ``row`` is the y axis, ``col`` the x axis."""

    row: int
    col: int

    def neighbours(self) -> tuple[Coordinate, ...]:
        """Return the four orthogonal neighbours (unchecked against any board)."""
        return (
            Coordinate(self.row, self.col + 1),
            Coordinate(self.row, self.col - 1),
            Coordinate(self.row + 1, self.col),
            Coordinate(self.row - 1, self.col),
        )


class Orientation(Enum):
    """Allowed ship orientations."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class Player(Enum):
    """The two players of a battle."""

    PLAYER1 = "Player1"
    PLAYER2 = "Player2"

    def opponent(self) -> Player:
        """Return the opposing player."""
        return Player.PLAYER2 if self is Player.PLAYER1 else Player.PLAYER1


_LENGTHS = {
    "A": 5,
    "B": 4,
    "S": 3,
    "C": 2,
    "P": 1,
}


class ShipKind(Enum):
    """All ship kinds of the catalog, keyed by their one-letter code."""

    CARRIER = "A"
    BATTLESHIP = "B"
    SUBMARINE = "S"
    CRUISER = "C"
    PATROL = "P"

    @property
    def length(self) -> int:
        """Return the number of contiguous cells the ship occupies."""
        return _LENGTHS[self.value]

    @property
    def code(self) -> str:
        return self.value


CATALOG: tuple[ShipKind, ...] = tuple(ShipKind)
