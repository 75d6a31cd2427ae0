"""Cell model: the states a single board position can hold."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .ship import ShipKind


class CellKind(Enum):
    """Tag of a cell; the last three carry a ship."""

    WATER = "water"
    MISS = "miss"
    NOMINAL = "nominal"
    DAMAGED = "damaged"
    SUNK = "sunk"


_SHIP_KINDS = frozenset({CellKind.NOMINAL, CellKind.DAMAGED, CellKind.SUNK})


@dataclass(frozen=True)
class Cell:
    """Tagged cell value. ``ship`` is set exactly when ``kind`` is ship-bearing."""

    kind: CellKind
    ship: ShipKind | None = None

    def __post_init__(self) -> None:
        if (self.kind in _SHIP_KINDS) != (self.ship is not None):
            raise ValueError(f"{self.kind.name} cell cannot carry ship {self.ship!r}")

    @classmethod
    def nominal(cls, ship: ShipKind) -> Cell:
        return cls(CellKind.NOMINAL, ship)

    @classmethod
    def damaged(cls, ship: ShipKind) -> Cell:
        return cls(CellKind.DAMAGED, ship)

    @classmethod
    def sunk(cls, ship: ShipKind) -> Cell:
        return cls(CellKind.SUNK, ship)

    @property
    def is_ship(self) -> bool:
        return self.kind in _SHIP_KINDS

    @property
    def is_nominal(self) -> bool:
        """True for an undamaged ship section."""
        return self.kind is CellKind.NOMINAL

    @property
    def fired_on(self) -> bool:
        """True once a shot has landed here (miss, damaged or sunk)."""
        return self.kind not in (CellKind.WATER, CellKind.NOMINAL)


WATER = Cell(CellKind.WATER)
MISS = Cell(CellKind.MISS)
