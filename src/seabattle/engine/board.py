"""Single-player board for the battle engine.

A board is an immutable grid of :class:`~seabattle.engine.cell.Cell` values.
Every change goes through :meth:`Board.with_cells`, which returns a new board
and shares the rows it did not touch with the original.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Mapping

from .cell import WATER, Cell, CellKind
from .ship import CATALOG, Coordinate, Orientation, ShipKind

Grid = tuple[tuple[Cell, ...], ...]


@dataclass(frozen=True)
class Board:
    """Represents one player's ``y_dim`` × ``x_dim`` grid of cells."""

    cells: Grid

    @classmethod
    def empty(cls, y_dim: int = 10, x_dim: int = 10) -> Board:
        """Create an all-water board."""
        if y_dim < 0 or x_dim < 0:
            raise ValueError(f"Board dimensions must be non-negative, got {y_dim}x{x_dim}.")
        row = (WATER,) * x_dim
        return cls(cells=(row,) * y_dim)

    @property
    def y_dim(self) -> int:
        return len(self.cells)

    @property
    def x_dim(self) -> int:
        return len(self.cells[0]) if self.cells else 0

    def in_bounds(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return 0 <= coord.row < self.y_dim and 0 <= coord.col < self.x_dim

    def cell_at(self, coord: Coordinate) -> Cell:
        if not self.in_bounds(coord):
            raise IndexError(f"{coord} is outside a {self.y_dim}x{self.x_dim} board.")
        return self.cells[coord.row][coord.col]

    def coordinates(self) -> list[Coordinate]:
        """Return every coordinate of the board in row-major order."""
        return [Coordinate(row, col) for row in range(self.y_dim) for col in range(self.x_dim)]

    def placement_cells(
        self, origin: Coordinate, orientation: Orientation, length: int
    ) -> tuple[Coordinate, ...] | None:
        """Return the run of cells a ship would cover, or None if it does not fit.

        The run fails when any cell is off the board or is not water.
        """
        if orientation is Orientation.VERTICAL:
            run = tuple(Coordinate(origin.row + offset, origin.col) for offset in range(length))
        else:
            run = tuple(Coordinate(origin.row, origin.col + offset) for offset in range(length))
        for coord in run:
            if not self.in_bounds(coord):
                return None
            if self.cells[coord.row][coord.col].kind is not CellKind.WATER:
                return None
        return run

    def has_ship(self, kind: ShipKind) -> bool:
        return any(cell.ship is kind for cell in self._iter_cells())

    def has_nominal_ship(self, kind: ShipKind) -> bool:
        return any(cell.is_nominal and cell.ship is kind for cell in self._iter_cells())

    def distinct_ship_count(self) -> int:
        return len({cell.ship for cell in self._iter_cells() if cell.is_ship})

    def distinct_nominal_ship_count(self) -> int:
        """Number of ship kinds with at least one undamaged section."""
        return len({cell.ship for cell in self._iter_cells() if cell.is_nominal})

    def fleet_complete(self) -> bool:
        """True once every kind of the catalog has been placed."""
        return self.distinct_ship_count() == len(CATALOG)

    def cells_of_ship(self, kind: ShipKind) -> list[Coordinate]:
        """Return all coordinates of ``kind``, whatever their damage state."""
        return [coord for coord in self.coordinates() if self.cells[coord.row][coord.col].ship is kind]

    def count(self, kind: CellKind) -> int:
        return sum(1 for cell in self._iter_cells() if cell.kind is kind)

    def with_cells(self, updates: Mapping[Coordinate, Cell]) -> Board:
        """Return a copy of the board with ``updates`` applied."""
        if not updates:
            return self
        by_row: dict[int, dict[int, Cell]] = {}
        for coord, cell in updates.items():
            if not self.in_bounds(coord):
                raise IndexError(f"{coord} is outside a {self.y_dim}x{self.x_dim} board.")
            by_row.setdefault(coord.row, {})[coord.col] = cell
        rows = list(self.cells)
        for row, changes in by_row.items():
            rows[row] = tuple(changes.get(col, cell) for col, cell in enumerate(rows[row]))
        return Board(cells=tuple(rows))

    def changed_coordinates(self, other: Board) -> list[Coordinate]:
        """Return the coordinates whose cells differ between two boards of equal size."""
        if (self.y_dim, self.x_dim) != (other.y_dim, other.x_dim):
            raise ValueError(
                f"Cannot compare a {self.y_dim}x{self.x_dim} board "
                f"with a {other.y_dim}x{other.x_dim} board."
            )
        changed: list[Coordinate] = []
        for row, (mine, theirs) in enumerate(zip(self.cells, other.cells)):
            if mine is theirs:
                continue
            changed.extend(
                Coordinate(row, col) for col, (a, b) in enumerate(zip(mine, theirs)) if a != b
            )
        return changed

    def _iter_cells(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row
