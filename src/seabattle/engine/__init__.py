"""Two-player grid battle engine over immutable snapshots."""

from .ship import CATALOG, Coordinate, Orientation, Player, ShipKind
from .cell import MISS, WATER, Cell, CellKind
from .board import Board
from .snapshot import Battle, BattleOperation, BattleState, Message, derive_state
from .battle import add_ship, board_for, create_battle, shoot_at, who_won
from .placement import random_board

__all__ = [
    "CATALOG",
    "MISS",
    "WATER",
    "Battle",
    "BattleOperation",
    "BattleState",
    "Board",
    "Cell",
    "CellKind",
    "Coordinate",
    "Message",
    "Orientation",
    "Player",
    "ShipKind",
    "add_ship",
    "board_for",
    "create_battle",
    "derive_state",
    "random_board",
    "shoot_at",
    "who_won",
]
