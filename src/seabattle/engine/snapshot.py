"""Immutable battle snapshot and its derived state machine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .board import Board
from .ship import Player, ShipKind


class BattleState(Enum):
    """High-level lifecycle of a battle. Moves forward only."""

    SETUP = "Setup"
    SETUP_COMPLETE = "SetupComplete"
    PLAYING = "Playing"
    GAME_OVER = "GameOver"


class Message(Enum):
    """Outcome of an engine operation; failures are reported here, never raised."""

    HIT = "Hit"
    MISS = "Miss"
    HIT_SAME_SPOT = "HitSameSpot"
    MISS_SAME_SPOT = "MissSameSpot"
    SHOT_OUT_OF_BOUNDS = "ShotOutOfBounds"
    SHIP_NOT_ALLOWED_HERE = "ShipNotAllowedHere"
    SHIP_ALREADY_PLACED = "ShipAlreadyPlaced"
    SHIP_PLACED = "ShipPlaced"
    ALL_SHIPS_PLACED = "AllShipsPlaced"
    GAME_NOT_IN_PLAY = "GameNotInPlay"
    NOT_THIS_PLAYERS_TURN = "NotThisPlayersTurn"

    @property
    def is_rejection(self) -> bool:
        """True when the request was refused and the snapshot returned unchanged.

        ``ALL_SHIPS_PLACED`` counts as a rejection when it comes back from
        ``add_ship``; from ``random_board`` it signals success.
        """
        return self in _REJECTIONS


_REJECTIONS = frozenset(
    {
        Message.SHOT_OUT_OF_BOUNDS,
        Message.SHIP_NOT_ALLOWED_HERE,
        Message.SHIP_ALREADY_PLACED,
        Message.ALL_SHIPS_PLACED,
        Message.GAME_NOT_IN_PLAY,
        Message.NOT_THIS_PLAYERS_TURN,
    }
)


@dataclass(frozen=True)
class Battle:
    """Point-in-time view of a battle; progress produces a new instance."""

    board1: Board
    board2: Board
    state: BattleState = BattleState.SETUP
    last_shooter: Player | None = None

    def board_for(self, player: Player) -> Board:
        return self.board1 if player is Player.PLAYER1 else self.board2

    def fleet_complete(self, player: Player) -> bool:
        return self.board_for(player).fleet_complete()

    def advance(self, player: Player, board: Board, fired_by: Player | None = None) -> Battle:
        """Return the next snapshot with ``board`` installed for ``player``.

        ``fired_by`` records the firer of a shot; the state is re-derived from
        the resulting boards and shot history.
        """
        if player is Player.PLAYER1:
            updated = replace(self, board1=board)
        else:
            updated = replace(self, board2=board)
        last_shooter = fired_by if fired_by is not None else self.last_shooter
        return replace(
            updated,
            last_shooter=last_shooter,
            state=derive_state(self.state, updated.board1, updated.board2, last_shooter),
        )


def derive_state(
    current: BattleState, board1: Board, board2: Board, last_shooter: Player | None
) -> BattleState:
    """Follow at most one edge of Setup -> SetupComplete -> Playing -> GameOver."""
    if current is BattleState.SETUP:
        if board1.fleet_complete() and board2.fleet_complete():
            return BattleState.SETUP_COMPLETE
    elif current is BattleState.SETUP_COMPLETE:
        if last_shooter is not None:
            return BattleState.PLAYING
    elif current is BattleState.PLAYING:
        if board1.distinct_nominal_ship_count() == 0 or board2.distinct_nominal_ship_count() == 0:
            return BattleState.GAME_OVER
    return current


@dataclass(frozen=True)
class BattleOperation:
    """Result of an engine call: what happened and the snapshot it produced."""

    message: Message
    battle: Battle
    just_sunk: ShipKind | None = None
