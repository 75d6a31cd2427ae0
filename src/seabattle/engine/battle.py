"""Battle engine operations.

Every operation takes a :class:`Battle` snapshot and returns a
:class:`BattleOperation` holding a message and the resulting snapshot. The
input snapshot is never modified; rejected requests return it unchanged.
"""

from __future__ import annotations

import logging

from seabattle.telemetry import get_meter, get_tracer

from .board import Board
from .cell import MISS, Cell, CellKind
from .ship import Coordinate, Orientation, Player, ShipKind
from .snapshot import Battle, BattleOperation, BattleState, Message

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.battle")
meter = get_meter("seabattle.engine.battle")

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_ship_placements",
    unit="1",
    description="Number of attempted ship placements",
)

SHOT_COUNTER = meter.create_counter(
    "seabattle_engine_shots",
    unit="1",
    description="Shots fired at a board, by outcome",
)

_IN_PLAY = (BattleState.SETUP_COMPLETE, BattleState.PLAYING)


def create_battle(y_dim: int = 10, x_dim: int = 10) -> Battle:
    """Start a battle in the Setup state with two empty boards."""
    board = Board.empty(y_dim, x_dim)
    return Battle(board1=board, board2=board)


def board_for(battle: Battle, player: Player) -> Board:
    return battle.board_for(player)


def who_won(battle: Battle) -> Player | None:
    """Return the winner once the game is over; the last firer sank the final ship."""
    if battle.state is BattleState.GAME_OVER:
        return battle.last_shooter
    return None


def add_ship(
    battle: Battle,
    ship: ShipKind,
    player: Player,
    origin: Coordinate,
    orientation: Orientation = Orientation.HORIZONTAL,
) -> BattleOperation:
    """Place ``ship`` on ``player``'s board starting at ``origin``."""
    with tracer.start_as_current_span("battle.add_ship") as span:
        span.set_attribute("player", player.value)
        span.set_attribute("ship.kind", ship.name)
        span.set_attribute("ship.length", ship.length)
        span.set_attribute("ship.origin.row", origin.row)
        span.set_attribute("ship.origin.col", origin.col)
        span.set_attribute("ship.orientation", orientation.value)

        board = battle.board_for(player)
        if board.fleet_complete():
            message = Message.ALL_SHIPS_PLACED
        elif board.has_ship(ship):
            message = Message.SHIP_ALREADY_PLACED
        else:
            run = board.placement_cells(origin, orientation, ship.length)
            if run is None:
                message = Message.SHIP_NOT_ALLOWED_HERE
            else:
                placed = board.with_cells({coord: Cell.nominal(ship) for coord in run})
                updated = battle.advance(player, placed)
                span.set_attribute("result", Message.SHIP_PLACED.value)
                PLACEMENT_COUNTER.add(1, attributes={"result": "placed", "player": player.value})
                logger.info(
                    "ship_placed",
                    extra={
                        "player": player.value,
                        "ship_kind": ship.name,
                        "orientation": orientation.value,
                        "row": origin.row,
                        "col": origin.col,
                    },
                )
                _log_state_change(battle, updated)
                return BattleOperation(Message.SHIP_PLACED, updated)

        span.set_attribute("result", message.value)
        PLACEMENT_COUNTER.add(1, attributes={"result": message.value, "player": player.value})
        logger.warning(
            "ship_placement_rejected",
            extra={
                "player": player.value,
                "ship_kind": ship.name,
                "orientation": orientation.value,
                "row": origin.row,
                "col": origin.col,
                "reason": message.value,
            },
        )
        return BattleOperation(message, battle)


def shoot_at(battle: Battle, player: Player, coord: Coordinate) -> BattleOperation:
    """Fire at ``player``'s board; the firer is ``player``'s opponent."""
    firer = player.opponent()
    with tracer.start_as_current_span("battle.shoot_at") as span:
        span.set_attribute("target", player.value)
        span.set_attribute("firer", firer.value)
        span.set_attribute("shot.row", coord.row)
        span.set_attribute("shot.col", coord.col)

        board = battle.board_for(player)
        if battle.state not in _IN_PLAY:
            rejection = Message.GAME_NOT_IN_PLAY
        elif battle.last_shooter is firer:
            rejection = Message.NOT_THIS_PLAYERS_TURN
        elif not board.in_bounds(coord):
            rejection = Message.SHOT_OUT_OF_BOUNDS
        else:
            rejection = None
        if rejection is not None:
            span.set_attribute("shot.outcome", rejection.value)
            SHOT_COUNTER.add(1, attributes={"outcome": rejection.value, "firer": firer.value})
            logger.warning(
                "shot_rejected",
                extra={
                    "firer": firer.value,
                    "row": coord.row,
                    "col": coord.col,
                    "state": battle.state.value,
                    "reason": rejection.value,
                },
            )
            return BattleOperation(rejection, battle)

        message, resolved, just_sunk = _resolve_shot(board, coord)
        updated = battle.advance(player, resolved, fired_by=firer)

        span.set_attribute("shot.outcome", message.value)
        SHOT_COUNTER.add(1, attributes={"outcome": message.value, "firer": firer.value})
        logger.info(
            "shot_resolved",
            extra={
                "firer": firer.value,
                "row": coord.row,
                "col": coord.col,
                "outcome": message.value,
            },
        )
        if just_sunk is not None:
            span.set_attribute("ship.sunk", just_sunk.name)
            logger.info(
                "ship_sunk",
                extra={
                    "owner": player.value,
                    "ship_kind": just_sunk.name,
                    "remaining": resolved.distinct_nominal_ship_count(),
                },
            )
        _log_state_change(battle, updated)
        return BattleOperation(message, updated, just_sunk)


def _resolve_shot(board: Board, coord: Coordinate) -> tuple[Message, Board, ShipKind | None]:
    cell = board.cell_at(coord)
    ship = cell.ship
    if cell.kind is CellKind.NOMINAL and ship is not None:
        damaged = board.with_cells({coord: Cell.damaged(ship)})
        if damaged.has_nominal_ship(ship):
            return Message.HIT, damaged, None
        sunk = damaged.with_cells({pos: Cell.sunk(ship) for pos in damaged.cells_of_ship(ship)})
        return Message.HIT, sunk, ship
    if cell.kind in (CellKind.DAMAGED, CellKind.SUNK):
        return Message.HIT_SAME_SPOT, board, None
    if cell.kind is CellKind.WATER:
        return Message.MISS, board.with_cells({coord: MISS}), None
    return Message.MISS_SAME_SPOT, board, None


def _log_state_change(before: Battle, after: Battle) -> None:
    if before.state is after.state:
        return
    logger.info(
        "battle_state_changed",
        extra={
            "from_state": before.state.value,
            "to_state": after.state.value,
            "last_shooter": after.last_shooter.value if after.last_shooter else None,
        },
    )
