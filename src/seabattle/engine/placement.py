"""Randomised fleet placement by backtracking search."""

from __future__ import annotations

import logging
import random
from typing import Sequence

from seabattle.telemetry import get_meter, get_tracer

from .battle import add_ship
from .ship import CATALOG, Orientation, Player, ShipKind
from .snapshot import Battle, BattleOperation, Message

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.placement")
meter = get_meter("seabattle.engine.placement")

RANDOM_BOARD_COUNTER = meter.create_counter(
    "seabattle_engine_random_boards",
    unit="1",
    description="Random fleet layouts requested, by result",
)


def random_board(
    battle: Battle,
    player: Player,
    rng: random.Random,
    ships: Sequence[ShipKind] = CATALOG,
) -> BattleOperation:
    """Place ``ships`` at random on ``player``'s board.

    Returns ``ALL_SHIPS_PLACED`` with the populated snapshot, or
    ``SHIP_NOT_ALLOWED_HERE`` with ``battle`` unchanged when no layout is found.
    """
    with tracer.start_as_current_span("placement.random_board") as span:
        span.set_attribute("player", player.value)
        span.set_attribute("ships", len(ships))
        operation = _place_remaining(battle, player, rng, tuple(ships))
        span.set_attribute("result", operation.message.value)
        RANDOM_BOARD_COUNTER.add(
            1, attributes={"result": operation.message.value, "player": player.value}
        )
        if operation.message is Message.ALL_SHIPS_PLACED:
            logger.info(
                "random_board_placed",
                extra={"player": player.value, "ships": [ship.name for ship in ships]},
            )
        else:
            board = battle.board_for(player)
            logger.warning(
                "random_board_failed",
                extra={
                    "player": player.value,
                    "y_dim": board.y_dim,
                    "x_dim": board.x_dim,
                    "ships": [ship.name for ship in ships],
                },
            )
        return operation


def _place_remaining(
    battle: Battle, player: Player, rng: random.Random, ships: tuple[ShipKind, ...]
) -> BattleOperation:
    if not ships:
        return BattleOperation(Message.ALL_SHIPS_PLACED, battle)

    ship, rest = ships[0], ships[1:]
    board = battle.board_for(player)
    orientation = rng.choice((Orientation.HORIZONTAL, Orientation.VERTICAL))
    candidates = [
        coord
        for coord in board.coordinates()
        if board.placement_cells(coord, orientation, ship.length) is not None
    ]
    rng.shuffle(candidates)
    logger.debug(
        "random_board_candidates",
        extra={
            "player": player.value,
            "ship_kind": ship.name,
            "orientation": orientation.value,
            "candidates": len(candidates),
        },
    )

    for origin in candidates:
        placed = add_ship(battle, ship, player, origin, orientation)
        if placed.message is not Message.SHIP_PLACED:
            # Ship already on the board, or the fleet is full.
            break
        result = _place_remaining(placed.battle, player, rng, rest)
        if result.message is Message.ALL_SHIPS_PLACED:
            return result
    return BattleOperation(Message.SHIP_NOT_ALLOWED_HERE, battle)
