"""Elementary auto-fire logic: random shots, then the neighbours of each hit."""

from __future__ import annotations

import logging
import random

from seabattle.engine.board import Board
from seabattle.engine.ship import Coordinate, Player
from seabattle.engine.snapshot import Battle, BattleOperation, Message

logger = logging.getLogger(__name__)


class Gunner:
    """Picks targets on the board of ``target``.

    Targets are drawn from the end of a shuffled queue. After a hit, the
    un-fired orthogonal neighbours of the hit are moved to the end of the
    queue so they are tried next.
    """

    def __init__(self, target: Player, rng: random.Random) -> None:
        self.target = target
        self._rng = rng
        self._queue: list[Coordinate] = []

    def reset(self) -> None:
        self._queue.clear()

    @property
    def pending(self) -> tuple[Coordinate, ...]:
        """Queued targets, next target last."""
        return tuple(self._queue)

    def next_target(self, battle: Battle) -> Coordinate | None:
        """Return the next coordinate to fire at, or None once every cell has been fired on."""
        board = battle.board_for(self.target)
        while True:
            if not self._queue:
                self._refill(board)
                if not self._queue:
                    return None
            coord = self._queue.pop()
            if board.in_bounds(coord) and not board.cell_at(coord).fired_on:
                return coord

    def observe(self, shot: Coordinate, operation: BattleOperation) -> None:
        """Queue the neighbours of ``shot`` if it was a hit."""
        if operation.message is not Message.HIT:
            return
        board = operation.battle.board_for(self.target)
        nearby = [
            coord
            for coord in shot.neighbours()
            if board.in_bounds(coord) and not board.cell_at(coord).fired_on
        ]
        self._queue = [coord for coord in self._queue if coord not in nearby] + nearby
        logger.debug(
            "gunner_probe_queued",
            extra={"target": self.target.value, "row": shot.row, "col": shot.col, "queued": len(nearby)},
        )

    def _refill(self, board: Board) -> None:
        self._queue = [coord for coord in board.coordinates() if not board.cell_at(coord).fired_on]
        self._rng.shuffle(self._queue)
