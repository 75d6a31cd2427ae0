"""Single-player match against the computer, holding the current snapshot."""

from __future__ import annotations

import logging
import random

from seabattle.ai.gunner import Gunner
from seabattle.telemetry import get_tracer

from .battle import create_battle, shoot_at, who_won
from .board import Board
from .placement import random_board
from .ship import Coordinate, Player
from .snapshot import Battle, BattleOperation, BattleState, Message

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.match")


class Match:
    """Coordinates an ally (Player1) against a computer-controlled enemy (Player2).

    The enemy fleet is placed at random on :meth:`restart`; the ally fleet is
    placed with :meth:`randomize_ally`, which may be repeated until the first
    shot. Each ally shot is answered by one enemy shot.
    """

    ally = Player.PLAYER1
    enemy = Player.PLAYER2

    def __init__(
        self,
        y_dim: int = 10,
        x_dim: int = 10,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> None:
        self.y_dim = y_dim
        self.x_dim = x_dim
        self._rng = rng if rng is not None else random.Random(seed)
        self.gunner = Gunner(self.ally, self._rng)
        self.battle: Battle = create_battle(y_dim, x_dim)
        self.history: list[Battle] = [self.battle]
        self._enemy_start = self.battle
        self.restart()

    @property
    def started(self) -> bool:
        return self.battle.state in (BattleState.PLAYING, BattleState.GAME_OVER)

    @property
    def winner(self) -> Player | None:
        return who_won(self.battle)

    def board_for(self, player: Player) -> Board:
        return self.battle.board_for(player)

    def restart(self) -> BattleOperation:
        """Start a new battle in which only the enemy fleet is deployed."""
        with tracer.start_as_current_span("match.restart"):
            operation = random_board(create_battle(self.y_dim, self.x_dim), self.enemy, self._rng)
            self._enemy_start = operation.battle
            self.battle = operation.battle
            self.history = [operation.battle]
            self.gunner.reset()
            logger.info("match_restarted", extra={"result": operation.message.value})
            return operation

    def randomize_ally(self) -> BattleOperation:
        """(Re)deploy the ally fleet at random; only allowed before the first shot."""
        if self.started:
            logger.warning("ally_randomize_rejected", extra={"state": self.battle.state.value})
            return BattleOperation(Message.GAME_NOT_IN_PLAY, self.battle)
        operation = random_board(self._enemy_start, self.ally, self._rng)
        if operation.message is Message.ALL_SHIPS_PLACED:
            self._record(operation.battle)
        return operation

    def fire(self, coord: Coordinate) -> tuple[BattleOperation, BattleOperation | None]:
        """Fire at the enemy board and let the enemy shoot back.

        The second result is None when the enemy did not fire: the ally's shot
        was rejected, the ally won, or no unfired cell remains.
        """
        with tracer.start_as_current_span("match.fire") as span:
            span.set_attribute("row", coord.row)
            span.set_attribute("col", coord.col)
            ally_shot = shoot_at(self.battle, self.enemy, coord)
            self._record(ally_shot.battle)
            if ally_shot.message.is_rejection or ally_shot.battle.state is BattleState.GAME_OVER:
                return ally_shot, None

            target = self.gunner.next_target(self.battle)
            if target is None:
                return ally_shot, None
            enemy_shot = shoot_at(self.battle, self.ally, target)
            self._record(enemy_shot.battle)
            self.gunner.observe(target, enemy_shot)
            span.set_attribute("enemy.row", target.row)
            span.set_attribute("enemy.col", target.col)
            return ally_shot, enemy_shot

    def _record(self, battle: Battle) -> None:
        if battle is self.battle:
            return
        self.battle = battle
        self.history.append(battle)
