"""Match with game-level telemetry hooks."""

from __future__ import annotations

import time

from seabattle.engine.match import Match
from seabattle.engine.ship import Coordinate
from seabattle.engine.snapshot import BattleOperation, BattleState
from seabattle.telemetry import get_logger, get_tracer, record_game_metric


class InstrumentedMatch(Match):
    """Wraps Match with a per-game span, counters and log lines."""

    def __init__(self, *args, **kwargs) -> None:
        self._logger = get_logger("seabattle.match")
        self._tracer = get_tracer("seabattle.match")
        self._game_span_cm = None
        self._game_span = None
        self._game_start_time: float | None = None
        self._game_id_counter = 0
        super().__init__(*args, **kwargs)

    def restart(self) -> BattleOperation:
        self._start_game_span()
        with self._tracer.start_as_current_span("seabattle.match.restart") as span:
            operation = super().restart()
            span.set_attribute("result", operation.message.value)
            record_game_metric("seabattle_game_setup_total", 1, {"result": operation.message.value})
            self._logger.info("Enemy fleet deployed: %s", operation.message.value)
            return operation

    def fire(self, coord: Coordinate) -> tuple[BattleOperation, BattleOperation | None]:
        with self._tracer.start_as_current_span("seabattle.match.fire") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("coord.row", coord.row)
            span.set_attribute("coord.col", coord.col)
            before = self.battle

            ally_shot, enemy_shot = super().fire(coord)

            for shooter, operation in ((self.ally, ally_shot), (self.enemy, enemy_shot)):
                if operation is None:
                    continue
                attrs = {"player": shooter.value}
                if operation.message.is_rejection:
                    record_game_metric(
                        "seabattle_game_invalid_moves_total",
                        1,
                        {**attrs, "reason": operation.message.value},
                    )
                    continue
                record_game_metric("seabattle_shots_total", 1, attrs)
                record_game_metric(
                    "seabattle_shots_by_result_total",
                    1,
                    {**attrs, "result": operation.message.value},
                )
                if operation.just_sunk is not None:
                    record_game_metric(
                        "seabattle_ships_sunk_total", 1, {**attrs, "ship": operation.just_sunk.name}
                    )

            changed = sum(
                len(before.board_for(player).changed_coordinates(self.battle.board_for(player)))
                for player in (self.ally, self.enemy)
            )
            span.set_attribute("ally.outcome", ally_shot.message.value)
            span.set_attribute("enemy.fired", enemy_shot is not None)
            span.set_attribute("cells_changed", changed)

            self._logger.info(
                "fire coord=(%d,%d) ally=%s enemy=%s",
                coord.row,
                coord.col,
                ally_shot.message.value,
                enemy_shot.message.value if enemy_shot else "-",
            )

            if self.battle.state is BattleState.GAME_OVER and self._game_span_cm is not None:
                self._finish_game()

            return ally_shot, enemy_shot

    def _start_game_span(self) -> None:
        self._close_game_span()
        self._game_start_time = time.perf_counter()
        self._game_id_counter += 1
        self._game_span_cm = self._tracer.start_as_current_span("seabattle.match.game")
        self._game_span = self._game_span_cm.__enter__()
        self._game_span.set_attribute("game.id", self._game_id_counter)

    def _finish_game(self) -> None:
        duration = (time.perf_counter() - self._game_start_time) if self._game_start_time else 0.0
        turns = sum(1 for battle in self.history if battle.last_shooter is not None)
        winner = self.winner.value if self.winner else "unknown"

        record_game_metric("seabattle_game_completed_total", 1, {"winner": winner})
        record_game_metric("seabattle_game_duration_seconds", duration, {"winner": winner})

        with self._tracer.start_as_current_span("seabattle.match.game_complete") as span:
            span.set_attribute("game.id", self._game_id_counter)
            span.set_attribute("winner", winner)
            span.set_attribute("turns", turns)
            span.set_attribute("duration_ms", duration * 1000)

        if self._game_span is not None:
            self._game_span.set_attribute("winner", winner)
            self._game_span.set_attribute("turns", turns)

        self._logger.info("Game finished. Winner=%s turns=%d duration_s=%.3f", winner, turns, duration)
        self._close_game_span()

    def _close_game_span(self) -> None:
        if self._game_span_cm is not None:
            self._game_span_cm.__exit__(None, None, None)
            self._game_span_cm = None
            self._game_span = None
