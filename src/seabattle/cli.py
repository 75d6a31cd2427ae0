"""Command-line driver that plays a seeded computer-vs-computer battle."""

from __future__ import annotations

import argparse
import random
import sys
from typing import Sequence

from seabattle.ai.gunner import Gunner
from seabattle.engine.battle import create_battle, shoot_at, who_won
from seabattle.engine.placement import random_board
from seabattle.engine.ship import Coordinate, Player
from seabattle.engine.snapshot import Battle, BattleOperation, BattleState, Message
from seabattle.telemetry import init_telemetry


def _describe_shot(firer: Player, coord: Coordinate, operation: BattleOperation) -> str:
    line = f"{firer.value} fired at ({coord.row}, {coord.col}): {operation.message.value}"
    if operation.just_sunk is not None:
        line += f" - sank the {operation.just_sunk.name.title()}!"
    return line


def _deploy_fleets(battle: Battle, rng: random.Random) -> Battle | None:
    for player in Player:
        operation = random_board(battle, player, rng)
        if operation.message is not Message.ALL_SHIPS_PLACED:
            return None
        battle = operation.battle
    return battle


def play_battle(
    rows: int = 10,
    cols: int = 10,
    seed: int | None = None,
    max_shots: int | None = None,
) -> int:
    """Play one battle to the end, printing every shot. Returns an exit status."""
    rng = random.Random(seed)
    battle = _deploy_fleets(create_battle(rows, cols), rng)
    if battle is None:
        print(f"Could not fit the fleet on a {rows}x{cols} board.")
        return 1

    gunners = {player: Gunner(player.opponent(), rng) for player in Player}
    limit = max_shots if max_shots is not None else 4 * rows * cols
    firer = Player.PLAYER1
    shots = 0
    while battle.state is not BattleState.GAME_OVER:
        if shots >= limit:
            print(f"Stopped after {shots} shots without a winner.")
            return 1
        gunner = gunners[firer]
        coord = gunner.next_target(battle)
        if coord is None:
            print(f"{firer.value} has nothing left to fire at.")
            return 1
        operation = shoot_at(battle, firer.opponent(), coord)
        gunner.observe(coord, operation)
        print(_describe_shot(firer, coord, operation))
        battle = operation.battle
        shots += 1
        firer = firer.opponent()

    winner = who_won(battle)
    print(f"\n{winner.value if winner else 'Nobody'} won after {shots} shots.")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Play a computer-vs-computer battle.")
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducibility."
    )
    parser.add_argument("--rows", type=int, default=10, help="Board height.")
    parser.add_argument("--cols", type=int, default=10, help="Board width.")
    parser.add_argument(
        "--max-shots",
        type=int,
        default=None,
        help="Give up after this many shots (default: four per cell).",
    )
    args = parser.parse_args(argv)
    if args.rows < 1 or args.cols < 1:
        parser.error("--rows and --cols must be positive.")

    init_telemetry()
    return play_battle(rows=args.rows, cols=args.cols, seed=args.seed, max_shots=args.max_shots)


if __name__ == "__main__":
    sys.exit(main())
