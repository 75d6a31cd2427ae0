"""Shared fixtures for engine tests."""

from __future__ import annotations

from typing import Callable

import pytest

from seabattle.engine.battle import add_ship, create_battle
from seabattle.engine.ship import CATALOG, Coordinate, Player
from seabattle.engine.snapshot import Battle

FleetPlacer = Callable[[Battle, Player], Battle]


def _place_fleet(battle: Battle, player: Player) -> Battle:
    """Lay the catalog out left-aligned, one ship per row, Carrier on row 0."""
    for row, ship in enumerate(CATALOG):
        battle = add_ship(battle, ship, player, Coordinate(row, 0)).battle
    return battle


@pytest.fixture
def place_fleet() -> FleetPlacer:
    return _place_fleet


@pytest.fixture
def battle() -> Battle:
    return create_battle()


@pytest.fixture
def ready_battle(battle: Battle) -> Battle:
    """Both fleets placed, no shot fired."""
    return _place_fleet(_place_fleet(battle, Player.PLAYER1), Player.PLAYER2)
