"""Shared test fixtures for Hunt the Wumpus."""

import pytest

from wumpus.app import create_app
from wumpus.config import Config
from wumpus.engine.generator import generate_cave
from wumpus.engine.state import GameState
from wumpus.engine.world import ROOM, Cave, Grid, RoomGraph


class ScriptedRandom:
    """Returns queued values from random(), in order."""

    def __init__(self, *values: float):
        self.values = list(values)

    def random(self) -> float:
        return self.values.pop(0)


@pytest.fixture
def scripted():
    return ScriptedRandom


@pytest.fixture
def cave() -> Cave:
    return generate_cave(
        seed="abc", width=10, height=10, room_count=20, trap_count=2, bat_count=2
    )


@pytest.fixture
def tunnel() -> RoomGraph:
    """Rooms 0-9 in one east-west line along the top row of a 10x3 grid."""
    grid = Grid(10, 3)
    for cell in grid.cells[:10]:
        cell.kind = ROOM
    for a, b in zip(grid.cells[:9], grid.cells[1:10]):
        grid.connect(a, b)
    return grid.freeze(hub=5)


@pytest.fixture
def state() -> GameState:
    """Wumpus at the east end, a pit at the west end, no bats."""
    return GameState(
        wumpus_location=9,
        pits=frozenset({0}),
        bats=frozenset(),
        spawns=(5, 2, 7, 3),
    )


@pytest.fixture
def test_config() -> Config:
    return Config(seed="test-seed", map_width=8, map_height=8)


@pytest.fixture
def app(test_config: Config):
    return create_app(test_config)


@pytest.fixture
def client(app):
    from xitzin.testing import test_app

    with test_app(app) as client:
        yield client


@pytest.fixture
def auth_client(client):
    return client.with_certificate("test-fingerprint-abc123")
