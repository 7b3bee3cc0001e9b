"""Procedural cave generation.

A cave starts as an empty grid. Four player spawns go near the corners,
a hub near the centre and the Wumpus near the hub; A* corridors join them
up. Extra rooms (some of them pits or bat roosts) are then scattered at
random and chained together, with the odd shortcut back to the hub.

Every random draw comes from one seeded source, so the same seed and
parameters always give the same cave.
"""

import math

from ..logging import get_logger
from .pathfinding import find_path
from .rng import RandomSource, make_rng
from .world import (
    BAT,
    PLAYER_SPAWN,
    ROOM,
    TRAP,
    WUMPUS_SPAWN,
    Cave,
    Cell,
    Grid,
    HazardLayout,
    SpawnList,
)

logger = get_logger(__name__)

DEFAULT_WIDTH = 8
DEFAULT_HEIGHT = 8
DEFAULT_ROOM_COUNT = 30
DEFAULT_TRAP_COUNT = 4
DEFAULT_BAT_COUNT = 4

# Smallest side on which every perturbed corner stays inside the grid
MIN_GRID_SIZE = 3
# How far (in cells) spawns may drift from their anchor point
SPAWN_MARGIN = 2
# Traps must stay below this share of the room count
MAX_TRAP_DENSITY = 0.6

TRAP_CHANCE = 0.75
BAT_CHANCE = 0.75
HUB_SHORTCUT_CHANCE = 0.25

# (anchored to the right edge, anchored to the bottom edge)
CORNERS = ((False, False), (True, False), (False, True), (True, True))


class ConfigurationError(ValueError):
    """Generation parameters the grid cannot accommodate."""


class AlreadyGeneratedError(RuntimeError):
    """generate() was called twice on the same generator."""


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _clamp(value: int, upper: int) -> int:
    return max(0, min(value, upper))


def validate_parameters(
    width: int, height: int, room_count: int, trap_count: int, bat_count: int
) -> None:
    """Raise ConfigurationError if the requested cave cannot be built."""
    if width < MIN_GRID_SIZE or height < MIN_GRID_SIZE:
        raise ConfigurationError(
            f"Grid must be at least {MIN_GRID_SIZE}x{MIN_GRID_SIZE}, "
            f"got {width}x{height}."
        )
    if room_count < 1:
        raise ConfigurationError(f"Room count must be positive, got {room_count}.")
    if width * height < room_count:
        raise ConfigurationError(
            f"Too many rooms for the given width & height. "
            f"Width: {width} | Height: {height} | Rooms: {room_count}"
        )
    if trap_count < 0 or bat_count < 0:
        raise ConfigurationError("Trap and bat counts cannot be negative.")
    if trap_count >= MAX_TRAP_DENSITY * room_count:
        raise ConfigurationError(
            f"Too many traps for the given map size. "
            f"Rooms: {room_count} - Traps: {trap_count}"
        )


class CaveGenerator:
    """Builds one cave. Not reusable: generate() may only run once."""

    def __init__(
        self,
        seed: object = None,
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
        room_count: int = DEFAULT_ROOM_COUNT,
        trap_count: int = DEFAULT_TRAP_COUNT,
        bat_count: int = DEFAULT_BAT_COUNT,
        rng: RandomSource | None = None,
    ):
        validate_parameters(width, height, room_count, trap_count, bat_count)
        self.seed = seed
        self.rng = rng if rng is not None else make_rng(seed)
        self.grid = Grid(width, height)
        self.room_count = room_count
        self.trap_count = trap_count
        self.bat_count = bat_count

        self.player_spawns: list[int] = []
        self.wumpus_spawn: int | None = None
        self.pits: list[int] = []
        self.bats: list[int] = []
        self._generated = False

    def generate(self) -> Cave:
        """Carve the cave and return its graph, hazards and spawns."""
        if self._generated:
            raise AlreadyGeneratedError("Map has already been generated.")
        self._generated = True

        hub = self._place_entities()
        scattered = self._scatter_rooms()
        self._link_scattered(hub, scattered)

        graph = self.grid.freeze(hub.index)
        cave = Cave(
            seed=self.seed,
            graph=graph,
            hazards=HazardLayout(
                wumpus=self.wumpus_spawn,
                pits=tuple(self.pits),
                bats=tuple(self.bats),
            ),
            spawns=SpawnList(
                players=tuple(self.player_spawns),
                wumpus=self.wumpus_spawn,
            ),
        )
        logger.info(
            "cave_generated",
            seed=self.seed,
            width=self.grid.width,
            height=self.grid.height,
            rooms=len(graph.rooms()),
            pits=len(self.pits),
            bats=len(self.bats),
        )
        return cave

    def _draw_offset(self) -> float:
        return self.rng.random() * SPAWN_MARGIN

    def _place_entities(self) -> Cell:
        """Place spawns, hub and Wumpus, then join them with corridors."""
        width, height = self.grid.width, self.grid.height

        corners = []
        for from_right, from_bottom in CORNERS:
            dx = self._draw_offset()
            x = _round_half_up(width - dx - 1 if from_right else dx)
            dy = self._draw_offset()
            y = _round_half_up(height - dy - 1 if from_bottom else dy)
            corners.append(self.grid.get(x, y))

        hub = self.grid.get(_round_half_up(width / 2), _round_half_up(height / 2))
        hub.kind = ROOM

        for i, corner in enumerate(corners):
            if not corner.is_void:
                corner = corners[i] = self._nearest_empty(corner)
            corner.kind = PLAYER_SPAWN

        wx = _clamp(_round_half_up(hub.x + self._draw_offset()), width - 1)
        wy = _clamp(_round_half_up(hub.y + self._draw_offset()), height - 1)
        wumpus = self.grid.get(wx, wy)
        if not wumpus.is_void:
            wumpus = self._nearest_empty(hub)
        wumpus.kind = WUMPUS_SPAWN

        first, second, third, fourth = corners
        self._connect(first, second)
        self._connect(third, fourth)
        for cell in (*corners, wumpus):
            self._connect(cell, hub)

        self.player_spawns = [cell.index for cell in corners]
        self.wumpus_spawn = wumpus.index
        return hub

    def _nearest_empty(self, origin: Cell) -> Cell:
        empty = [cell for cell in self.grid.cells if cell.is_void]
        if not empty:
            raise ConfigurationError("No free cell left for a spawn.")
        return min(
            empty,
            key=lambda cell: (abs(cell.x - origin.x) + abs(cell.y - origin.y), cell.index),
        )

    def _scatter_rooms(self) -> list[Cell]:
        """Drop room_count rooms on random empty cells, or fill the grid."""
        placed: list[Cell] = []
        occupied = self.grid.occupied_count()
        traps = bats = 0

        while len(placed) < self.room_count:
            if occupied >= len(self.grid):
                logger.warning("grid_full", placed=len(placed), wanted=self.room_count)
                break
            x = math.floor(self.rng.random() * self.grid.width)
            y = math.floor(self.rng.random() * self.grid.height)
            place_trap = self.rng.random() < TRAP_CHANCE and traps < self.trap_count
            place_bat = self.rng.random() < BAT_CHANCE and bats < self.bat_count

            cell = self.grid.get(x, y)
            if not cell.is_void:
                continue

            if place_trap:
                traps += 1
                cell.kind = TRAP
                self.pits.append(cell.index)
            elif place_bat:
                bats += 1
                cell.kind = BAT
                self.bats.append(cell.index)
            else:
                cell.kind = ROOM
            placed.append(cell)
            occupied += 1

        return placed

    def _link_scattered(self, hub: Cell, scattered: list[Cell]) -> None:
        previous = hub
        for i, room in enumerate(scattered):
            self._connect(previous, room)
            shortcut = self.rng.random() < HUB_SHORTCUT_CHANCE
            if shortcut and i > 0:
                self._connect(room, hub)
            previous = room

    def _connect(self, start: Cell, goal: Cell) -> bool:
        path = find_path(self.grid, start, goal)
        if path is None:
            logger.warning("path_not_found", start=start.index, goal=goal.index)
            return False
        self._commit(path)
        return True

    def _commit(self, path: list[Cell]) -> None:
        """Turn a found path into linked rooms."""
        for a, b in zip(path, path[1:]):
            for cell in (a, b):
                if cell.is_void:
                    cell.kind = ROOM
                    cell.is_corridor = True
            self.grid.connect(a, b)


def generate_cave(
    seed: object = None,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    room_count: int = DEFAULT_ROOM_COUNT,
    trap_count: int = DEFAULT_TRAP_COUNT,
    bat_count: int = DEFAULT_BAT_COUNT,
) -> Cave:
    """Generate a cave in one call."""
    generator = CaveGenerator(
        seed=seed,
        width=width,
        height=height,
        room_count=room_count,
        trap_count=trap_count,
        bat_count=bat_count,
    )
    return generator.generate()
