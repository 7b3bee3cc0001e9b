"""Data structures for the cave world.

`Grid` is the mutable scratch surface the generator carves corridors into.
Once generation finishes it is frozen into a `RoomGraph`, which is shared
read-only by the engine for the lifetime of a game.
"""

from dataclasses import dataclass, field

# Link slots, in the order rooms expose them
WEST = 0
NORTH = 1
EAST = 2
SOUTH = 3

DIRECTIONS = (WEST, NORTH, EAST, SOUTH)
DIRECTION_NAMES = ("west", "north", "east", "south")

# Grid offset for each direction (dx, dy); y grows southwards
OFFSETS = {
    WEST: (-1, 0),
    NORTH: (0, -1),
    EAST: (1, 0),
    SOUTH: (0, 1),
}

# Cell kinds. A cell with kind None is void (solid rock).
ROOM = "room"
TRAP = "trap"
BAT = "bat"
PLAYER_SPAWN = "spawn"
WUMPUS_SPAWN = "wumpus"

Links = tuple[int | None, int | None, int | None, int | None]


def opposite(direction: int) -> int:
    return (direction + 2) % 4


def direction_between(ax: int, ay: int, bx: int, by: int) -> int:
    """Direction of the step from (ax, ay) to an orthogonal neighbour (bx, by)."""
    for direction, offset in OFFSETS.items():
        if (bx - ax, by - ay) == offset:
            return direction
    raise ValueError(f"({ax}, {ay}) and ({bx}, {by}) are not orthogonal neighbours")


@dataclass(eq=False)
class Cell:
    """One square of the generation grid."""

    x: int
    y: int
    index: int
    kind: str | None = None
    # True when the cell was void and got promoted by a corridor commit
    is_corridor: bool = False
    links: list[int | None] = field(default_factory=lambda: [None, None, None, None])

    @property
    def is_void(self) -> bool:
        return self.kind is None


class Grid:
    """A width x height field of cells addressed by (x, y) or flat index."""

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cells = [
            Cell(x=i % width, y=i // width, index=i) for i in range(width * height)
        ]

    def __len__(self) -> int:
        return len(self.cells)

    def get(self, x: int, y: int) -> Cell | None:
        """Return the cell at (x, y), or None when outside the grid."""
        if x < 0 or y < 0 or x >= self.width or y >= self.height:
            return None
        return self.cells[x + y * self.width]

    def neighbors(self, cell: Cell) -> list[Cell]:
        """Orthogonal neighbours of a cell in W, N, E, S order."""
        result = []
        for direction in DIRECTIONS:
            dx, dy = OFFSETS[direction]
            neighbor = self.get(cell.x + dx, cell.y + dy)
            if neighbor is not None:
                result.append(neighbor)
        return result

    def connect(self, a: Cell, b: Cell) -> None:
        """Record a two-way link between orthogonally adjacent cells."""
        direction = direction_between(a.x, a.y, b.x, b.y)
        a.links[direction] = b.index
        b.links[opposite(direction)] = a.index

    def occupied_count(self) -> int:
        return sum(1 for cell in self.cells if not cell.is_void)

    def freeze(self, hub: int) -> "RoomGraph":
        return RoomGraph(
            width=self.width,
            height=self.height,
            hub=hub,
            links=tuple(tuple(cell.links) for cell in self.cells),
            kinds=tuple(cell.kind for cell in self.cells),
        )


@dataclass(frozen=True)
class RoomGraph:
    """Immutable adjacency of a generated cave.

    `links[i]` holds the (west, north, east, south) neighbours of room i;
    `kinds[i]` the cell kind, or None for void cells.
    """

    width: int
    height: int
    hub: int
    links: tuple[Links, ...]
    kinds: tuple[str | None, ...]

    def __len__(self) -> int:
        return len(self.links)

    def neighbors(self, room: int) -> Links:
        return self.links[room]

    def adjacent(self, room: int) -> list[int]:
        """Linked neighbours of a room, skipping empty slots."""
        return [n for n in self.links[room] if n is not None]

    def is_adjacent(self, room: int, other: int | None) -> bool:
        return other is not None and other in self.links[room]

    def is_room(self, index: int) -> bool:
        return 0 <= index < len(self.kinds) and self.kinds[index] is not None

    def rooms(self) -> list[int]:
        """Indices of every non-void cell."""
        return [i for i, kind in enumerate(self.kinds) if kind is not None]

    def coordinates(self, room: int) -> tuple[int, int]:
        return room % self.width, room // self.width


@dataclass(frozen=True)
class HazardLayout:
    """Hazards as placed at generation time."""

    wumpus: int
    pits: tuple[int, ...] = ()
    bats: tuple[int, ...] = ()


@dataclass(frozen=True)
class SpawnList:
    """Player start rooms in corner order, plus the Wumpus start room."""

    players: tuple[int, ...]
    wumpus: int


@dataclass(frozen=True)
class Cave:
    """Everything one generation run produces."""

    seed: object
    graph: RoomGraph
    hazards: HazardLayout
    spawns: SpawnList
