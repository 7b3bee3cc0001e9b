"""Plain-text rendering of a cave for Gemini clients and debugging."""

from .engine.world import (
    BAT,
    DIRECTIONS,
    PLAYER_SPAWN,
    TRAP,
    WUMPUS_SPAWN,
    RoomGraph,
)

# Junction glyph keyed by the linked directions, in W N E S order
JUNCTIONS = {
    "W": "╸",
    "N": "╹",
    "E": "╺",
    "S": "╻",
    "WE": "━",
    "NS": "┃",
    "NE": "┗",
    "WN": "┛",
    "ES": "┏",
    "WS": "┓",
    "WNE": "┻",
    "WNS": "┫",
    "WES": "┳",
    "NES": "┣",
    "WNES": "╋",
}

KIND_SYMBOLS = {
    TRAP: "X",
    BAT: "B",
    PLAYER_SPAWN: "S",
    WUMPUS_SPAWN: "W",
}

VOID = "·"
_LETTERS = "WNES"


def junction(graph: RoomGraph, room: int) -> str:
    key = "".join(
        _LETTERS[d] for d in DIRECTIONS if graph.links[room][d] is not None
    )
    return JUNCTIONS.get(key, " ")


def render_map(
    graph: RoomGraph,
    show_kinds: bool = False,
    marks: dict[int, str] | None = None,
) -> str:
    """Draw the cave one character per cell.

    `marks` overrides the glyph for specific rooms (the player's position,
    say). With `show_kinds` hazard and spawn cells show their letter.
    """
    marks = marks or {}
    lines = []
    for y in range(graph.height):
        row = []
        for x in range(graph.width):
            index = x + y * graph.width
            kind = graph.kinds[index]
            if index in marks:
                row.append(marks[index])
            elif kind is None:
                row.append(VOID)
            elif show_kinds and kind in KIND_SYMBOLS:
                row.append(KIND_SYMBOLS[kind])
            else:
                row.append(junction(graph, index))
        lines.append("".join(row))
    return "\n".join(lines)
