"""A* corridor search over the generation grid.

The cost model shapes how the cave looks rather than finding the shortest
route: existing rooms are cheap so corridors merge, traps are expensive,
turns and corridors running alongside each other are penalised.
"""

import heapq
import math

from .world import ROOM, TRAP, Cell, Grid

ROOM_COST = 0.1
TRAP_COST = 10.0
DEFAULT_COST = 1.0
TURN_PENALTY = 5.0
PARALLEL_PENALTY = 5.0


def heuristic(a: Cell, b: Cell) -> int:
    """Manhattan distance."""
    return abs(a.x - b.x) + abs(a.y - b.y)


def step_cost(cell: Cell) -> float:
    if cell.kind == ROOM:
        return ROOM_COST
    if cell.kind == TRAP:
        return TRAP_COST
    return DEFAULT_COST


def _changes_axis(prev: Cell, current: Cell, neighbor: Cell) -> bool:
    return (prev.x == current.x) != (current.x == neighbor.x)


def _runs_alongside_corridor(grid: Grid, cell: Cell) -> bool:
    if not cell.is_void:
        return False
    return any(adj.is_corridor for adj in grid.neighbors(cell))


def find_path(grid: Grid, start: Cell, goal: Cell) -> list[Cell] | None:
    """Return the cells from start to goal inclusive, or None if unreachable.

    The open set is ordered by (f-score, cell index), so among equally
    scored frontier cells the lowest index is expanded first.
    """
    g_score: dict[int, float] = {start.index: 0.0}
    f_score: dict[int, float] = {start.index: heuristic(start, goal)}
    came_from: dict[int, Cell] = {}
    open_set: list[tuple[float, int, Cell]] = [(f_score[start.index], start.index, start)]

    while open_set:
        f, _, current = heapq.heappop(open_set)
        if current is goal:
            return _reconstruct(came_from, current)
        if f > f_score.get(current.index, math.inf):
            continue  # stale entry

        prev = came_from.get(current.index)
        for neighbor in grid.neighbors(current):
            tentative = g_score[current.index] + step_cost(neighbor)
            if prev is not None and _changes_axis(prev, current, neighbor):
                tentative += TURN_PENALTY
            if _runs_alongside_corridor(grid, neighbor):
                tentative += PARALLEL_PENALTY

            if tentative < g_score.get(neighbor.index, math.inf):
                came_from[neighbor.index] = current
                g_score[neighbor.index] = tentative
                f_score[neighbor.index] = tentative + heuristic(neighbor, goal)
                heapq.heappush(
                    open_set, (f_score[neighbor.index], neighbor.index, neighbor)
                )

    return None


def _reconstruct(came_from: dict[int, Cell], current: Cell) -> list[Cell]:
    path = [current]
    while current.index in came_from:
        current = came_from[current.index]
        path.append(current)
    path.reverse()
    return path
