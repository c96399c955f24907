"""
Tactics pathfinding module.

Breadth-first search over an archetype-specific direction set. Every step
has the same cost, so the first path found is the shortest by step count.
Long-range movers (rook, bishop, queen) still search with unit steps; their
reach comes from rushing along the found path afterwards.
"""

from collections import deque
from typing import Callable, Container, Dict, List, Optional, Sequence, Tuple

from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, Position, tile_key


Direction = Tuple[int, int]
WalkableFn = Callable[[int, int, TileGrid], bool]

ORTHOGONAL: Tuple[Direction, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))
DIAGONAL: Tuple[Direction, ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))
KNIGHT_JUMPS: Tuple[Direction, ...] = (
    (1, 2), (2, 1), (2, -1), (1, -2),
    (-1, -2), (-2, -1), (-2, 1), (-1, 2),
)

DIRECTION_SETS: Dict[str, Tuple[Direction, ...]] = {
    "pawn": ((0, -1), (0, 1)),
    "king": ORTHOGONAL + DIAGONAL,
    "knight": KNIGHT_JUMPS,
    "bishop": DIAGONAL,
    "rook": ORTHOGONAL,
    "queen": ORTHOGONAL + DIAGONAL,
    "default": ORTHOGONAL,
}


def movement_directions(archetype: str) -> Tuple[Direction, ...]:
    """Direction set for an archetype, falling back to orthogonal steps."""
    return DIRECTION_SETS.get(archetype, DIRECTION_SETS["default"])


def find_path(
    start_x: int,
    start_y: int,
    target_x: int,
    target_y: int,
    grid: TileGrid,
    directions: Sequence[Direction],
    is_walkable: WalkableFn,
) -> Optional[List[Position]]:
    """
    Find the shortest step path from start to target.

    Args:
        start_x, start_y: Starting cell (path[0])
        target_x, target_y: Goal cell; must itself be walkable
        grid: Tile grid
        directions: Offsets the mover may take in one step
        is_walkable: Walkability test applied to every visited cell

    Returns:
        List of (x, y) from start to target inclusive, or None if unreachable
    """
    start = (start_x, start_y)
    goal = (target_x, target_y)
    if start == goal:
        return [start]

    if not is_walkable(target_x, target_y, grid):
        return None

    queue = deque([start])
    visited = {tile_key(start_x, start_y)}
    parents: Dict[str, Position] = {}

    while queue:
        cx, cy = queue.popleft()
        for dx, dy in directions:
            nx, ny = cx + dx, cy + dy
            key = tile_key(nx, ny)
            if key in visited:
                continue
            if not is_walkable(nx, ny, grid):
                continue
            visited.add(key)
            parents[key] = (cx, cy)

            if (nx, ny) == goal:
                # Reconstruct path
                path = [goal]
                node = goal
                while node != start:
                    node = parents[tile_key(*node)]
                    path.append(node)
                path.reverse()
                return path
            queue.append((nx, ny))

    return None


def find_any_valid_adjacent_move(
    actor: Actor,
    grid: TileGrid,
    actors: Sequence[Actor],
    avoid: Container[Position] = (),
) -> Optional[Position]:
    """
    First single step from the actor's direction set that is in bounds,
    walkable, not held by another living actor and not in ``avoid``.
    """
    occupied = {(a.x, a.y) for a in actors if a is not actor and a.is_alive}
    for dx, dy in movement_directions(actor.archetype):
        nx, ny = actor.x + dx, actor.y + dy
        if not grid.in_bounds(nx, ny):
            continue
        if not actor.is_walkable(nx, ny, grid):
            continue
        if (nx, ny) in occupied or (nx, ny) in avoid:
            continue
        return (nx, ny)
    return None
