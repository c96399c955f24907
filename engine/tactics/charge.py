"""
Charge resolution for line-moving archetypes.

A charge ends on the tile immediately before the target along a clear
sightline. Other actors block the sightline and may not hold the landing
tile.
"""

from typing import List, Optional, Sequence

from engine.tactics.line_of_sight import (
    LosKind,
    has_diagonal_line_of_sight,
    has_orthogonal_line_of_sight,
    has_queen_line_of_sight,
)
from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, Position


def _step(delta: int) -> int:
    return 1 if delta > 0 else (-1 if delta < 0 else 0)


def _landing_is_free(actor: Actor, x: int, y: int, grid: TileGrid, actors: Sequence[Actor]) -> bool:
    if not grid.in_bounds(x, y):
        return False
    if not actor.is_walkable(x, y, grid):
        return False
    return not any(
        a is not actor and a.is_alive and a.x == x and a.y == y
        for a in actors
    )


def orthogonal_charge_tile(
    actor: Actor, target_x: int, target_y: int, grid: TileGrid, actors: Sequence[Actor]
) -> Optional[Position]:
    """Rook charge: back off one tile from the target along the dominant axis."""
    if not has_orthogonal_line_of_sight(
        actor.x, actor.y, target_x, target_y, grid,
        is_walkable=actor.is_walkable, check_actors=True, actors=actors, ignore=actor,
    ):
        return None

    dx = abs(actor.x - target_x)
    dy = abs(actor.y - target_y)
    step_x = _step(target_x - actor.x)
    step_y = _step(target_y - actor.y)

    adj_x, adj_y = target_x, target_y
    if dx > dy:
        adj_x -= step_x
    elif dy > dx:
        adj_y -= step_y
    else:
        # Same tile; an orthogonal line cannot tie otherwise
        adj_x -= step_x

    if (adj_x, adj_y) == (actor.x, actor.y):
        return None
    if not _landing_is_free(actor, adj_x, adj_y, grid, actors):
        return None
    return (adj_x, adj_y)


def diagonal_charge_tile(
    actor: Actor, target_x: int, target_y: int, grid: TileGrid, actors: Sequence[Actor]
) -> Optional[Position]:
    """Bishop charge: land on the diagonal neighbour of the target facing the actor."""
    if not has_diagonal_line_of_sight(
        actor.x, actor.y, target_x, target_y, grid,
        is_walkable=actor.is_walkable, check_actors=True, actors=actors, ignore=actor,
    ):
        return None

    step_x = 1 if target_x > actor.x else -1
    step_y = 1 if target_y > actor.y else -1
    adj_x = target_x - step_x
    adj_y = target_y - step_y

    if abs(adj_x - target_x) != 1 or abs(adj_y - target_y) != 1:
        return None
    if (adj_x, adj_y) == (actor.x, actor.y):
        return None
    if not _landing_is_free(actor, adj_x, adj_y, grid, actors):
        return None
    return (adj_x, adj_y)


def queen_charge_tile(
    actor: Actor, target_x: int, target_y: int, grid: TileGrid, actors: Sequence[Actor]
) -> Optional[Position]:
    """Queen charge along any orthogonal or diagonal sightline."""
    if not has_queen_line_of_sight(
        actor.x, actor.y, target_x, target_y, grid,
        is_walkable=actor.is_walkable, check_actors=True, actors=actors, ignore=actor,
    ):
        return None

    adj_x = target_x - _step(target_x - actor.x)
    adj_y = target_y - _step(target_y - actor.y)

    if (adj_x, adj_y) == (actor.x, actor.y):
        return None
    if not _landing_is_free(actor, adj_x, adj_y, grid, actors):
        return None
    return (adj_x, adj_y)


_RESOLVERS = {
    "orthogonal": orthogonal_charge_tile,
    "diagonal": diagonal_charge_tile,
    "queen": queen_charge_tile,
}


def resolve_charge_tile(
    actor: Actor,
    target_x: int,
    target_y: int,
    grid: TileGrid,
    actors: Sequence[Actor],
    los_kind: LosKind,
) -> Optional[Position]:
    """
    Find where a charge toward the target would land.

    Returns None when there is no sightline, the actor is already next to
    the target, or the landing tile is off-grid, blocked, or held by another
    actor.
    """
    resolver = _RESOLVERS.get(los_kind)
    if resolver is None:
        return None
    return resolver(actor, target_x, target_y, grid, actors)


def charge_trail(start_x: int, start_y: int, dest_x: int, dest_y: int, los_kind: LosKind) -> List[Position]:
    """
    Tiles passed over between start and destination, both excluded.

    The orthogonal trail recomputes its own step vector and zeroes the
    minor axis rather than reusing the one the landing tile came from.
    """
    dx = abs(dest_x - start_x)
    dy = abs(dest_y - start_y)
    distance = max(dx, dy)

    if los_kind == "orthogonal":
        step_x = 1 if dest_x > start_x else (-1 if dest_x < start_x else 0)
        step_y = 1 if dest_y > start_y else (-1 if dest_y < start_y else 0)
        if dx > 0:
            step_y = 0
        elif dy > 0:
            step_x = 0
    else:
        step_x = _step(dest_x - start_x)
        step_y = _step(dest_y - start_y)

    return [(start_x + i * step_x, start_y + i * step_y) for i in range(1, distance)]
