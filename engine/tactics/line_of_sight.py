"""
Line of sight checks.

Three variants share one ray walker and differ only in which alignments
they accept:
- orthogonal: same row or same column
- diagonal: |dx| == |dy|, both non-zero
- queen: either of the above

A pair that is not aligned for the requested variant has no sight at all.
"""

from typing import Callable, Iterable, List, Literal, Optional

from engine.tactics.terrain import TileGrid, is_walkable as default_is_walkable
from engine.tactics.types import Actor, Position


LosKind = Literal["orthogonal", "diagonal", "queen"]
WalkableFn = Callable[[int, int, TileGrid], bool]


def _sign(value: int) -> int:
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


def ray_cells(x1: int, y1: int, x2: int, y2: int, include_endpoint: bool = False) -> List[Position]:
    """
    Cells strictly between two aligned points, stepping one unit at a time.

    The source is never included; the endpoint only when asked.
    """
    step_x = _sign(x2 - x1)
    step_y = _sign(y2 - y1)
    steps = max(abs(x2 - x1), abs(y2 - y1))
    last = steps + 1 if include_endpoint else steps
    return [(x1 + i * step_x, y1 + i * step_y) for i in range(1, last)]


def _ray_is_clear(
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    grid: TileGrid,
    is_walkable: Optional[WalkableFn],
    check_actors: bool,
    actors: Iterable[Actor],
    include_endpoint: bool,
    ignore: Optional[Actor],
) -> bool:
    walkable = is_walkable or default_is_walkable
    blockers = set()
    if check_actors:
        blockers = {
            (a.x, a.y) for a in actors
            if a is not ignore and a.is_alive
        }

    for cx, cy in ray_cells(x1, y1, x2, y2, include_endpoint):
        if not walkable(cx, cy, grid):
            return False
        if (cx, cy) in blockers:
            return False
    return True


def has_orthogonal_line_of_sight(
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    grid: TileGrid,
    *,
    is_walkable: Optional[WalkableFn] = None,
    check_actors: bool = False,
    actors: Iterable[Actor] = (),
    include_endpoint: bool = False,
    ignore: Optional[Actor] = None,
) -> bool:
    """
    Rook-style sight along a row or column.

    Args:
        x1, y1: Source cell (never tested)
        x2, y2: Destination cell
        grid: Tile grid
        is_walkable: Optional walkability override, defaults to the tile oracle
        check_actors: If True, any living actor other than ``ignore`` blocks sight
        actors: Actors considered when check_actors is set
        include_endpoint: Also require the destination itself to be clear
        ignore: Actor excluded from blocking (usually the viewer)

    Returns:
        True if the ray is unobstructed
    """
    if x1 == x2 and y1 == y2:
        return True
    if x1 != x2 and y1 != y2:
        return False
    return _ray_is_clear(x1, y1, x2, y2, grid, is_walkable, check_actors, actors, include_endpoint, ignore)


def has_diagonal_line_of_sight(
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    grid: TileGrid,
    *,
    is_walkable: Optional[WalkableFn] = None,
    check_actors: bool = False,
    actors: Iterable[Actor] = (),
    include_endpoint: bool = False,
    ignore: Optional[Actor] = None,
) -> bool:
    """Bishop-style sight along a 45 degree diagonal. Same options as the orthogonal check."""
    if x1 == x2 and y1 == y2:
        return True
    dx = abs(x2 - x1)
    dy = abs(y2 - y1)
    if dx != dy or dx == 0:
        return False
    return _ray_is_clear(x1, y1, x2, y2, grid, is_walkable, check_actors, actors, include_endpoint, ignore)


def has_queen_line_of_sight(
    x1: int,
    y1: int,
    x2: int,
    y2: int,
    grid: TileGrid,
    *,
    is_walkable: Optional[WalkableFn] = None,
    check_actors: bool = False,
    actors: Iterable[Actor] = (),
    include_endpoint: bool = False,
    ignore: Optional[Actor] = None,
) -> bool:
    """Sight along any orthogonal or diagonal line."""
    options = dict(
        is_walkable=is_walkable,
        check_actors=check_actors,
        actors=actors,
        include_endpoint=include_endpoint,
        ignore=ignore,
    )
    if x1 == x2 or y1 == y2:
        return has_orthogonal_line_of_sight(x1, y1, x2, y2, grid, **options)
    return has_diagonal_line_of_sight(x1, y1, x2, y2, grid, **options)


_CHECKERS = {
    "orthogonal": has_orthogonal_line_of_sight,
    "diagonal": has_diagonal_line_of_sight,
    "queen": has_queen_line_of_sight,
}


def has_line_of_sight(kind: LosKind, x1: int, y1: int, x2: int, y2: int, grid: TileGrid, **options) -> bool:
    """Dispatch to the checker for ``kind``."""
    try:
        checker = _CHECKERS[kind]
    except KeyError:
        raise ValueError(f"Unknown line of sight kind: {kind!r}") from None
    return checker(x1, y1, x2, y2, grid, **options)
