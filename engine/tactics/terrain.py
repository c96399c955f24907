"""
Tactics terrain module.

Holds the TileGrid wrapper around the zone's cell rows and the walkability
oracle every mover and sightline consults.
"""

from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple

from settings import GRID_SIZE, TILE_FLOOR, WALKABLE_TILES
from engine.error_handler import GridError


def tile_type(cell: Any) -> Optional[int]:
    """
    Reduce a cell to its tile id.

    Primitive cells are returned as-is; object cells (anything with a
    ``type`` attribute or a mapping with a ``"type"`` key) yield that type.
    Returns None for shapes that carry no recognisable type.
    """
    if isinstance(cell, bool):
        return None
    if isinstance(cell, int):
        return cell
    if isinstance(cell, Mapping):
        value = cell.get("type")
    else:
        value = getattr(cell, "type", None)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


class TileGrid:
    """
    Rectangular grid of cells addressed as (x, y), rows indexed by y.

    This is the tile query/mutate surface the core consumes; zone generation
    and persistence live elsewhere.
    """

    def __init__(self, width: int = GRID_SIZE, height: int = GRID_SIZE, fill: Any = TILE_FLOOR):
        if width <= 0 or height <= 0:
            raise GridError(f"grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._rows: List[List[Any]] = [[fill for _ in range(width)] for _ in range(height)]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Any]]) -> "TileGrid":
        """
        Build a grid from nested row lists.

        Raises:
            GridError: if rows are empty or ragged
        """
        if not rows or not rows[0]:
            raise GridError("grid must have at least one row and one column")
        width = len(rows[0])
        for y, row in enumerate(rows):
            if len(row) != width:
                raise GridError(f"row {y} has {len(row)} cells, expected {width}")
        grid = cls(width, len(rows))
        grid._rows = [list(row) for row in rows]
        return grid

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, x: int, y: int) -> Any:
        """Return the raw cell at (x, y), or None when out of bounds."""
        if not self.in_bounds(x, y):
            return None
        return self._rows[y][x]

    def set_tile(self, x: int, y: int, value: Any) -> None:
        if not self.in_bounds(x, y):
            raise GridError(f"({x}, {y}) is outside the {self.width}x{self.height} grid")
        self._rows[y][x] = value

    def snapshot(self) -> Tuple[Tuple[Any, ...], ...]:
        """Immutable copy of every cell, for before/after comparisons."""
        return tuple(tuple(row) for row in self._rows)


def is_walkable(x: int, y: int, grid: TileGrid) -> bool:
    """
    Check whether (x, y) can be entered.

    Out-of-bounds coordinates and unknown cell shapes are simply not
    walkable; this never raises.
    """
    if not grid.in_bounds(x, y):
        return False
    return tile_type(grid.get_tile(x, y)) in WALKABLE_TILES
