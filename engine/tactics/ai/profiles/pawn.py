"""
Pawn profile.

Pawns march along one column, turning around when the way ahead is
blocked, and only strike the two forward diagonals. Walking into the
target is a harmless bump.
"""

from typing import Optional, Sequence, TYPE_CHECKING

from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, MoveIntent, Target, TurnOccupancy
from ..profiles import BaseArchetypeProfile

if TYPE_CHECKING:
    from ..core import MoveCalculator


class PawnProfile(BaseArchetypeProfile):
    """Pawn: forward march, diagonal strike, reverse when blocked."""

    def __init__(self):
        super().__init__("pawn")

    @staticmethod
    def heading(actor: Actor) -> int:
        return -1 if actor.movement_direction == -1 else 1

    def can_strike(self, actor: Actor, target_x: int, target_y: int) -> bool:
        return abs(target_x - actor.x) == 1 and target_y - actor.y == self.heading(actor)

    def threatens(self, actor: Actor, x: int, y: int, grid: TileGrid, actors: Sequence[Actor]) -> bool:
        return self.can_strike(actor, x, y)

    def _blocked(
        self, actor: Actor, x: int, y: int, grid: TileGrid, actors: Sequence[Actor], occupancy: Optional[TurnOccupancy]
    ) -> bool:
        return not actor.is_walkable(x, y, grid) or self.tile_taken(x, y, actor, actors, occupancy)

    def calculate_move(
        self,
        actor: Actor,
        target: Target,
        grid: TileGrid,
        actors: Sequence[Actor],
        calc: "MoveCalculator",
        simulate: bool = False,
        occupancy: Optional[TurnOccupancy] = None,
    ) -> Optional[MoveIntent]:
        tx, ty = target.x, target.y

        if self.can_strike(actor, tx, ty):
            calc.strike(actor, target, grid, simulate)
            return None

        heading = self.heading(actor)
        next_x, next_y = actor.x, actor.y + heading
        if (next_x, next_y) == (tx, ty):
            calc.bump(actor, target, simulate)
            return None

        if self._blocked(actor, next_x, next_y, grid, actors, occupancy):
            heading = -heading
            if not simulate:
                actor.movement_direction = heading
            next_y = actor.y + heading

            if (next_x, next_y) == (tx, ty):
                calc.bump(actor, target, simulate)
                return None
            if self._blocked(actor, next_x, next_y, grid, actors, occupancy):
                return None

        return MoveIntent(next_x, next_y, kind="move")
