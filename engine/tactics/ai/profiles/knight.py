"""
Knight profile.

Moves in L-shaped jumps. When its next jump lands exactly on the target it
performs a bump: the target is hit and shoved aside and the knight takes
its tile. That landing is never second-guessed by the retreat logic.
"""

from typing import Optional, Sequence, TYPE_CHECKING

from engine.tactics.pathfinding import KNIGHT_JUMPS
from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, MoveIntent, Position, Target
from ..profiles import BaseArchetypeProfile

if TYPE_CHECKING:
    from ..core import MoveCalculator


def is_knight_jump(dx: int, dy: int) -> bool:
    return (dx, dy) in KNIGHT_JUMPS


class KnightProfile(BaseArchetypeProfile):
    """Knight: L-jumps, bump attack on landing."""

    def __init__(self):
        super().__init__("knight")

    def threatens(self, actor: Actor, x: int, y: int, grid: TileGrid, actors: Sequence[Actor]) -> bool:
        if self.can_strike(actor, x, y):
            return True
        return is_knight_jump(x - actor.x, y - actor.y)

    def intercept_step(
        self,
        actor: Actor,
        target: Target,
        step: Position,
        calc: "MoveCalculator",
    ) -> Optional[MoveIntent]:
        if step != (target.x, target.y):
            return None
        if not is_knight_jump(step[0] - actor.x, step[1] - actor.y):
            return None
        if target.just_attacked:
            return None
        return MoveIntent(step[0], step[1], kind="bump")
