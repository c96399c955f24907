"""
Rook profile.

Charges along clear rows and columns and rushes down straight corridors.
Cannot strike diagonally.
"""

from ..profiles import BaseArchetypeProfile


class RookProfile(BaseArchetypeProfile):
    """Rook: orthogonal charge, orthogonal strike."""

    los_kind = "orthogonal"
    rushes = True

    def __init__(self):
        super().__init__("rook")

    def strikes_from(self, x: int, y: int, target_x: int, target_y: int) -> bool:
        return abs(x - target_x) + abs(y - target_y) == 1
