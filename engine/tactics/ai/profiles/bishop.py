"""
Bishop profile.

Charges along clear diagonals and rushes along diagonal paths.
Cannot strike orthogonally.
"""

from ..profiles import BaseArchetypeProfile


class BishopProfile(BaseArchetypeProfile):
    """Bishop: diagonal charge, diagonal strike."""

    los_kind = "diagonal"
    rushes = True

    def __init__(self):
        super().__init__("bishop")

    def strikes_from(self, x: int, y: int, target_x: int, target_y: int) -> bool:
        return abs(x - target_x) == 1 and abs(y - target_y) == 1
