"""
Queen profile.

Charges along any clear orthogonal or diagonal line, rushes along straight
path segments, strikes all eight neighbours.
"""

from ..profiles import BaseArchetypeProfile


class QueenProfile(BaseArchetypeProfile):
    """Queen: rook and bishop reach combined."""

    los_kind = "queen"
    rushes = True

    def __init__(self):
        super().__init__("queen")
