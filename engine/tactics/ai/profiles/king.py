"""
King profile.

Steps one tile in any of eight directions and strikes any neighbouring
tile. Uses the shared decision order unchanged.
"""

from ..profiles import BaseArchetypeProfile


class KingProfile(BaseArchetypeProfile):
    """King: close in one tile at a time, hit anything adjacent."""

    def __init__(self):
        super().__init__("king")
