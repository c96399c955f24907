"""
Tactics AI system.

Per-archetype decision making for non-player actors:
- core.py: MoveCalculator, the per-actor decision function
- profiles/: archetype strategy map (geometry and decision overrides)
- coordination.py: TacticalCoordinator scoring helpers
"""

from .core import MoveCalculator
from .coordination import TacticalCoordinator, octant
from .profiles import (
    ArchetypeProfile,
    BaseArchetypeProfile,
    get_archetype_profile,
    register_profile,
)

__all__ = [
    # Core
    "MoveCalculator",
    # Profiles
    "ArchetypeProfile",
    "BaseArchetypeProfile",
    "get_archetype_profile",
    "register_profile",
    # Coordination
    "TacticalCoordinator",
    "octant",
]
