"""
Tactics engine module.

Decision engine for the chess-inspired enemy phase, split into logical components:
- terrain.py: TileGrid and the walkability oracle
- line_of_sight.py: orthogonal, diagonal and queen sightlines
- pathfinding.py: BFS over per-archetype direction sets
- charge.py: landing tiles for line charges
- ai/: MoveCalculator, archetype profiles and tactical coordination
- combat.py: damage, knockback and defeat bookkeeping
- turns.py: TurnCombatOrchestrator and the occupancy protocol
- events.py: abstract notifications for presentation layers
- types.py: Actor, PlayerTarget, MoveIntent, TurnOccupancy and outcomes
"""

from .types import Actor, PlayerTarget, MoveIntent, TurnOccupancy, AttackOutcome, DefeatOutcome, TurnReport
from .terrain import TileGrid, is_walkable
from .events import CombatEvent, CombatEventBus, NullEventSink
from .combat import CombatResolver
from .ai import MoveCalculator, TacticalCoordinator
from .turns import TurnCombatOrchestrator

__all__ = [
    "Actor",
    "PlayerTarget",
    "MoveIntent",
    "TurnOccupancy",
    "AttackOutcome",
    "DefeatOutcome",
    "TurnReport",
    "TileGrid",
    "is_walkable",
    "CombatEvent",
    "CombatEventBus",
    "NullEventSink",
    "CombatResolver",
    "MoveCalculator",
    "TacticalCoordinator",
    "TurnCombatOrchestrator",
]
