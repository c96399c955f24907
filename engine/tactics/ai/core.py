"""
Core move calculation module.

Contains the MoveCalculator that turns an actor, the player and the board
into a single decision by delegating to the actor's archetype profile.
"""

from typing import Optional, Sequence

from engine.config import TacticsConfig, get_config
from engine.error_handler import logger
from engine.tactics.combat import CombatResolver
from engine.tactics.events import EventSink, NullEventSink
from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, MoveIntent, Position, Target, TurnOccupancy

from .coordination import TacticalCoordinator
from .profiles import get_archetype_profile


class MoveCalculator:
    """
    Per-actor decision function.

    Delegates to specialized pieces:
    - Profiles: per-archetype geometry and decision order
    - Coordination: clustering, spread and retreat scoring
    - Combat: attacks resolved as a side effect of a decision

    With ``simulate=True`` nothing is mutated and nothing is emitted, so
    callers can ask "what would this actor do" freely.
    """

    def __init__(
        self,
        combat: Optional[CombatResolver] = None,
        coordinator: Optional[TacticalCoordinator] = None,
        events: Optional[EventSink] = None,
        config: Optional[TacticsConfig] = None,
    ):
        """
        Args:
            combat: Resolver used for strikes; created on the same sink if omitted
            coordinator: Tactical scorer; built from config thresholds if omitted
            events: Notification sink shared with the resolver
            config: Tunables, defaults to the global config
        """
        self.config = config or get_config()
        self.events: EventSink = events or (combat.events if combat else NullEventSink())
        self.combat = combat or CombatResolver(self.events)
        self.coordinator = coordinator or TacticalCoordinator(
            vulnerability_threshold=self.config.vulnerability_threshold,
            cluster_gain_threshold=self.config.cluster_gain_threshold,
            max_detour=self.config.max_tactical_detour,
        )

    def calculate_move(
        self,
        actor: Actor,
        target: Target,
        grid: TileGrid,
        all_actors: Sequence[Actor],
        simulate: bool = False,
        occupancy: Optional[TurnOccupancy] = None,
    ) -> Optional[MoveIntent]:
        """
        Decide what the actor does this turn.

        Args:
            actor: The deciding actor
            target: The player
            grid: Tile grid (read only here)
            all_actors: Every actor on the board, the deciding one included
            simulate: Side-effect free dry run
            occupancy: This turn's ledger, if called from a running turn

        Returns:
            Destination to commit, or None when the actor attacked in place
            or has nothing to do
        """
        if not actor.is_alive:
            logger.debug(f"{actor.actor_id} skipped: already defeated")
            return None

        profile = get_archetype_profile(actor.archetype)
        return profile.calculate_move(actor, target, grid, all_actors, self, simulate, occupancy)

    def can_attack_position(
        self,
        actor: Actor,
        x: int,
        y: int,
        grid: TileGrid,
        all_actors: Sequence[Actor],
    ) -> bool:
        """
        Threat query: could this actor hit something standing on (x, y) this turn?

        Counts strikes from the current tile and charges or jumps that end
        in attack range. Never mutates anything.
        """
        if not actor.is_alive:
            return False
        return get_archetype_profile(actor.archetype).threatens(actor, x, y, grid, all_actors)

    def path_goal(self, actor: Actor, target: Target, all_actors: Sequence[Actor]) -> Position:
        """
        Where the actor should path toward.

        With leader-follow enabled and a big enough group, everyone but the
        first living actor follows that leader; otherwise the target.
        """
        if self.config.leader_follow_enabled:
            living = [a for a in all_actors if a.is_alive]
            if len(living) >= self.config.leader_follow_min_group and living[0] is not actor:
                return living[0].position
        return (target.x, target.y)

    def strike(self, actor: Actor, target: Target, grid: TileGrid, simulate: bool) -> None:
        """Attack in place unless simulating or the player's own attack suppresses retaliation."""
        if simulate or target.just_attacked:
            return
        self.combat.resolve_attack(actor, target, grid)

    def bump(self, actor: Actor, target: Target, simulate: bool) -> None:
        if simulate:
            return
        self.combat.resolve_bump(actor, target)
