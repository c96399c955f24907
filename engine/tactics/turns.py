"""
Turn orchestration for the enemy phase.

Runs every actor's decision in list order against one TurnOccupancy
ledger, commits accepted moves, then reconciles anything left standing on
the player's tile. Earlier claims always win; there is no retry.

Per actor per turn:
    idle -> deciding -> attacking | moving | retreating | blocked -> committed
    removed once health reaches 0 (or the actor drops through a pitfall)
"""

from typing import List, Optional

from settings import TILE_PITFALL, TILE_PORT
from engine.config import TacticsConfig, get_config
from engine.error_handler import TacticsError, TurnError, log_error, logger
from engine.tactics.ai.core import MoveCalculator
from engine.tactics.ai.profiles import get_archetype_profile
from engine.tactics.charge import charge_trail
from engine.tactics.combat import CombatResolver
from engine.tactics.events import CombatEvent, EventSink, NullEventSink
from engine.tactics.terrain import TileGrid, tile_type
from engine.tactics.types import (
    Actor,
    ActorState,
    MoveIntent,
    Target,
    TurnOccupancy,
    TurnReport,
    tile_key,
)


class TurnCombatOrchestrator:
    """
    Sequences one enemy turn.

    Owns the occupancy ledger for the duration of run_turn and is the only
    place positions change outside combat resolution.
    """

    def __init__(
        self,
        calculator: Optional[MoveCalculator] = None,
        combat: Optional[CombatResolver] = None,
        events: Optional[EventSink] = None,
        config: Optional[TacticsConfig] = None,
    ):
        self.config = config or get_config()
        self.events: EventSink = events or NullEventSink()
        self.combat = combat or CombatResolver(self.events)
        self.calculator = calculator or MoveCalculator(combat=self.combat, events=self.events, config=self.config)

    # ------------------------------------------------------------------
    # Occupancy
    # ------------------------------------------------------------------

    def begin_turn(self, actors: List[Actor], target: Target) -> TurnOccupancy:
        """Snapshot start-of-turn tiles; the player's tile counts as claimed."""
        occupancy = TurnOccupancy()
        for actor in actors:
            if actor.is_alive:
                occupancy.initial[tile_key(actor.x, actor.y)] = actor.actor_id
        occupancy.claim(target.x, target.y)
        return occupancy

    def is_valid_move(
        self,
        actor: Actor,
        x: int,
        y: int,
        actors: List[Actor],
        occupancy: TurnOccupancy,
        grid: TileGrid,
    ) -> bool:
        """
        Check a destination against the ledger.

        Rejects tiles that another living actor stands on now, tiles
        another actor started the turn on (until it leaves), and tiles
        already claimed this turn. Staying put is always allowed.
        """
        if (x, y) == (actor.x, actor.y):
            return True
        if not actor.is_walkable(x, y, grid):
            return False
        if any(a is not actor and a.is_alive and a.x == x and a.y == y for a in actors):
            return False
        owner = occupancy.start_owner(x, y)
        if owner is not None and owner != actor.actor_id:
            return False
        return not occupancy.is_claimed(x, y)

    def commit_move(
        self,
        actor: Actor,
        intent: MoveIntent,
        occupancy: TurnOccupancy,
        grid: TileGrid,
        actors: List[Actor],
        target: Target,
    ) -> ActorState:
        """
        Apply an accepted move and anything that comes with it.

        Charges with attack_on_arrival hit (and knock back) the target
        once the actor has landed. An actor ending on a pitfall drops out
        of play and the pitfall becomes a port.

        Returns:
            The actor's resulting state
        """
        start = (actor.x, actor.y)
        occupancy.claim(intent.x, intent.y)
        occupancy.vacated.add(tile_key(*start))
        actor.set_position(intent.x, intent.y)
        actor.pending_move = None

        if intent.kind in ("charge", "rush"):
            los_kind = get_archetype_profile(actor.archetype).los_kind or "queen"
            self.events.emit(CombatEvent(
                "charge", actor_id=actor.actor_id, x=intent.x, y=intent.y,
                data={"from": start, "trail": charge_trail(start[0], start[1], intent.x, intent.y, los_kind)},
            ))
        else:
            self.events.emit(CombatEvent(
                "move", actor_id=actor.actor_id, x=intent.x, y=intent.y,
                data={"from": start, "intent": intent.kind},
            ))

        if tile_type(grid.get_tile(intent.x, intent.y)) == TILE_PITFALL:
            grid.set_tile(intent.x, intent.y, TILE_PORT)
            if actor in actors:
                actors.remove(actor)
            self.events.emit(CombatEvent("pitfall", actor_id=actor.actor_id, x=intent.x, y=intent.y))
            logger.debug(f"{actor.actor_id} fell through pitfall at ({intent.x}, {intent.y})")
            return "removed"

        if intent.attack_on_arrival and target.health > 0 and not target.just_attacked:
            self.combat.resolve_attack(
                actor, target, grid,
                approach=(target.x - actor.x, target.y - actor.y),
                knockback=True,
                actors=actors,
            )
            occupancy.claim(target.x, target.y)
            return "attacking"

        return "retreating" if intent.kind == "retreat" else "moving"

    # ------------------------------------------------------------------
    # Turn
    # ------------------------------------------------------------------

    def run_turn(self, actors: List[Actor], target: Target, grid: TileGrid) -> TurnReport:
        """
        Resolve one enemy phase.

        ``actors`` is updated in place: defeated actors and actors lost to
        pitfalls are removed from it.
        """
        report = TurnReport()
        health_before = target.health
        occupancy = self.begin_turn(actors, target)

        for actor in list(actors):
            if actor not in actors:
                continue
            if not actor.is_alive:
                logger.debug(f"{actor.actor_id} skipped: health {actor.health}")
                continue
            if actor.frozen:
                report.decisions[actor.actor_id] = "idle"
                continue
            report.decisions[actor.actor_id] = self._run_actor(actor, target, grid, actors, occupancy)
            logger.debug(f"{actor.actor_id} -> {report.decisions[actor.actor_id]}")
            if report.decisions[actor.actor_id] == "removed":
                report.removed.append(actor.actor_id)

        self._collision_pass(actors, target, report)

        for actor in actors:
            actor.just_attacked = False
        target.just_attacked = False

        report.player_damage_taken = max(0, health_before - target.health)
        return report

    def _run_actor(
        self,
        actor: Actor,
        target: Target,
        grid: TileGrid,
        actors: List[Actor],
        occupancy: TurnOccupancy,
    ) -> ActorState:
        try:
            intent = self.calculator.calculate_move(actor, target, grid, actors, simulate=False, occupancy=occupancy)
        except TacticsError:
            raise
        except Exception as e:
            log_error(e, f"decision for {actor.actor_id}")
            raise TurnError(f"decision for {actor.actor_id} failed: {e}") from e

        if intent is None:
            return "attacking" if actor.just_attacked else "idle"

        actor.pending_move = intent

        if intent.kind == "bump":
            start = (actor.x, actor.y)
            outcome = self.combat.resolve_knight_bump(actor, target, grid, actors)
            actor.pending_move = None
            if outcome is None:
                self._blocked(actor, intent)
                return "blocked"
            occupancy.vacated.add(tile_key(*start))
            occupancy.claim(actor.x, actor.y)
            occupancy.claim(target.x, target.y)
            return "attacking"

        if not self.is_valid_move(actor, intent.x, intent.y, actors, occupancy, grid):
            actor.pending_move = None
            self._blocked(actor, intent)
            return "blocked"

        return self.commit_move(actor, intent, occupancy, grid, actors, target)

    def _blocked(self, actor: Actor, intent: MoveIntent) -> None:
        logger.debug(f"{actor.actor_id} blocked from ({intent.x}, {intent.y})")
        self.events.emit(CombatEvent(
            "blocked", actor_id=actor.actor_id, x=intent.x, y=intent.y, data={"intent": intent.kind},
        ))

    def _collision_pass(self, actors: List[Actor], target: Target, report: TurnReport) -> None:
        """Remove the fallen and settle anything sharing the player's tile."""
        for actor in list(actors):
            if not actor.is_alive:
                if not self.combat.is_defeated(actor):
                    self.combat.execute_defeat(actor)
                actors.remove(actor)
                report.removed.append(actor.actor_id)
                report.decisions[actor.actor_id] = "removed"
                continue

            if (actor.x, actor.y) != (target.x, target.y):
                continue
            if actor.just_attacked or actor.archetype == "pawn":
                continue

            damage = target.take_damage(actor.attack)
            self.events.emit(CombatEvent(
                "attack", actor_id=actor.actor_id, x=target.x, y=target.y,
                data={"target_id": None, "damage": damage, "collision": True},
            ))
            self.combat.execute_defeat(actor, player_initiated=False)
            actors.remove(actor)
            report.removed.append(actor.actor_id)
            report.decisions[actor.actor_id] = "removed"
