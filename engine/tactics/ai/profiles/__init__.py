"""
Archetype profile system.

Maps each archetype id to the rules that drive its decisions: direction
set, charge sightline, rush ability, strike geometry and any overrides of
the shared decision order.
"""

from typing import Optional, Protocol, Sequence, Tuple, TYPE_CHECKING

if TYPE_CHECKING:
    from ..core import MoveCalculator

from engine.tactics.charge import resolve_charge_tile
from engine.tactics.line_of_sight import LosKind
from engine.tactics.pathfinding import Direction, find_any_valid_adjacent_move, find_path, movement_directions
from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, MoveIntent, Position, Target, TurnOccupancy


class ArchetypeProfile(Protocol):
    """Protocol for archetype decision handlers."""

    name: str
    directions: Tuple[Direction, ...]
    los_kind: Optional[LosKind]
    rushes: bool

    def can_strike(self, actor: Actor, target_x: int, target_y: int) -> bool:
        """Whether the actor can hit (target_x, target_y) without moving."""
        ...

    def threatens(self, actor: Actor, x: int, y: int, grid: TileGrid, actors: Sequence[Actor]) -> bool:
        """Whether the actor could hit (x, y) this turn, moving if needed."""
        ...

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
        """Decide this actor's move; attacks are resolved through calc."""
        ...


def _manhattan(x1: int, y1: int, x2: int, y2: int) -> int:
    return abs(x1 - x2) + abs(y1 - y2)


class BaseArchetypeProfile:
    """
    Shared decision order: strike, charge, path (with rush and tactics),
    vulnerability check, fallback step.

    Subclasses set los_kind/rushes and override strikes_from or the hooks
    they need.
    """

    los_kind: Optional[LosKind] = None
    rushes: bool = False

    def __init__(self, name: str):
        self.name = name
        self.directions = movement_directions(name)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def strikes_from(self, x: int, y: int, target_x: int, target_y: int) -> bool:
        """Default strike geometry: any of the eight neighbouring tiles."""
        return max(abs(x - target_x), abs(y - target_y)) == 1

    def can_strike(self, actor: Actor, target_x: int, target_y: int) -> bool:
        return self.strikes_from(actor.x, actor.y, target_x, target_y)

    def charge_tile(self, actor: Actor, target_x: int, target_y: int, grid: TileGrid, actors: Sequence[Actor]) -> Optional[Position]:
        if self.los_kind is None:
            return None
        return resolve_charge_tile(actor, target_x, target_y, grid, actors, self.los_kind)

    def threatens(self, actor: Actor, x: int, y: int, grid: TileGrid, actors: Sequence[Actor]) -> bool:
        if self.can_strike(actor, x, y):
            return True
        tile = self.charge_tile(actor, x, y, grid, actors)
        return tile is not None and self.strikes_from(tile[0], tile[1], x, y)

    # ------------------------------------------------------------------
    # Decision
    # ------------------------------------------------------------------

    @staticmethod
    def tile_taken(
        x: int, y: int, actor: Actor, actors: Sequence[Actor], occupancy: Optional[TurnOccupancy]
    ) -> bool:
        """Held by another living actor, or already claimed by an earlier mover this turn."""
        if any(a is not actor and a.is_alive and a.x == x and a.y == y for a in actors):
            return True
        return occupancy is not None and occupancy.is_claimed(x, y)

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

        tile = self.charge_tile(actor, tx, ty, grid, actors)
        if tile is not None and not (occupancy is not None and occupancy.is_claimed(*tile)):
            return MoveIntent(
                tile[0], tile[1], kind="charge",
                attack_on_arrival=self.strikes_from(tile[0], tile[1], tx, ty),
            )

        return self.plan_path_move(actor, target, grid, actors, calc, simulate, occupancy)

    def intercept_step(
        self,
        actor: Actor,
        target: Target,
        step: Position,
        calc: "MoveCalculator",
    ) -> Optional[MoveIntent]:
        """Hook for archetypes that act on the first path step before it is refined."""
        return None

    def rush(
        self,
        actor: Actor,
        path: Sequence[Position],
        target: Target,
        grid: TileGrid,
        actors: Sequence[Actor],
        occupancy: Optional[TurnOccupancy],
    ) -> Position:
        """
        Follow the path past its first node while it stays on one straight line.

        Stops before the target, and at the first node that is off the
        line, unwalkable, or taken.
        """
        dx = path[1][0] - actor.x
        dy = path[1][1] - actor.y
        if self.tile_taken(path[1][0], path[1][1], actor, actors, occupancy):
            return path[1]

        furthest = 1
        for i in range(2, len(path)):
            px, py = path[i]
            if (px, py) != (actor.x + dx * i, actor.y + dy * i):
                break
            if (px, py) == (target.x, target.y):
                break
            if not actor.is_walkable(px, py, grid):
                break
            if self.tile_taken(px, py, actor, actors, occupancy):
                break
            furthest = i
        return path[furthest]

    def plan_path_move(
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
        goal = calc.path_goal(actor, target, actors)
        path = find_path(actor.x, actor.y, goal[0], goal[1], grid, self.directions, actor.is_walkable)

        if not path or len(path) < 2:
            fallback = find_any_valid_adjacent_move(actor, grid, actors, avoid={(tx, ty)})
            if fallback is None:
                return None
            if occupancy is not None and occupancy.is_claimed(*fallback):
                return None
            return MoveIntent(fallback[0], fallback[1], kind="fallback")

        step = path[1]
        intercepted = self.intercept_step(actor, target, step, calc)
        if intercepted is not None:
            return intercepted

        # Never walk onto the target or the leader being followed
        if step == (tx, ty) or step == goal:
            return None

        kind = "move"
        if self.rushes:
            rushed = self.rush(actor, path, target, grid, actors, occupancy)
            if rushed != step:
                step = rushed
                kind = "rush"

        if not calc.config.tactics_enabled:
            return MoveIntent(step[0], step[1], kind=kind)

        adjusted = calc.coordinator.apply_tactical_adjustments(actor, step, tx, ty, grid, actors)
        if adjusted != step:
            step = adjusted
            kind = "move"

        if _manhattan(step[0], step[1], tx, ty) <= calc.coordinator.vulnerability_threshold:
            retreats = calc.coordinator.find_defensive_moves(actor, tx, ty, grid, actors)
            if retreats:
                return MoveIntent(retreats[0][0], retreats[0][1], kind="retreat")

        return MoveIntent(step[0], step[1], kind=kind)


# Profile registry
_PROFILE_HANDLERS: dict[str, ArchetypeProfile] = {}


def register_profile(archetype: str, handler: ArchetypeProfile) -> None:
    """Register a profile handler for an archetype id."""
    _PROFILE_HANDLERS[archetype] = handler


def get_archetype_profile(archetype: str) -> ArchetypeProfile:
    """Get the handler for an archetype, falling back to the default rules."""
    return _PROFILE_HANDLERS.get(archetype, _PROFILE_HANDLERS.get("default", _default_handler))


_default_handler = BaseArchetypeProfile("default")

# Import profile implementations
from .pawn import PawnProfile
from .king import KingProfile
from .knight import KnightProfile
from .bishop import BishopProfile
from .rook import RookProfile
from .queen import QueenProfile

# Register all profiles
register_profile("pawn", PawnProfile())
register_profile("king", KingProfile())
register_profile("knight", KnightProfile())
register_profile("bishop", BishopProfile())
register_profile("rook", RookProfile())
register_profile("queen", QueenProfile())

# Default fallback
register_profile("default", _default_handler)
