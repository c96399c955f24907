"""
Tactics type definitions.

Contains dataclasses, protocols and type aliases used throughout the
tactics core.
"""

from dataclasses import dataclass, field
from typing import Literal, List, Dict, Optional, Protocol, Set, Tuple

from settings import ARCHETYPE_POINTS
from engine.tactics.terrain import TileGrid, is_walkable


# Type aliases
Archetype = Literal["pawn", "king", "knight", "bishop", "rook", "queen", "default"]
MoveKind = Literal["move", "rush", "charge", "retreat", "bump", "fallback"]
ActorState = Literal[
    "idle", "deciding", "attacking", "moving", "retreating", "blocked", "committed", "removed"
]
Position = Tuple[int, int]


def tile_key(x: int, y: int) -> str:
    """Occupancy key for a tile."""
    return f"{x},{y}"


@dataclass
class Actor:
    """
    A non-player piece on the grid.

    Position and health are only changed through set_position/take_damage
    so last_x/last_y always describe the tile the actor came from.
    """
    actor_id: str
    archetype: str
    x: int
    y: int
    health: int = 1
    attack: int = 1
    max_health: Optional[int] = None

    last_x: Optional[int] = None
    last_y: Optional[int] = None
    pending_move: Optional["MoveIntent"] = None
    just_attacked: bool = False
    frozen: bool = False
    # Pawn heading: +1 walks south (increasing y), -1 walks north.
    movement_direction: int = 1

    def __post_init__(self):
        if self.max_health is None:
            self.max_health = self.health
        if self.last_x is None:
            self.last_x = self.x
        if self.last_y is None:
            self.last_y = self.y

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def points(self) -> int:
        """Score value awarded when this actor is defeated."""
        return ARCHETYPE_POINTS.get(self.archetype, ARCHETYPE_POINTS["default"])

    def set_position(self, x: int, y: int) -> None:
        self.last_x = self.x
        self.last_y = self.y
        self.x = x
        self.y = y

    def take_damage(self, amount: int) -> int:
        """Apply damage, clamped so health never drops below 0. Returns damage dealt."""
        dealt = max(0, min(amount, self.health))
        self.health -= dealt
        return dealt

    def is_walkable(self, x: int, y: int, grid: TileGrid) -> bool:
        return is_walkable(x, y, grid)


class Target(Protocol):
    """The player as seen by the core: position, health and its own walkability."""

    x: int
    y: int
    health: int
    attack: int
    just_attacked: bool

    def take_damage(self, amount: int) -> int:
        ...

    def set_position(self, x: int, y: int) -> None:
        ...

    def is_walkable(self, x: int, y: int, grid: TileGrid) -> bool:
        ...


@dataclass
class PlayerTarget:
    """Minimal concrete Target for callers without their own player model."""
    x: int
    y: int
    health: int = 3
    attack: int = 1
    # True while the player's own attack this cycle suppresses retaliation.
    just_attacked: bool = False

    @property
    def position(self) -> Position:
        return (self.x, self.y)

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    def take_damage(self, amount: int) -> int:
        dealt = max(0, min(amount, self.health))
        self.health -= dealt
        return dealt

    def set_position(self, x: int, y: int) -> None:
        self.x = x
        self.y = y

    def is_walkable(self, x: int, y: int, grid: TileGrid) -> bool:
        return is_walkable(x, y, grid)


@dataclass
class MoveIntent:
    """
    A decided destination.

    ``attack_on_arrival`` marks charges that end inside the archetype's
    attack geometry; the committer resolves that attack after moving.
    """
    x: int
    y: int
    kind: MoveKind = "move"
    attack_on_arrival: bool = False

    @property
    def position(self) -> Position:
        return (self.x, self.y)


@dataclass
class TurnOccupancy:
    """
    Turn-scratch ledger of who holds which tile.

    initial: tile key -> actor id captured at turn start
    claimed: tile keys committed to during this turn (player tile included)
    vacated: start tiles whose owner has already moved away
    """
    initial: Dict[str, str] = field(default_factory=dict)
    claimed: Set[str] = field(default_factory=set)
    vacated: Set[str] = field(default_factory=set)

    @staticmethod
    def key(x: int, y: int) -> str:
        return tile_key(x, y)

    def claim(self, x: int, y: int) -> None:
        self.claimed.add(self.key(x, y))

    def is_claimed(self, x: int, y: int) -> bool:
        return self.key(x, y) in self.claimed

    def start_owner(self, x: int, y: int) -> Optional[str]:
        """Actor id that held (x, y) at turn start, unless it has since left."""
        key = tile_key(x, y)
        if key in self.vacated:
            return None
        return self.initial.get(key)


@dataclass
class AttackOutcome:
    """Result of one attack resolution."""
    defeated: bool = False
    combo_count: int = 0
    damage: int = 0
    knockback: Optional[Position] = None


@dataclass
class DefeatOutcome:
    """Result of a defeat: score bookkeeping for the caller."""
    defeated: bool = False
    consecutive_kills: int = 0
    points: int = 0
    combo_bonus: int = 0


@dataclass
class TurnReport:
    """Summary of one orchestrated enemy turn."""
    decisions: Dict[str, ActorState] = field(default_factory=dict)
    removed: List[str] = field(default_factory=list)
    player_damage_taken: int = 0
