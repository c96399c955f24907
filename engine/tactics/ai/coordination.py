"""
Coordination helpers for cooperative actor movement.

Lets actors spread around the player instead of queueing up:
- clustering (average distance to allies)
- direction diversity (how many allies attack from the same side)
- anti-stacking (not lining up behind an ally)
- defensive retreats when a move would leave the actor exposed

Everything here is a pure function of the snapshot passed in.
"""

from typing import List, Optional, Sequence, Tuple

from settings import CLUSTER_SENTINEL, VULNERABILITY_THRESHOLD, CLUSTER_GAIN_THRESHOLD, MAX_TACTICAL_DETOUR
from engine.tactics.pathfinding import movement_directions
from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, Position


def _manhattan(x1: int, y1: int, x2: int, y2: int) -> int:
    return abs(x1 - x2) + abs(y1 - y2)


def octant(dx: int, dy: int) -> Optional[str]:
    """Bucket an offset from the target into one of eight directions (None on the target itself)."""
    if dx > 0 and dy > 0:
        return "NE"
    if dx > 0 and dy < 0:
        return "SE"
    if dx < 0 and dy > 0:
        return "NW"
    if dx < 0 and dy < 0:
        return "SW"
    if dx > 0:
        return "E"
    if dx < 0:
        return "W"
    if dy > 0:
        return "N"
    if dy < 0:
        return "S"
    return None


class TacticalCoordinator:
    """
    Scoring and selection over snapshots of all actors.

    Holds only thresholds; no per-turn state.
    """

    def __init__(
        self,
        vulnerability_threshold: int = VULNERABILITY_THRESHOLD,
        cluster_gain_threshold: float = CLUSTER_GAIN_THRESHOLD,
        max_detour: int = MAX_TACTICAL_DETOUR,
    ):
        self.vulnerability_threshold = vulnerability_threshold
        self.cluster_gain_threshold = cluster_gain_threshold
        self.max_detour = max_detour

    @staticmethod
    def _others(allies: Sequence[Actor], actor: Optional[Actor]) -> List[Actor]:
        return [a for a in allies if a is not actor and a.is_alive]

    def cluster_distance(self, x: int, y: int, allies: Sequence[Actor], actor: Optional[Actor] = None) -> float:
        """
        Average Manhattan distance from (x, y) to allies.

        Allies standing exactly on (x, y) are ignored. Returns
        CLUSTER_SENTINEL when nobody is left to measure against.
        """
        total = 0
        count = 0
        for ally in self._others(allies, actor):
            dist = _manhattan(x, y, ally.x, ally.y)
            if dist > 0:
                total += dist
                count += 1
        return total / count if count > 0 else CLUSTER_SENTINEL

    def direction_diversity(
        self,
        x: int,
        y: int,
        target_x: int,
        target_y: int,
        allies: Sequence[Actor],
        actor: Optional[Actor] = None,
    ) -> float:
        """
        Share of allies attacking from a different octant than (x, y).

        Returns:
            (total - same_octant) / total, or 1.0 with no allies
        """
        mine = octant(x - target_x, y - target_y)
        others = self._others(allies, actor)
        if not others:
            return 1.0
        same = sum(1 for a in others if octant(a.x - target_x, a.y - target_y) == mine)
        return (len(others) - same) / len(others)

    def is_stacked_behind(
        self,
        x: int,
        y: int,
        target_x: int,
        target_y: int,
        allies: Sequence[Actor],
        actor: Optional[Actor] = None,
    ) -> bool:
        """True if an ally sits between (x, y) and the target on a shared row, column or diagonal."""
        tx = x - target_x
        ty = y - target_y
        for ally in self._others(allies, actor):
            ex = ally.x - target_x
            ey = ally.y - target_y

            vertical = tx == 0 and ex == 0 and (
                (ty > 0 and 0 < ey < ty) or (ty < 0 and ty < ey < 0)
            )
            horizontal = ty == 0 and ey == 0 and (
                (tx > 0 and 0 < ex < tx) or (tx < 0 and tx < ex < 0)
            )
            if vertical or horizontal:
                return True

            both_diagonal = abs(tx) == abs(ty) and abs(ex) == abs(ey)
            ally_closer = abs(tx) + abs(ty) > abs(ex) + abs(ey)
            same_quadrant = tx * ex > 0 and ty * ey > 0
            if both_diagonal and ally_closer and same_quadrant:
                return True
        return False

    def find_defensive_moves(
        self,
        actor: Actor,
        target_x: int,
        target_y: int,
        grid: TileGrid,
        allies: Sequence[Actor],
    ) -> List[Position]:
        """
        Single steps that take the actor farther from the target.

        A step qualifies when it is walkable, unoccupied, strictly farther
        than the current tile, and does not leave the actor exposed if the
        current tile already is. Best improvement first; ties keep
        direction order.
        """
        current = _manhattan(actor.x, actor.y, target_x, target_y)
        current_vulnerable = current <= self.vulnerability_threshold
        occupied = {(a.x, a.y) for a in self._others(allies, actor)}

        scored: List[Tuple[int, Position]] = []
        for dx, dy in movement_directions(actor.archetype):
            nx, ny = actor.x + dx, actor.y + dy
            if not grid.in_bounds(nx, ny):
                continue
            if not actor.is_walkable(nx, ny, grid):
                continue
            if (nx, ny) in occupied:
                continue
            new_dist = _manhattan(nx, ny, target_x, target_y)
            new_vulnerable = new_dist <= self.vulnerability_threshold
            if new_dist > current and (not new_vulnerable or not current_vulnerable):
                scored.append((new_dist - current, (nx, ny)))

        scored.sort(key=lambda item: item[0], reverse=True)
        return [pos for _, pos in scored]

    def apply_tactical_adjustments(
        self,
        actor: Actor,
        candidate: Position,
        target_x: int,
        target_y: int,
        grid: TileGrid,
        allies: Sequence[Actor],
    ) -> Position:
        """
        Swap the candidate for the first single step that spreads the group out.

        An alternative is taken when clustering drops by more than the gain
        threshold or diversity rises at all, it costs at most max_detour
        extra distance, and it does not line up behind an ally.
        """
        cx, cy = candidate
        current_dist = _manhattan(cx, cy, target_x, target_y)
        current_cluster = self.cluster_distance(cx, cy, allies, actor)
        current_diversity = self.direction_diversity(cx, cy, target_x, target_y, allies, actor)
        occupied = {(a.x, a.y) for a in self._others(allies, actor)}

        for dx, dy in movement_directions(actor.archetype):
            ax, ay = actor.x + dx, actor.y + dy
            if not grid.in_bounds(ax, ay):
                continue
            if not actor.is_walkable(ax, ay, grid):
                continue
            if (ax, ay) in occupied or (ax, ay) == (target_x, target_y):
                continue

            alt_dist = _manhattan(ax, ay, target_x, target_y)
            cluster_gain = current_cluster - self.cluster_distance(ax, ay, allies, actor)
            diversity_gain = self.direction_diversity(ax, ay, target_x, target_y, allies, actor) - current_diversity

            if (
                (cluster_gain > self.cluster_gain_threshold or diversity_gain > 0)
                and alt_dist <= current_dist + self.max_detour
                and not self.is_stacked_behind(ax, ay, target_x, target_y, allies, actor)
            ):
                return (ax, ay)
        return candidate
