"""
Tactics combat module.

Applies damage, knockback and defeat bookkeeping (points, kill streaks)
for attacks between actors and the player. Presentation layers learn about
outcomes only through the event sink.
"""

from typing import Optional, Sequence, Set, Tuple, Union

from settings import COMBO_MIN_FOR_BONUS
from engine.error_handler import logger
from engine.tactics.events import CombatEvent, EventSink, NullEventSink
from engine.tactics.terrain import TileGrid
from engine.tactics.types import Actor, AttackOutcome, DefeatOutcome, Position, Target


Combatant = Union[Actor, Target]


def knockback_position(dx: int, dy: int, x: int, y: int) -> Position:
    """
    Tile a defender at (x, y) is pushed to when hit along (dx, dy).

    The push follows the dominant axis of the approach; an even approach
    pushes diagonally along both axes.
    """
    step_x = 1 if dx > 0 else (-1 if dx < 0 else 0)
    step_y = 1 if dy > 0 else (-1 if dy < 0 else 0)
    if abs(dx) > abs(dy):
        return (x + step_x, y)
    if abs(dy) > abs(dx):
        return (x, y + step_y)
    return (x + step_x, y + step_y)


def l_path_midpoint(start: Position, end: Position) -> Tuple[float, float]:
    """Corner of the L a horse charge is drawn along."""
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if dx == 0 or dy == 0:
        return ((start[0] + end[0]) / 2, (start[1] + end[1]) / 2)
    if abs(dy) > abs(dx):
        return (start[0], end[1])
    return (end[0], start[1])


def _combatant_id(unit: Combatant) -> Optional[str]:
    return getattr(unit, "actor_id", None)


class CombatResolver:
    """
    Resolves attacks and tracks defeat state across turns.

    Keeps the set of defeated actor ids (so defeat is idempotent), the
    player's kill streak and the running score.
    """

    def __init__(self, events: Optional[EventSink] = None):
        self.events: EventSink = events or NullEventSink()
        self.defeated_ids: Set[str] = set()
        self.consecutive_kills: int = 0
        self.best_combo: int = 0
        self.score: int = 0
        self._last_player_action_was_kill: bool = False

    # ------------------------------------------------------------------
    # Attacks
    # ------------------------------------------------------------------

    def resolve_attack(
        self,
        attacker: Combatant,
        defender: Combatant,
        grid: TileGrid,
        *,
        approach: Optional[Tuple[int, int]] = None,
        knockback: bool = False,
        actors: Sequence[Actor] = (),
        player_initiated: bool = False,
    ) -> AttackOutcome:
        """
        Apply one attack.

        Args:
            attacker: Actor or player dealing damage
            defender: Actor or player receiving it
            grid: Tile grid, used to validate the knockback tile
            approach: Vector the attack travelled along; defaults to attacker -> defender
            knockback: Push a surviving defender one tile along the approach
            actors: Living actors that block the knockback tile
            player_initiated: The player struck this blow (drives the kill streak)

        Returns:
            AttackOutcome; a no-op outcome if the defender was already down
        """
        if defender.health <= 0:
            return AttackOutcome()

        damage = defender.take_damage(attacker.attack)
        attacker.just_attacked = True
        self.events.emit(CombatEvent(
            "attack",
            actor_id=_combatant_id(attacker),
            x=defender.x,
            y=defender.y,
            data={"target_id": _combatant_id(defender), "damage": damage},
        ))

        outcome = AttackOutcome(damage=damage)

        if knockback and defender.health > 0:
            dx, dy = approach if approach is not None else (defender.x - attacker.x, defender.y - attacker.y)
            kx, ky = knockback_position(dx, dy, defender.x, defender.y)
            blocked = any(a.is_alive and a is not defender and (a.x, a.y) == (kx, ky) for a in actors)
            if defender.is_walkable(kx, ky, grid) and not blocked:
                from_pos = (defender.x, defender.y)
                defender.set_position(kx, ky)
                outcome.knockback = (kx, ky)
                self.events.emit(CombatEvent(
                    "knockback",
                    actor_id=_combatant_id(defender),
                    x=kx,
                    y=ky,
                    data={"from": from_pos},
                ))

        if defender.health <= 0:
            if isinstance(defender, Actor):
                result = self.execute_defeat(defender, player_initiated=player_initiated)
                outcome.defeated = result.defeated
                outcome.combo_count = result.consecutive_kills
            else:
                outcome.defeated = True
                self.events.emit(CombatEvent("defeat", actor_id=None, x=defender.x, y=defender.y))
        elif player_initiated:
            self.record_player_action(was_kill=False)

        return outcome

    def resolve_bump(self, actor: Actor, target: Combatant) -> None:
        """Pawn walking into the target: a shove with no damage."""
        self.events.emit(CombatEvent(
            "bump",
            actor_id=actor.actor_id,
            x=target.x,
            y=target.y,
            data={"direction": (target.x - actor.x, target.y - actor.y)},
        ))

    def knight_knockback_tile(
        self, knight: Actor, target: Combatant, grid: TileGrid, actors: Sequence[Actor]
    ) -> Optional[Position]:
        """
        Orthogonal neighbour of the target farthest from the knight.

        Only walkable tiles free of living actors count; the first best
        tile in N, S, W, E order wins ties.
        """
        candidates = [
            (target.x, target.y - 1),
            (target.x, target.y + 1),
            (target.x - 1, target.y),
            (target.x + 1, target.y),
        ]
        occupied = {(a.x, a.y) for a in actors if a.is_alive and a is not knight}
        best = None
        best_score = -1
        for cx, cy in candidates:
            if not target.is_walkable(cx, cy, grid) or (cx, cy) in occupied:
                continue
            score = abs(cx - knight.x) + abs(cy - knight.y)
            if score > best_score:
                best = (cx, cy)
                best_score = score
        return best

    def resolve_knight_bump(
        self, knight: Actor, target: Combatant, grid: TileGrid, actors: Sequence[Actor]
    ) -> Optional[AttackOutcome]:
        """
        Knight lands on the target: damage it, shove it aside, take its tile.

        Returns None, with nothing changed, when the target has nowhere to go.
        """
        knockback_tile = self.knight_knockback_tile(knight, target, grid, actors)
        if knockback_tile is None:
            return None

        landing = (target.x, target.y)
        start = (knight.x, knight.y)
        damage = target.take_damage(knight.attack)
        knight.just_attacked = True
        self.events.emit(CombatEvent(
            "attack",
            actor_id=knight.actor_id,
            x=landing[0],
            y=landing[1],
            data={"target_id": _combatant_id(target), "damage": damage},
        ))

        target.set_position(*knockback_tile)
        self.events.emit(CombatEvent(
            "knockback", actor_id=_combatant_id(target), x=knockback_tile[0], y=knockback_tile[1],
            data={"from": landing},
        ))

        knight.set_position(*landing)
        self.events.emit(CombatEvent(
            "horse_charge",
            actor_id=knight.actor_id,
            x=landing[0],
            y=landing[1],
            data={"start": start, "mid": l_path_midpoint(start, landing), "end": landing},
        ))

        outcome = AttackOutcome(damage=damage, knockback=knockback_tile)
        if target.health <= 0:
            outcome.defeated = True
            self.events.emit(CombatEvent("defeat", actor_id=_combatant_id(target), x=target.x, y=target.y))
        return outcome

    # ------------------------------------------------------------------
    # Defeat flow
    # ------------------------------------------------------------------

    def is_defeated(self, actor: Actor) -> bool:
        return actor.actor_id in self.defeated_ids

    def record_player_action(self, was_kill: bool) -> None:
        """Note the outcome of a player action that did not go through execute_defeat."""
        self._last_player_action_was_kill = was_kill

    def execute_defeat(self, actor: Actor, *, player_initiated: bool = False) -> DefeatOutcome:
        """
        Finish off an actor and award its points.

        Repeated calls for the same actor are no-ops returning
        ``defeated=False``.
        """
        if self.is_defeated(actor):
            return DefeatOutcome(defeated=False, consecutive_kills=0)

        if actor.health > 0:
            actor.take_damage(actor.health)
        self.defeated_ids.add(actor.actor_id)

        points = actor.points
        self.score += points

        if player_initiated:
            if self._last_player_action_was_kill:
                self.consecutive_kills += 1
            else:
                self.consecutive_kills = 1
            self._last_player_action_was_kill = True
        else:
            # Kills the player did not make break the streak
            self.consecutive_kills = 0
            self._last_player_action_was_kill = False
        consecutive = self.consecutive_kills

        bonus = 0
        if consecutive >= COMBO_MIN_FOR_BONUS:
            bonus = consecutive
            self.score += bonus
            self.best_combo = max(self.best_combo, consecutive)
            self.events.emit(CombatEvent(
                "combo", actor_id=actor.actor_id, x=actor.x, y=actor.y,
                data={"combo_count": consecutive, "bonus_points": bonus},
            ))

        self.events.emit(CombatEvent(
            "defeat",
            actor_id=actor.actor_id,
            x=actor.x,
            y=actor.y,
            data={"points": points, "is_combo_kill": consecutive >= COMBO_MIN_FOR_BONUS},
        ))
        logger.debug(f"{actor.actor_id} ({actor.archetype}) defeated for {points} points, streak {consecutive}")

        return DefeatOutcome(
            defeated=True,
            consecutive_kills=consecutive,
            points=points,
            combo_bonus=bonus,
        )
