"""
Unit tests for TurnCombatOrchestrator.
"""

import pytest

from settings import TILE_PITFALL, TILE_PORT, TILE_WALL
from engine.error_handler import ConfigError, TurnError
from engine.tactics.turns import TurnCombatOrchestrator
from engine.tactics.types import MoveIntent, TurnOccupancy, tile_key


class ScriptedCalculator:
    """Stand-in calculator returning fixed intents per actor id."""

    def __init__(self, intents=None, error=None):
        self.intents = intents or {}
        self.error = error
        self.calls = []

    def calculate_move(self, actor, target, grid, all_actors, simulate=False, occupancy=None):
        self.calls.append(actor.actor_id)
        if self.error is not None:
            raise self.error
        return self.intents.get(actor.actor_id)


@pytest.fixture
def scripted(combat, event_bus, tactics_config):
    def _make(intents=None, error=None):
        calc = ScriptedCalculator(intents, error)
        orch = TurnCombatOrchestrator(calculator=calc, combat=combat, events=event_bus, config=tactics_config)
        return orch, calc

    return _make


class TestOccupancy:
    """Tests for begin_turn and is_valid_move."""

    def test_begin_turn_snapshots_living_actors(self, orchestrator, make_actor, make_player):
        rook = make_actor("rook", 0, 0)
        corpse = make_actor("pawn", 3, 3, health=0)
        player = make_player(5, 5)
        occupancy = orchestrator.begin_turn([rook, corpse], player)

        assert occupancy.initial == {"0,0": rook.actor_id}
        assert occupancy.is_claimed(5, 5)

    def test_tile_keys(self):
        occupancy = TurnOccupancy()
        occupancy.claim(3, 7)
        assert TurnOccupancy.key(3, 7) == "3,7"
        assert occupancy.claimed == {"3,7"}
        assert not occupancy.is_claimed(7, 3)

    def test_staying_put_is_valid(self, orchestrator, open_grid, make_actor):
        rook = make_actor("rook", 2, 2)
        occupancy = TurnOccupancy()
        occupancy.claim(2, 2)
        assert orchestrator.is_valid_move(rook, 2, 2, [rook], occupancy, open_grid) is True

    def test_claimed_tile_is_invalid(self, orchestrator, open_grid, make_actor):
        rook = make_actor("rook", 2, 2)
        occupancy = TurnOccupancy()
        occupancy.claim(2, 3)
        assert orchestrator.is_valid_move(rook, 2, 3, [rook], occupancy, open_grid) is False

    def test_occupied_and_wall_tiles_are_invalid(self, orchestrator, open_grid, make_actor):
        rook = make_actor("rook", 2, 2)
        other = make_actor("pawn", 2, 3)
        open_grid.set_tile(1, 2, TILE_WALL)
        occupancy = TurnOccupancy()
        assert orchestrator.is_valid_move(rook, 2, 3, [rook, other], occupancy, open_grid) is False
        assert orchestrator.is_valid_move(rook, 1, 2, [rook, other], occupancy, open_grid) is False

    def test_start_tile_frees_up_once_vacated(self, orchestrator, open_grid, make_actor):
        """Test that a tile another actor started on opens once that actor leaves."""
        rook = make_actor("rook", 2, 2)
        occupancy = TurnOccupancy(initial={tile_key(2, 3): "pawn-9"})
        assert orchestrator.is_valid_move(rook, 2, 3, [rook], occupancy, open_grid) is False
        occupancy.vacated.add(tile_key(2, 3))
        assert orchestrator.is_valid_move(rook, 2, 3, [rook], occupancy, open_grid) is True


class TestCommitMove:
    """Tests for commit_move side effects."""

    def test_plain_move(self, orchestrator, event_bus, open_grid, make_actor, make_player):
        king = make_actor("king", 2, 2)
        player = make_player(7, 7)
        occupancy = orchestrator.begin_turn([king], player)
        state = orchestrator.commit_move(king, MoveIntent(3, 3), occupancy, open_grid, [king], player)

        assert state == "moving"
        assert king.position == (3, 3)
        assert (king.last_x, king.last_y) == (2, 2)
        assert occupancy.is_claimed(3, 3)
        assert occupancy.start_owner(2, 2) is None
        assert event_bus.kinds() == ["move"]

    def test_retreat_state(self, orchestrator, open_grid, make_actor, make_player):
        king = make_actor("king", 2, 2)
        player = make_player(4, 4)
        occupancy = orchestrator.begin_turn([king], player)
        state = orchestrator.commit_move(king, MoveIntent(1, 1, kind="retreat"), occupancy, open_grid, [king], player)
        assert state == "retreating"

    def test_charge_attacks_on_arrival(self, orchestrator, event_bus, open_grid, make_actor, make_player):
        rook = make_actor("rook", 0, 0)
        player = make_player(0, 5)
        occupancy = orchestrator.begin_turn([rook], player)
        intent = MoveIntent(0, 4, kind="charge", attack_on_arrival=True)
        state = orchestrator.commit_move(rook, intent, occupancy, open_grid, [rook], player)

        assert state == "attacking"
        assert rook.position == (0, 4)
        assert player.health == 4
        assert player.position == (0, 6)
        assert occupancy.is_claimed(0, 6)
        assert event_bus.kinds() == ["charge", "attack", "knockback"]
        assert event_bus.history[0].data["trail"] == [(0, 1), (0, 2), (0, 3)]

    def test_pitfall_removes_actor(self, orchestrator, event_bus, open_grid, make_actor, make_player):
        rook = make_actor("rook", 0, 0)
        player = make_player(0, 5)
        open_grid.set_tile(0, 4, TILE_PITFALL)
        actors = [rook]
        occupancy = orchestrator.begin_turn(actors, player)
        intent = MoveIntent(0, 4, kind="charge", attack_on_arrival=True)
        state = orchestrator.commit_move(rook, intent, occupancy, open_grid, actors, player)

        assert state == "removed"
        assert actors == []
        assert open_grid.get_tile(0, 4) == TILE_PORT
        assert player.health == 5
        assert event_bus.kinds() == ["charge", "pitfall"]


class TestRunTurn:
    """Full enemy turns with the real calculator."""

    def test_rook_charge_turn(self, orchestrator, event_bus, open_grid, make_actor, make_player):
        rook = make_actor("rook", 0, 0)
        player = make_player(0, 5)
        report = orchestrator.run_turn([rook], player, open_grid)

        assert report.decisions == {rook.actor_id: "attacking"}
        assert report.player_damage_taken == 1
        assert rook.position == (0, 4)
        assert player.position == (0, 6)
        assert rook.just_attacked is False

    def test_adjacent_strike_turn(self, orchestrator, open_grid, make_actor, make_player):
        king = make_actor("king", 4, 4)
        player = make_player(5, 5)
        report = orchestrator.run_turn([king], player, open_grid)

        assert report.decisions[king.actor_id] == "attacking"
        assert report.player_damage_taken == 1
        assert king.position == (4, 4)

    def test_knight_bump_turn(self, orchestrator, event_bus, open_grid, make_actor, make_player):
        knight = make_actor("knight", 3, 3)
        player = make_player(4, 5)
        report = orchestrator.run_turn([knight], player, open_grid)

        assert report.decisions[knight.actor_id] == "attacking"
        assert knight.position == (4, 5)
        assert player.position == (4, 6)
        assert player.health == 4
        assert "horse_charge" in event_bus.kinds()

    def test_knight_bump_without_room_is_blocked(self, orchestrator, event_bus, open_grid, make_actor, make_player):
        knight = make_actor("knight", 3, 3)
        player = make_player(4, 5)
        for x, y in ((4, 4), (4, 6), (3, 5), (5, 5)):
            open_grid.set_tile(x, y, TILE_WALL)
        report = orchestrator.run_turn([knight], player, open_grid)

        assert report.decisions[knight.actor_id] == "blocked"
        assert knight.position == (3, 3)
        assert player.health == 5
        assert event_bus.kinds() == ["blocked"]

    def test_player_attack_suppresses_and_resets(self, orchestrator, open_grid, make_actor, make_player):
        """Test that a player who just attacked is spared this turn and the flag clears."""
        king = make_actor("king", 4, 4)
        player = make_player(5, 5, just_attacked=True)
        report = orchestrator.run_turn([king], player, open_grid)

        assert report.decisions[king.actor_id] == "idle"
        assert report.player_damage_taken == 0
        assert player.just_attacked is False

    def test_frozen_actor_idles(self, orchestrator, open_grid, make_actor, make_player):
        king = make_actor("king", 4, 4, frozen=True)
        player = make_player(5, 5)
        report = orchestrator.run_turn([king], player, open_grid)

        assert report.decisions[king.actor_id] == "idle"
        assert player.health == 5

    def test_dead_actors_are_removed(self, orchestrator, combat, open_grid, make_actor, make_player):
        corpse = make_actor("bishop", 1, 1, health=0)
        rook = make_actor("rook", 9, 0)
        actors = [corpse, rook]
        report = orchestrator.run_turn(actors, make_player(5, 5), open_grid)

        assert corpse not in actors
        assert rook in actors
        assert report.removed == [corpse.actor_id]
        assert report.decisions[corpse.actor_id] == "removed"
        assert combat.is_defeated(corpse)

    def test_pitfall_turn(self, orchestrator, open_grid, make_actor, make_player):
        rook = make_actor("rook", 0, 0)
        player = make_player(0, 5)
        open_grid.set_tile(0, 4, TILE_PITFALL)
        actors = [rook]
        report = orchestrator.run_turn(actors, player, open_grid)

        assert actors == []
        assert report.removed == [rook.actor_id]
        assert report.decisions[rook.actor_id] == "removed"
        assert open_grid.get_tile(0, 4) == TILE_PORT


class TestCollisionPass:
    """Anything left on the player's tile after all decisions."""

    def test_non_pawn_on_player_tile_hits_and_dies(self, orchestrator, combat, event_bus, open_grid, make_actor, make_player):
        king = make_actor("king", 5, 5, frozen=True)
        player = make_player(5, 5)
        actors = [king]
        report = orchestrator.run_turn(actors, player, open_grid)

        assert actors == []
        assert player.health == 4
        assert report.player_damage_taken == 1
        assert report.decisions[king.actor_id] == "removed"
        assert combat.is_defeated(king)
        attack = [e for e in event_bus.history if e.kind == "attack"][0]
        assert attack.data["collision"] is True

    def test_pawns_are_exempt(self, orchestrator, open_grid, make_actor, make_player):
        pawn = make_actor("pawn", 5, 5, frozen=True)
        player = make_player(5, 5)
        actors = [pawn]
        orchestrator.run_turn(actors, player, open_grid)

        assert actors == [pawn]
        assert player.health == 5


class TestArbitration:
    """Order of resolution decides contested tiles."""

    def test_first_claim_wins(self, scripted, event_bus, open_grid, make_actor, make_player):
        first = make_actor("king", 2, 3)
        second = make_actor("king", 4, 3)
        orch, _ = scripted({
            first.actor_id: MoveIntent(3, 3),
            second.actor_id: MoveIntent(3, 3),
        })
        report = orch.run_turn([first, second], make_player(9, 9), open_grid)

        assert report.decisions == {first.actor_id: "moving", second.actor_id: "blocked"}
        assert first.position == (3, 3)
        assert second.position == (4, 3)
        assert event_bus.kinds() == ["move", "blocked"]

    def test_blocked_event_keeps_its_kind(self, scripted, event_bus, open_grid, make_actor, make_player):
        """Test that a blocked retreat is reported as blocked, with the intent alongside."""
        first = make_actor("king", 2, 3)
        second = make_actor("king", 4, 3)
        orch, _ = scripted({
            first.actor_id: MoveIntent(3, 3),
            second.actor_id: MoveIntent(3, 3, kind="retreat"),
        })
        orch.run_turn([first, second], make_player(9, 9), open_grid)

        moved, blocked = event_bus.history
        assert moved.to_dict()["intent"] == "move"
        row = blocked.to_dict()
        assert row["kind"] == "blocked"
        assert row["intent"] == "retreat"
        assert row["actor_id"] == second.actor_id

    def test_cannot_enter_tile_of_actor_yet_to_move(self, scripted, open_grid, make_actor, make_player):
        mover = make_actor("king", 2, 2)
        sitter = make_actor("king", 3, 3)
        orch, _ = scripted({mover.actor_id: MoveIntent(3, 3)})
        report = orch.run_turn([mover, sitter], make_player(9, 9), open_grid)

        assert report.decisions[mover.actor_id] == "blocked"
        assert mover.position == (2, 2)

    def test_vacated_tile_can_be_taken(self, scripted, open_grid, make_actor, make_player):
        leader = make_actor("king", 3, 3)
        follower = make_actor("king", 2, 3)
        orch, _ = scripted({
            leader.actor_id: MoveIntent(4, 3),
            follower.actor_id: MoveIntent(3, 3),
        })
        orch.run_turn([leader, follower], make_player(9, 9), open_grid)

        assert leader.position == (4, 3)
        assert follower.position == (3, 3)

    def test_player_tile_is_never_entered(self, scripted, open_grid, make_actor, make_player):
        king = make_actor("king", 4, 4)
        player = make_player(5, 5)
        orch, _ = scripted({king.actor_id: MoveIntent(5, 5)})
        report = orch.run_turn([king], player, open_grid)

        assert report.decisions[king.actor_id] == "blocked"
        assert king.position == (4, 4)

    def test_skips_dead_and_frozen_before_deciding(self, scripted, open_grid, make_actor, make_player):
        corpse = make_actor("pawn", 0, 0, health=0)
        frozen = make_actor("king", 1, 1, frozen=True)
        live = make_actor("king", 2, 2)
        orch, calc = scripted()
        orch.run_turn([corpse, frozen, live], make_player(9, 9), open_grid)

        assert calc.calls == [live.actor_id]


class TestErrors:
    """Unexpected decision failures surface as TurnError."""

    def test_unexpected_error_is_wrapped(self, scripted, open_grid, make_actor, make_player, caplog):
        orch, _ = scripted(error=KeyError("boom"))
        with pytest.raises(TurnError):
            orch.run_turn([make_actor("king", 0, 0)], make_player(5, 5), open_grid)
        assert "boom" in caplog.text

    def test_tactics_errors_pass_through(self, scripted, open_grid, make_actor, make_player):
        orch, _ = scripted(error=ConfigError("bad threshold"))
        with pytest.raises(ConfigError):
            orch.run_turn([make_actor("king", 0, 0)], make_player(5, 5), open_grid)


class TestMultiTurn:
    """Several turns of a mixed group keep the board consistent."""

    def test_positions_stay_unique(self, orchestrator, open_grid, make_actor, make_player):
        open_grid.set_tile(3, 6, TILE_WALL)
        open_grid.set_tile(6, 3, TILE_WALL)
        actors = [
            make_actor("rook", 0, 0),
            make_actor("bishop", 9, 0),
            make_actor("knight", 0, 9),
            make_actor("king", 9, 9),
            make_actor("queen", 2, 1),
            make_actor("pawn", 7, 2),
        ]
        player = make_player(5, 5, health=50)

        for _ in range(6):
            orchestrator.run_turn(actors, player, open_grid)
            positions = [a.position for a in actors]
            assert len(positions) == len(set(positions))
            for actor in actors:
                assert actor.is_alive
                assert open_grid.get_tile(actor.x, actor.y) != TILE_WALL
                if actor.archetype != "pawn":
                    assert actor.position != player.position
                assert actor.just_attacked is False
            assert player.just_attacked is False
