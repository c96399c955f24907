"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test files.
"""

import pytest

from engine.config import TacticsConfig
from engine.tactics.ai.core import MoveCalculator
from engine.tactics.combat import CombatResolver
from engine.tactics.events import CombatEventBus
from engine.tactics.terrain import TileGrid
from engine.tactics.turns import TurnCombatOrchestrator
from engine.tactics.types import Actor, PlayerTarget


@pytest.fixture
def open_grid() -> TileGrid:
    """
    Create an empty 10x10 floor grid.
    """
    return TileGrid(10, 10)


@pytest.fixture
def make_actor():
    """
    Factory for actors: make_actor("rook", 0, 0, health=2).
    Ids are generated in creation order.
    """
    counter = {"n": 0}

    def _make(archetype: str, x: int, y: int, **kwargs) -> Actor:
        counter["n"] += 1
        kwargs.setdefault("actor_id", f"{archetype}-{counter['n']}")
        kwargs.setdefault("health", 2)
        kwargs.setdefault("attack", 1)
        return Actor(archetype=archetype, x=x, y=y, **kwargs)

    return _make


@pytest.fixture
def make_player():
    """
    Factory for the player target.
    """
    def _make(x: int, y: int, health: int = 5, **kwargs) -> PlayerTarget:
        return PlayerTarget(x=x, y=y, health=health, **kwargs)

    return _make


@pytest.fixture
def tactics_config() -> TacticsConfig:
    """
    Fresh config with defaults, independent of the global instance.
    """
    return TacticsConfig()


@pytest.fixture
def event_bus() -> CombatEventBus:
    return CombatEventBus()


@pytest.fixture
def combat(event_bus) -> CombatResolver:
    return CombatResolver(event_bus)


@pytest.fixture
def calculator(combat, event_bus, tactics_config) -> MoveCalculator:
    return MoveCalculator(combat=combat, events=event_bus, config=tactics_config)


@pytest.fixture
def no_tactics_calculator(combat, event_bus) -> MoveCalculator:
    """
    Calculator with tactical adjustments and retreats switched off.
    """
    config = TacticsConfig()
    config.tactics_enabled = False
    return MoveCalculator(combat=combat, events=event_bus, config=config)


@pytest.fixture
def orchestrator(calculator, combat, event_bus, tactics_config) -> TurnCombatOrchestrator:
    return TurnCombatOrchestrator(
        calculator=calculator, combat=combat, events=event_bus, config=tactics_config
    )
