"""
Shared pytest fixtures for the gem battle test suite.

This module provides reusable fixtures and helpers for:
- RNG with known seeds and scripted streams
- Run states with a hand-picked bag
- Enemies with fixed stats
- Engines wired to a recording progression listener
"""

import os
import sys

import pytest

# Ensure project root is in path
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from packages.gembattle.config import DEFAULT_CONFIG
from packages.gembattle.content.enemies import DayPhase, parse_action
from packages.gembattle.content.gems import GemDefinition, get_gem
from packages.gembattle.engine import BattleEngine
from packages.gembattle.state.combatants import Enemy, create_player
from packages.gembattle.state.inventory import Inventory
from packages.gembattle.state.rng import GameRNG, Random, ScriptedRandom
from packages.gembattle.state.run import MetaProgress, RunState


# =============================================================================
# Helpers
# =============================================================================


def make_run(player_class="knight", gems=(), rng=None, health=None, max_health=None,
             stamina=None, zenny=0, phase=DayPhase.DAWN, day=1, hand_size=3):
    """
    Run state with an exact bag.

    `gems` are keys or definitions, added in order. The bag draws from its
    end, so the last gem listed is drawn first.
    """
    rng = rng or GameRNG(42)
    player = create_player(player_class, max_health=max_health, max_stamina=stamina, zenny=zenny)
    if health is not None:
        player.health = health
    inventory = Inventory(shuffle_rng=rng.shuffle_rng, hand_size=hand_size)
    for gem in gems:
        inventory.add_gem(gem if isinstance(gem, GemDefinition) else get_gem(gem))
    return RunState(seed=rng.seed, player=player, inventory=inventory, rng=rng,
                    meta=MetaProgress(), day=day, phase=phase)


def make_enemy(health=20, attack=8, actions=("attack",), reward=3, boss=False, name="Dummy"):
    """Enemy with fixed stats."""
    return Enemy(
        health=health,
        max_health=health,
        name=name,
        template_id=name.lower(),
        attack=attack,
        actions=tuple(parse_action(a) for a in actions),
        reward=reward,
        phase_threshold=0.5 if boss else None,
    )


def make_engine(run, config=DEFAULT_CONFIG, progression=None):
    return BattleEngine(run, config=config, progression=progression)


def hand_id(run, key):
    """Instance id of the first Hand gem with `key`."""
    for gem in run.inventory.hand:
        if gem.key == key:
            return gem.instance_id
    raise AssertionError(f"{key} not in hand: {[g.key for g in run.inventory.hand]}")


class RecordingProgression:
    """Progression listener that only records what it was told."""

    def __init__(self):
        self.calls = []

    def on_battle_end(self, outcome, day, phase, reward=0):
        self.calls.append((outcome, day, phase, reward))


# =============================================================================
# RNG Fixtures
# =============================================================================


@pytest.fixture
def rng_seed_42():
    """RNG initialized with seed 42 for deterministic tests."""
    return Random(42)


@pytest.fixture
def game_rng_42():
    return GameRNG(42)


@pytest.fixture
def scripted():
    """Empty scripted stream; raises if anything draws from it unexpectedly."""
    return ScriptedRandom([])


# =============================================================================
# Run / Engine Fixtures
# =============================================================================


@pytest.fixture
def recorder():
    return RecordingProgression()


@pytest.fixture
def knight_run():
    """Knight with three red attacks in the bag."""
    return make_run("knight", ["red-attack", "red-attack", "red-attack"])


@pytest.fixture
def grunt():
    """20 hp, 8 attack, attack only."""
    return make_enemy(health=20, attack=8)


@pytest.fixture
def knight_battle(knight_run, grunt, recorder):
    """Knight engine already in its first player turn against the grunt."""
    engine = make_engine(knight_run, progression=recorder)
    engine.start_battle(grunt)
    return engine
