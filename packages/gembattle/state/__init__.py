"""
State module - everything that changes during a run.

Contains:
- RNG system (XorShift128, per-concern streams, scripted streams for tests)
- Status effect ledger
- Inventory zones (Bag / Hand / Discard / Played)
- Player and enemy combatants
- Battle and run state, meta-progression
"""

# RNG System
from .rng import XorShift128, Random, ScriptedRandom, GameRNG, seed_to_long, shuffle_in_place

# Status effects
from .effects import StatusEffect, StatusLedger

# Inventory
from .inventory import GemInstance, Inventory, Zone

# Combatants
from .combatants import Combatant, Player, Enemy, create_player, create_enemy

# Battle and run
from .battle import Battle, BattleOutcome, BattlePhase
from .run import MetaProgress, RunState, Stage, create_run

__all__ = [
    "XorShift128", "Random", "ScriptedRandom", "GameRNG", "seed_to_long", "shuffle_in_place",
    "StatusEffect", "StatusLedger",
    "GemInstance", "Inventory", "Zone",
    "Combatant", "Player", "Enemy", "create_player", "create_enemy",
    "Battle", "BattleOutcome", "BattlePhase",
    "MetaProgress", "RunState", "Stage", "create_run",
]
