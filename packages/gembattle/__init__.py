"""
Gem Battle Engine

Turn-based gem-battler core: a player draws gems from a bag, spends stamina
to play them against one enemy per encounter, and progresses through
dawn / dusk / dark encounters each day.

Core subsystems:
- state: RNG streams, inventory zones, status effects, combatants, run state
- content: gems, player classes, enemies, status effect kinds
- calc: gem value, mitigation and recovery formulas
- registry: enemy action and status tick handlers
- handlers: shop and between-battle progression
- simulation: batch battles with summary statistics

Usage:
    from packages.gembattle import BattleEngine, RunProgression, create_run

    run = create_run("knight", seed=42)
    engine = BattleEngine(run, progression=RunProgression(run))
    engine.start_battle()
    hand = [g.instance_id for g in run.inventory.hand]
    events = engine.play_gems(hand[:1])
"""

__version__ = "0.1.0"

# Configuration and errors
from .config import EngineConfig, DEFAULT_CONFIG
from .errors import (
    GemBattleError,
    InvalidSelection,
    InsufficientStamina,
    InsufficientFunds,
    NoTarget,
    InvalidEncounterContext,
)

# RNG System
from .state.rng import XorShift128, Random, ScriptedRandom, GameRNG, seed_to_long

# State
from .state.inventory import GemInstance, Inventory, Zone
from .state.effects import StatusEffect, StatusLedger
from .state.combatants import Player, Enemy, create_player, create_enemy
from .state.battle import Battle, BattleOutcome, BattlePhase
from .state.run import MetaProgress, RunState, Stage, create_run

# Content
from .content.gems import GemDefinition, GemKind, GemColor, Augmentation, get_gem, all_gems
from .content.classes import PlayerClass, get_class
from .content.effects import StatusEffectKind
from .content.enemies import DayPhase, EnemyActionKind, EnemyTemplate, pick_template

# Events
from .events import BattleEvent, EventLog, EventType

# Battle
from .enemy_ai import determine_next_action
from .resolver import CombatResolver
from .engine import BattleEngine, ProgressionListener

# Between battles
from .handlers import RunProgression, ShopAction, ShopActionType, ShopHandler, ShopResult

# Simulation
from .simulation import SimulationSummary, simulate_battles, greedy_policy

__all__ = [
    "EngineConfig", "DEFAULT_CONFIG",
    "GemBattleError", "InvalidSelection", "InsufficientStamina", "InsufficientFunds",
    "NoTarget", "InvalidEncounterContext",
    "XorShift128", "Random", "ScriptedRandom", "GameRNG", "seed_to_long",
    "GemInstance", "Inventory", "Zone",
    "StatusEffect", "StatusLedger",
    "Player", "Enemy", "create_player", "create_enemy",
    "Battle", "BattleOutcome", "BattlePhase",
    "MetaProgress", "RunState", "Stage", "create_run",
    "GemDefinition", "GemKind", "GemColor", "Augmentation", "get_gem", "all_gems",
    "PlayerClass", "get_class",
    "StatusEffectKind",
    "DayPhase", "EnemyActionKind", "EnemyTemplate", "pick_template",
    "BattleEvent", "EventLog", "EventType",
    "determine_next_action", "CombatResolver", "BattleEngine", "ProgressionListener",
    "RunProgression", "ShopAction", "ShopActionType", "ShopHandler", "ShopResult",
    "SimulationSummary", "simulate_battles", "greedy_policy",
]
