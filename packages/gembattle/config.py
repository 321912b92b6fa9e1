"""
Engine tunables.

Every balance number the rules use lives here so a variant rule set can be
tried without touching the engine. Pass a custom EngineConfig to
BattleEngine; everything else reads DEFAULT_CONFIG.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict


def _default_ai_weights() -> Dict[str, float]:
    return {
        "attack": 0.6,
        "defend": 0.4,
        "howl": 0.3,
        "enrage": 0.3,
        "steal": 0.2,
        "summon": 0.3,
        "poison": 0.3,
        "curse": 0.3,
        "heal": 0.2,
        "harden": 0.3,
        "breathe": 0.4,
        "tail": 0.4,
        "bite": 0.4,
        "charge": 0.3,
        "web": 0.3,
        "phase": 0.3,
        "parry": 0.3,
        "ritual": 0.3,
        "rend": 0.3,
        "ignite": 0.3,
        "mend": 0.2,
    }


@dataclass
class EngineConfig:
    """Configuration for battle rules."""

    # Inventory
    hand_size: int = 3
    bag_capacity: int = 20

    # Gem value modifiers
    affinity_mult: float = 1.5
    focus_mult: float = 1.2
    powerful_mult: float = 1.3
    poisoned_target_mult: float = 2.0
    piercing_bypass: float = 0.5

    # Mastery
    mastery_increment: int = 15
    mastery_cap: int = 100
    advanced_mastery_cap: int = 95

    # Failure effects
    heal_failure_damage: int = 5
    failure_stun_chance: float = 0.5

    # Buff defaults
    focus_bonus: int = 20
    focus_duration: int = 2
    shield_duration: int = 2
    poison_duration: int = 3
    lasting_bonus: int = 1
    stun_duration: int = 1
    webbed_penalty: int = 1

    # Stamina recovery
    full_recovery: int = 3
    recovery_rate: float = 0.75
    recovery_cap: int = 3

    # Enemy AI
    low_health_threshold: float = 0.3
    greedy_chance: float = 0.7
    unknown_action_weight: float = 0.1
    ai_weights: Dict[str, float] = field(default_factory=_default_ai_weights)
    boss_phase_threshold: float = 0.5
    bite_stun_chance: float = 0.3

    # Stuns
    max_skipped_turns: int = 1

    # Enemy scaling beyond the authored days
    scale_health_per_day: int = 5
    scale_attack_per_day: int = 1

    # Shop and camp
    buy_gem_cost: int = 3
    discard_gem_cost: int = 3
    upgrade_gem_cost: int = 5
    augment_gem_cost: int = 4
    swap_gem_cost: int = 2
    heal_cost: int = 3
    heal_amount: int = 10
    unlock_gem_cost: int = 50
    shop_offer_slots: int = 3
    camp_heal_fraction: float = 0.25

    # Journey
    journey_days: int = 7
    journey_bonus: int = 100

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> EngineConfig:
        """Build a config from overrides, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        overrides = dict(data)
        if "ai_weights" in overrides:
            weights = _default_ai_weights()
            weights.update(overrides["ai_weights"])
            overrides["ai_weights"] = weights
        return cls(**overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


DEFAULT_CONFIG = EngineConfig()
