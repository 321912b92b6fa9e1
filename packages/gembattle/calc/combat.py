"""
Combat math - pure functions for gem values, mitigation and recovery.

Design principles:
1. Pure functions - no side effects, no state
2. Every step floors to int, so the order below is observable

Gem value order:
1. Base value
2. Class affinity (x1.5) when the gem color matches the class
3. Focus (x1.2)
4. Special multipliers (powerful x1.3, x2 against a poisoned target)

Attack mitigation order:
1. Phased target: 0, nothing else applies
2. Piercing removes part of the defense value
3. Remaining defense > 0: max(1, damage - defense); otherwise full damage
"""

from typing import Optional

from ..content.gems import GemKind

__all__ = [
    "gem_value",
    "apply_curse",
    "mitigate",
    "parry_reflect",
    "stamina_recovery",
    "failure_self_damage",
    "AFFINITY_MULT",
    "FOCUS_MULT",
    "POWERFUL_MULT",
    "POISONED_TARGET_MULT",
    "PIERCING_BYPASS",
]


# =============================================================================
# CONSTANTS
# =============================================================================

AFFINITY_MULT = 1.5
FOCUS_MULT = 1.2
POWERFUL_MULT = 1.3
POISONED_TARGET_MULT = 2.0
PIERCING_BYPASS = 0.5

HEAL_FAILURE_DAMAGE = 5


# =============================================================================
# OUTGOING VALUE
# =============================================================================

def gem_value(
    base: int,
    affinity: bool = False,
    focus: bool = False,
    powerful: bool = False,
    poisoned_target: bool = False,
    affinity_mult: float = AFFINITY_MULT,
    focus_mult: float = FOCUS_MULT,
    powerful_mult: float = POWERFUL_MULT,
    poisoned_mult: float = POISONED_TARGET_MULT,
) -> int:
    """
    Final value of a successful gem play before the target's defenses.

    Args:
        base: Gem's base value
        affinity: Gem color matches the player's class color
        focus: Player has an active focus buff
        powerful: Gem carries the powerful augmentation
        poisoned_target: Double-vs-poisoned gem hitting a poisoned enemy

    Returns:
        Value as int (minimum 0)
    """
    value = max(0, int(base))
    if affinity:
        value = int(value * affinity_mult)
    if focus:
        value = int(value * focus_mult)
    if powerful:
        value = int(value * powerful_mult)
    if poisoned_target:
        value = int(value * poisoned_mult)
    return value


def apply_curse(damage: int, curse_percent: int) -> int:
    """Reduce outgoing damage by a curse percentage."""
    if curse_percent <= 0:
        return damage
    return int(damage * max(0, 100 - curse_percent) / 100)


# =============================================================================
# MITIGATION
# =============================================================================

def mitigate(
    damage: int,
    defense: int = 0,
    piercing: bool = False,
    phased: bool = False,
    piercing_bypass: float = PIERCING_BYPASS,
) -> int:
    """
    Damage that actually lands after the target's defense.

    >>> mitigate(8, defense=5)
    3
    >>> mitigate(3, defense=10)
    1
    >>> mitigate(8)
    8
    """
    if phased:
        return 0
    damage = max(0, int(damage))
    if defense > 0 and piercing:
        defense -= int(defense * piercing_bypass)
    if defense > 0:
        return max(1, damage - defense)
    return damage


def parry_reflect(value: int, parry_percent: int) -> int:
    """Damage reflected back to an attacker by a parrying target."""
    return int(value * parry_percent / 100)


# =============================================================================
# STAMINA
# =============================================================================

def stamina_recovery(
    spent: int,
    full_recovery: int = 3,
    rate: float = 0.75,
    cap: int = 3,
    webbed_penalty: int = 0,
) -> int:
    """
    Stamina regained at the start of the next player turn.

    Spending nothing recovers `full_recovery`; otherwise recovery is
    round(spent * rate) capped at `cap`. A webbed player recovers
    `webbed_penalty` less, never below zero.
    """
    if spent <= 0:
        recovered = full_recovery
    else:
        recovered = min(int(round(spent * rate)), cap)
    return max(0, recovered - webbed_penalty)


# =============================================================================
# FAILED PLAYS
# =============================================================================

def failure_self_damage(kind: GemKind, value: int,
                        heal_penalty: int = HEAL_FAILURE_DAMAGE) -> Optional[int]:
    """Self-damage taken when a gem fails its success roll."""
    if kind in (GemKind.ATTACK, GemKind.POISON):
        return value // 2
    if kind == GemKind.HEAL:
        return heal_penalty
    return None
