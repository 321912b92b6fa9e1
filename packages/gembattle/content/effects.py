"""
Status effect kinds.

Magnitude meaning per kind:
- DEFENSE: flat damage absorbed per hit
- POISON / BLEEDING / BURNING: damage per round tick
- REGENERATION: heal per round tick
- FOCUS: percent bonus on gem values (the multiplier itself is configured)
- STUNNED: no magnitude, skips the holder's next action
- WEBBED: stamina recovery penalty
- CURSE: percent reduction of outgoing damage
- ATTACK_BOOST / MINION / EMPOWERED: flat bonus to enemy damage
- PHASED: no magnitude, holder takes no attack damage
- PARRYING: percent of incoming gem value reflected to the attacker
- RITUAL: attack gained by the holder every round tick
"""

from enum import Enum


class StatusEffectKind(Enum):
    DEFENSE = "defense"
    POISON = "poison"
    BLEEDING = "bleeding"
    BURNING = "burning"
    REGENERATION = "regeneration"
    FOCUS = "focus"
    STUNNED = "stunned"
    WEBBED = "webbed"
    CURSE = "curse"
    ATTACK_BOOST = "attack_boost"
    MINION = "minion"
    EMPOWERED = "empowered"
    PHASED = "phased"
    PARRYING = "parrying"
    RITUAL = "ritual"


# Effects that deal damage or heal during the round tick, in tick order.
TICKING_KINDS = (
    StatusEffectKind.POISON,
    StatusEffectKind.BLEEDING,
    StatusEffectKind.BURNING,
    StatusEffectKind.REGENERATION,
    StatusEffectKind.RITUAL,
)

# Flat bonuses added to an enemy's outgoing damage.
DAMAGE_BONUS_KINDS = (
    StatusEffectKind.ATTACK_BOOST,
    StatusEffectKind.MINION,
    StatusEffectKind.EMPOWERED,
)

# Permanent effects never count down.
PERMANENT_DURATION = -1

# Effects spent by the turn they skip rather than by round ticks.
CONSUMED_ON_TURN = frozenset({StatusEffectKind.STUNNED})
