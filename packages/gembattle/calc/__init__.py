"""
Calculation utilities for gem combat.

Pure functions, no side effects: gem values, curse and defense
mitigation, parry reflection, stamina recovery and failure backfire.
"""

from .combat import (
    gem_value,
    apply_curse,
    mitigate,
    parry_reflect,
    stamina_recovery,
    failure_self_damage,
    # Constants
    AFFINITY_MULT,
    FOCUS_MULT,
    POWERFUL_MULT,
    POISONED_TARGET_MULT,
    PIERCING_BYPASS,
    HEAL_FAILURE_DAMAGE,
)
