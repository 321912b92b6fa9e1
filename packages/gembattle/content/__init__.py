"""
Content module - static game data.

Contains gems, player classes, status effect kinds and enemies.
"""

# Gems
from .gems import (
    GemDefinition, GemColor, GemKind, GemRarity, GemSpecial, Augmentation,
    GEM_CATALOG, BASE_GEM_KEYS, CLASS_GEM_KEYS, UNLOCKABLE_GEM_KEYS,
    get_gem, all_gems, starter_gems, starting_bag, unlockable_gems,
    upgrade_definition, augment_definition, UpgradeKind, UpgradeOption, upgrade_options,
)

# Classes
from .classes import PlayerClass, ClassDefinition, CLASS_DEFINITIONS, get_class

# Status effects
from .effects import StatusEffectKind, PERMANENT_DURATION

# Enemies
from .enemies import (
    DayPhase, EnemyActionKind, EnemyTemplate, ENEMY_POOL,
    encounter_pool, pick_template,
)
