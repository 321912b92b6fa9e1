"""
Gem definitions.

A gem is a single-use (per draw) action: attack, heal, shield or poison.
Definitions are immutable; an upgrade or augmentation produces a new
definition which the inventory swaps onto an existing instance.

Fields:
- base_value: damage / heal / defense / poison-per-turn before modifiers
- stamina_cost: stamina needed to play
- duration: turns for shield and poison gems (None = engine default)
- special: on-success extra behaviour (draw_extra, double_vs_poisoned)
- augmentation: piercing, swift, powerful or lasting
- advanced: advanced gems start below full mastery and can never reach it
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional


class GemColor(Enum):
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    GREY = "grey"


class GemKind(Enum):
    ATTACK = "attack"
    HEAL = "heal"
    SHIELD = "shield"
    POISON = "poison"


class GemRarity(Enum):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    EPIC = "epic"


class GemSpecial(Enum):
    DRAW_EXTRA = "draw_extra"
    DOUBLE_VS_POISONED = "double_vs_poisoned"


class Augmentation(Enum):
    PIERCING = "piercing"    # ignores part of the target's defense
    SWIFT = "swift"          # costs one less stamina (min 1)
    POWERFUL = "powerful"    # +30% value
    LASTING = "lasting"      # +1 turn duration


class UpgradeKind(Enum):
    DIRECT = "direct"        # same gem, value scaled by rarity
    CLASS = "class"          # base gem replaced by the class gem
    UNLOCKED = "unlocked"    # replaced by an unlocked gem of the same color


UPGRADE_MULTIPLIERS = {
    GemRarity.COMMON: 1.25,
    GemRarity.UNCOMMON: 1.3,
    GemRarity.RARE: 1.35,
    GemRarity.EPIC: 1.4,
}

BASE_SUCCESS = 100
ADVANCED_BASE_SUCCESS = 90


@dataclass(frozen=True)
class GemDefinition:
    """A gem definition."""
    key: str
    name: str
    color: GemColor
    kind: GemKind
    base_value: int
    stamina_cost: int
    rarity: GemRarity = GemRarity.COMMON
    duration: Optional[int] = None
    special: Optional[GemSpecial] = None
    augmentation: Optional[Augmentation] = None
    advanced: bool = False
    upgrade_count: int = 0

    @property
    def base_success(self) -> int:
        return ADVANCED_BASE_SUCCESS if self.advanced else BASE_SUCCESS

    @property
    def effective_cost(self) -> int:
        if self.augmentation == Augmentation.SWIFT:
            return max(1, self.stamina_cost - 1)
        return self.stamina_cost

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "upgrade_count": self.upgrade_count,
            "base_value": self.base_value,
            "augmentation": self.augmentation.value if self.augmentation else None,
        }


# =============================================================================
# CATALOG
# =============================================================================

GEM_CATALOG: Dict[str, GemDefinition] = {
    gem.key: gem for gem in [
        # Base gems every class starts with
        GemDefinition("red-attack", "Attack", GemColor.RED, GemKind.ATTACK, 10, 2),
        GemDefinition("blue-magic", "Magic Attack", GemColor.BLUE, GemKind.ATTACK, 10, 2),
        GemDefinition("green-attack", "Attack", GemColor.GREEN, GemKind.ATTACK, 8, 1),
        GemDefinition("grey-heal", "Heal", GemColor.GREY, GemKind.HEAL, 8, 1),

        # Class gems
        GemDefinition("red-strong", "Strong Attack", GemColor.RED, GemKind.ATTACK, 15, 2,
                      rarity=GemRarity.UNCOMMON),
        GemDefinition("blue-strong-heal", "Strong Heal", GemColor.BLUE, GemKind.HEAL, 12, 2,
                      rarity=GemRarity.UNCOMMON),
        GemDefinition("green-quick", "Quick Attack", GemColor.GREEN, GemKind.ATTACK, 8, 1,
                      rarity=GemRarity.UNCOMMON, special=GemSpecial.DRAW_EXTRA),

        # Unlockable advanced gems
        GemDefinition("red-burst", "Burst Attack", GemColor.RED, GemKind.ATTACK, 20, 3,
                      rarity=GemRarity.RARE, advanced=True),
        GemDefinition("blue-shield", "Shield", GemColor.BLUE, GemKind.SHIELD, 15, 2,
                      rarity=GemRarity.RARE, duration=2, advanced=True),
        GemDefinition("green-poison", "Poison", GemColor.GREEN, GemKind.POISON, 4, 2,
                      rarity=GemRarity.RARE, duration=3, advanced=True),
        GemDefinition("green-backstab", "Backstab", GemColor.GREEN, GemKind.ATTACK, 12, 2,
                      rarity=GemRarity.RARE, special=GemSpecial.DOUBLE_VS_POISONED,
                      advanced=True),
    ]
}

BASE_GEM_KEYS = ["red-attack", "blue-magic", "green-attack", "grey-heal"]

CLASS_GEM_KEYS = {
    "knight": "red-strong",
    "mage": "blue-strong-heal",
    "rogue": "green-quick",
}

UNLOCKABLE_GEM_KEYS = {
    "knight": ["red-burst"],
    "mage": ["blue-shield"],
    "rogue": ["green-poison", "green-backstab"],
}

# Base gem a class may turn into its class gem at the shop.
CLASS_UPGRADE_KEYS = {
    "knight": {"red-attack": "red-strong"},
    "mage": {"blue-magic": "blue-strong-heal"},
    "rogue": {"green-attack": "green-quick"},
}


def get_gem(key: str) -> GemDefinition:
    """Get a gem definition by key."""
    if key not in GEM_CATALOG:
        raise ValueError(f"Unknown gem: {key}")
    return GEM_CATALOG[key]


def all_gems() -> List[GemDefinition]:
    return list(GEM_CATALOG.values())


def _class_name(player_class) -> str:
    return getattr(player_class, "value", player_class)


def starter_gems(player_class) -> List[GemDefinition]:
    """Base gems plus the class gem."""
    keys = BASE_GEM_KEYS + [CLASS_GEM_KEYS[_class_name(player_class)]]
    return [get_gem(k) for k in keys]


def starting_bag(player_class, rng, capacity: int = 20) -> List[GemDefinition]:
    """
    Opening collection for a new run.

    Two copies of each base gem, three of the class gem, then random picks
    from those same types until the bag holds `capacity` gems. Unlockable
    gems are never in the opening bag.
    """
    base = [get_gem(k) for k in BASE_GEM_KEYS]
    class_gem = get_gem(CLASS_GEM_KEYS[_class_name(player_class)])
    bag = [g for g in base for _ in range(2)] + [class_gem] * 3
    pool = base + [class_gem]
    while len(bag) < capacity:
        bag.append(rng.choice(pool))
    return bag


def unlockable_gems(player_class) -> List[GemDefinition]:
    return [get_gem(k) for k in UNLOCKABLE_GEM_KEYS[_class_name(player_class)]]


def mastery_cap(gem: GemDefinition, normal_cap: int = 100, advanced_cap: int = 95) -> int:
    return advanced_cap if gem.advanced else normal_cap


def upgrade_definition(gem: GemDefinition) -> GemDefinition:
    """Direct upgrade: scale base value by the rarity multiplier (floored)."""
    multiplier = UPGRADE_MULTIPLIERS.get(gem.rarity, 1.4)
    return replace(
        gem,
        base_value=int(gem.base_value * multiplier),
        upgrade_count=gem.upgrade_count + 1,
    )


def augment_definition(gem: GemDefinition, augmentation: Augmentation) -> GemDefinition:
    """Attach an augmentation, replacing any existing one."""
    if isinstance(augmentation, str):
        augmentation = Augmentation(augmentation)
    return replace(gem, augmentation=augmentation)


def definition_from_dict(data: dict) -> GemDefinition:
    """Rebuild a (possibly upgraded or augmented) definition from saved data."""
    gem = get_gem(data["key"])
    augmentation = data.get("augmentation")
    return replace(
        gem,
        base_value=data.get("base_value", gem.base_value),
        upgrade_count=data.get("upgrade_count", 0),
        augmentation=Augmentation(augmentation) if augmentation else None,
    )


@dataclass(frozen=True)
class UpgradeOption:
    """One way to upgrade a gem: the kind and the resulting definition."""
    kind: UpgradeKind
    definition: GemDefinition


def upgrade_options(gem: GemDefinition, player_class,
                    unlocked_keys=()) -> List[UpgradeOption]:
    """
    Upgrade choices for a gem, direct upgrade first.

    The class option exists only for the class's base gem. Every gem in
    `unlocked_keys` with the same color (other than the gem itself) is an
    unlocked option. Replacement gems arrive fresh from the catalog.
    """
    options = [UpgradeOption(UpgradeKind.DIRECT, upgrade_definition(gem))]
    class_key = CLASS_UPGRADE_KEYS[_class_name(player_class)].get(gem.key)
    if class_key is not None:
        options.append(UpgradeOption(UpgradeKind.CLASS, get_gem(class_key)))
    for key in unlocked_keys:
        target = get_gem(key)
        if target.color == gem.color and target.key != gem.key:
            options.append(UpgradeOption(UpgradeKind.UNLOCKED, target))
    return options
