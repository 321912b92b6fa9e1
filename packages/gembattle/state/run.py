"""
Run state and meta-progression.

RunState is everything that survives between encounters: the player, the
inventory, the day/phase counter and the RNG streams. MetaProgress is what
survives between runs: meta zenny, unlocked gems per class and per-gem
mastery.

Both serialize to plain dicts (`to_dict` / `from_dict`); choosing a storage
medium is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from ..config import DEFAULT_CONFIG, EngineConfig
from ..content.classes import PlayerClass
from ..content.enemies import DayPhase
from ..content.gems import GemDefinition, get_gem, mastery_cap, starting_bag
from .combatants import Player, create_player
from .inventory import Inventory
from .rng import GameRNG

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Macro screen the run is on."""
    BATTLE = "battle"
    SHOP = "shop"
    CAMP = "camp"
    GAME_OVER = "game_over"
    COMPLETED = "completed"

    @property
    def is_final(self) -> bool:
        return self in (Stage.GAME_OVER, Stage.COMPLETED)


@dataclass
class MetaProgress:
    """Progress kept across runs."""
    meta_zenny: int = 0
    unlocked: Dict[str, List[str]] = field(default_factory=dict)
    mastery: Dict[str, int] = field(default_factory=dict)

    def get_mastery(self, gem: GemDefinition) -> int:
        return self.mastery.get(gem.key, gem.base_success)

    def record_success(self, gem: GemDefinition, increment: int = 15,
                       normal_cap: int = 100, advanced_cap: int = 95) -> int:
        """Raise mastery for a gem key after a successful play; never lowers it."""
        current = self.get_mastery(gem)
        cap = mastery_cap(gem, normal_cap, advanced_cap)
        updated = max(current, min(current + increment, cap))
        self.mastery[gem.key] = updated
        return updated

    def unlocked_for(self, player_class) -> List[str]:
        name = getattr(player_class, "value", player_class)
        return list(self.unlocked.get(name, []))

    def unlock(self, player_class, gem_key: str) -> bool:
        """Mark a gem as unlocked for a class. Returns False if already unlocked."""
        get_gem(gem_key)
        name = getattr(player_class, "value", player_class)
        keys = self.unlocked.setdefault(name, [])
        if gem_key in keys:
            return False
        keys.append(gem_key)
        return True

    def to_dict(self) -> dict:
        return {
            "meta_zenny": self.meta_zenny,
            "unlocked": {k: list(v) for k, v in self.unlocked.items()},
            "mastery": dict(self.mastery),
        }

    @classmethod
    def from_dict(cls, data: dict) -> MetaProgress:
        return cls(
            meta_zenny=data.get("meta_zenny", 0),
            unlocked={k: list(v) for k, v in data.get("unlocked", {}).items()},
            mastery=dict(data.get("mastery", {})),
        )


@dataclass
class RunState:
    """A single run from class selection to game over."""
    seed: int
    player: Player
    inventory: Inventory
    rng: GameRNG
    meta: MetaProgress = field(default_factory=MetaProgress)
    day: int = 1
    phase: DayPhase = DayPhase.DAWN
    stage: Stage = Stage.BATTLE
    battles_won: int = 0

    def advance_phase(self) -> bool:
        """
        Move to the next encounter slot.

        Returns True when a new day started.
        """
        following = self.phase.next()
        if following is not None:
            self.phase = following
            return False
        self.day += 1
        self.phase = DayPhase.DAWN
        return True

    def to_dict(self) -> dict:
        """Serialize to dictionary (for saving)."""
        return {
            "seed": self.seed,
            "player": self.player.to_dict(),
            "inventory": self.inventory.to_dict(),
            "meta": self.meta.to_dict(),
            "day": self.day,
            "phase": self.phase.value,
            "stage": self.stage.value,
            "battles_won": self.battles_won,
            "rng_counters": self.rng.get_counters(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> RunState:
        """Deserialize from dictionary (for loading)."""
        rng = GameRNG.from_save(data["seed"], data.get("rng_counters", {}))
        return cls(
            seed=data["seed"],
            player=Player.from_dict(data["player"]),
            inventory=Inventory.from_dict(data["inventory"], rng.shuffle_rng),
            rng=rng,
            meta=MetaProgress.from_dict(data.get("meta", {})),
            day=data.get("day", 1),
            phase=DayPhase(data.get("phase", DayPhase.DAWN.value)),
            stage=Stage(data.get("stage", Stage.BATTLE.value)),
            battles_won=data.get("battles_won", 0),
        )


def create_run(player_class=PlayerClass.KNIGHT, seed: int = 0,
               meta: Optional[MetaProgress] = None, rng: Optional[GameRNG] = None,
               config: EngineConfig = DEFAULT_CONFIG, **player_overrides) -> RunState:
    """
    Start a new run with the class's opening bag.

    Gems unlocked in `meta` are not in the opening bag; they show up as shop
    offers. `player_overrides` are passed to create_player (max_health,
    max_stamina, zenny).
    """
    meta = meta or MetaProgress()
    rng = rng or GameRNG(seed)
    player = create_player(player_class, **player_overrides)

    gems = starting_bag(player.player_class, rng.loot_rng, config.bag_capacity)
    inventory = Inventory.from_definitions(gems, rng.shuffle_rng, hand_size=config.hand_size)

    logger.info("New %s run (seed=%d, %d gems)", player.player_class.value, seed, len(gems))
    return RunState(seed=seed, player=player, inventory=inventory, rng=rng, meta=meta)
