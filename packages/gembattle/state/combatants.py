"""
Player and enemy state.

Health changes go through `take_damage` / `heal`, which clamp to
[0, max_health] for any input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

from ..content.classes import PlayerClass, get_class
from ..content.effects import DAMAGE_BONUS_KINDS, StatusEffectKind
from ..content.enemies import EnemyActionKind, EnemyTemplate
from .effects import StatusLedger

PLAYER_ID = "player"


@dataclass
class Combatant:
    """Shared health and buff handling."""
    health: int
    max_health: int
    buffs: StatusLedger = field(default_factory=StatusLedger)

    @property
    def is_dead(self) -> bool:
        return self.health <= 0

    def take_damage(self, amount: int) -> int:
        """Lose up to `amount` health; returns the health actually lost."""
        lost = min(max(0, int(amount)), self.health)
        self.health -= lost
        return lost

    def heal(self, amount: int) -> int:
        """Restore up to `amount` health; returns the health actually gained."""
        gained = min(max(0, int(amount)), self.max_health - self.health)
        self.health += gained
        return gained

    @property
    def is_stunned(self) -> bool:
        return self.buffs.has(StatusEffectKind.STUNNED)


@dataclass
class Player(Combatant):
    player_class: PlayerClass = PlayerClass.KNIGHT
    stamina: int = 3
    max_stamina: int = 3
    zenny: int = 0

    @property
    def id(self) -> str:
        return PLAYER_ID

    def to_dict(self) -> dict:
        return {
            "player_class": self.player_class.value,
            "health": self.health,
            "max_health": self.max_health,
            "stamina": self.stamina,
            "max_stamina": self.max_stamina,
            "zenny": self.zenny,
            "buffs": self.buffs.to_list(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Player:
        return cls(
            health=data["health"],
            max_health=data["max_health"],
            buffs=StatusLedger.from_list(data.get("buffs", [])),
            player_class=PlayerClass(data["player_class"]),
            stamina=data.get("stamina", data.get("max_stamina", 3)),
            max_stamina=data.get("max_stamina", 3),
            zenny=data.get("zenny", 0),
        )


@dataclass
class Enemy(Combatant):
    name: str = ""
    template_id: str = ""
    attack: int = 0
    actions: Tuple[EnemyActionKind, ...] = (EnemyActionKind.ATTACK,)
    reward: int = 0
    next_action: Optional[EnemyActionKind] = None
    turn_counter: int = 0
    phase_threshold: Optional[float] = None
    phase_triggered: bool = False
    pending_ultimate: bool = False
    charged: bool = False

    @property
    def id(self) -> str:
        return self.template_id or self.name

    @property
    def is_boss(self) -> bool:
        return self.phase_threshold is not None

    @property
    def damage_bonus(self) -> int:
        """Flat damage added by howl, minions and empowerment."""
        return sum(self.buffs.magnitude(kind) for kind in DAMAGE_BONUS_KINDS)


def create_player(player_class=PlayerClass.KNIGHT, max_health: Optional[int] = None,
                  max_stamina: Optional[int] = None, zenny: Optional[int] = None) -> Player:
    """Create a player at full health and stamina for a class."""
    definition = get_class(player_class)
    hp = max_health if max_health is not None else definition.max_health
    stamina = max_stamina if max_stamina is not None else definition.max_stamina
    return Player(
        health=hp,
        max_health=hp,
        player_class=definition.player_class,
        stamina=stamina,
        max_stamina=stamina,
        zenny=definition.starting_zenny if zenny is None else zenny,
    )


def create_enemy(template: EnemyTemplate) -> Enemy:
    """Create a fresh enemy from a template."""
    return Enemy(
        health=template.max_health,
        max_health=template.max_health,
        name=template.name,
        template_id=template.id,
        attack=template.attack,
        actions=template.actions,
        reward=template.reward,
        phase_threshold=template.phase_threshold,
    )
