"""
Enemy templates by day and time-of-day phase.

Each day has three encounter slots: DAWN, DUSK and DARK. DARK is the boss
slot; it cannot be fled and winning it ends the day. Days past the last
authored day reuse that day's pool with health and attack scaled up per
extra day.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class DayPhase(Enum):
    DAWN = "DAWN"
    DUSK = "DUSK"
    DARK = "DARK"

    @property
    def is_boss(self) -> bool:
        return self is DayPhase.DARK

    def next(self) -> Optional[DayPhase]:
        """Following phase within the same day, None after DARK."""
        order = list(DayPhase)
        idx = order.index(self)
        return order[idx + 1] if idx + 1 < len(order) else None


class EnemyActionKind(Enum):
    ATTACK = "attack"
    DEFEND = "defend"
    HOWL = "howl"
    ENRAGE = "enrage"
    STEAL = "steal"
    SUMMON = "summon"
    POISON = "poison"
    CURSE = "curse"
    HEAL = "heal"
    HARDEN = "harden"
    BREATHE = "breathe"
    TAIL = "tail"
    BITE = "bite"
    CHARGE = "charge"
    WEB = "web"
    PHASE = "phase"
    PARRY = "parry"
    RITUAL = "ritual"
    REND = "rend"
    IGNITE = "ignite"
    MEND = "mend"
    ULTIMATE = "ultimate"  # forced by the boss phase shift, never in a template


def parse_action(name) -> EnemyActionKind:
    """Parse an action identifier, falling back to a basic attack."""
    if isinstance(name, EnemyActionKind):
        return name
    try:
        return EnemyActionKind(str(name).lower())
    except ValueError:
        logger.warning("Unknown enemy action %r, using attack", name)
        return EnemyActionKind.ATTACK


@dataclass(frozen=True)
class EnemyTemplate:
    """Authored enemy stats."""
    id: str
    name: str
    max_health: int
    attack: int
    reward: int
    actions: Tuple[EnemyActionKind, ...]
    phase_threshold: Optional[float] = None

    def scaled(self, extra_days: int, health_per_day: int = 5,
               attack_per_day: int = 1) -> EnemyTemplate:
        """Copy with stats raised for `extra_days` past the authored range."""
        if extra_days <= 0:
            return self
        return EnemyTemplate(
            id=self.id,
            name=self.name,
            max_health=self.max_health + health_per_day * extra_days,
            attack=self.attack + attack_per_day * extra_days,
            reward=self.reward + extra_days,
            actions=self.actions,
            phase_threshold=self.phase_threshold,
        )


def _template(id: str, name: str, health: int, attack: int, reward: int,
              actions: Sequence[str], boss: bool = False) -> EnemyTemplate:
    return EnemyTemplate(
        id=id,
        name=name,
        max_health=health,
        attack=attack,
        reward=reward,
        actions=tuple(parse_action(a) for a in actions),
        phase_threshold=0.5 if boss else None,
    )


# =============================================================================
# ENEMY POOL
# =============================================================================

ENEMY_POOL: Dict[int, Dict[DayPhase, List[EnemyTemplate]]] = {
    1: {
        DayPhase.DAWN: [_template("grunt1", "Small Grunt", 20, 8, 3, ["attack"])],
        DayPhase.DUSK: [_template("bandit1", "Bandit", 25, 10, 5, ["attack", "defend"])],
        DayPhase.DARK: [_template("wolf1", "Shadow Wolf", 35, 12, 10,
                                  ["attack", "howl", "bite"], boss=True)],
    },
    2: {
        DayPhase.DAWN: [_template("grunt2", "Angry Grunt", 30, 10, 5, ["attack", "enrage"])],
        DayPhase.DUSK: [_template("bandit2", "Bandit Leader", 35, 12, 8,
                                  ["attack", "defend", "steal", "rend"])],
        DayPhase.DARK: [_template("goblin1", "Goblin King", 45, 15, 15,
                                  ["attack", "summon", "poison"], boss=True)],
    },
    3: {
        DayPhase.DAWN: [_template("witch1", "Forest Witch", 40, 12, 8,
                                  ["attack", "curse", "heal", "web"])],
        DayPhase.DUSK: [_template("golem1", "Stone Golem", 50, 14, 12,
                                  ["attack", "harden", "charge", "parry"])],
        DayPhase.DARK: [_template("dragon1", "Young Dragon", 60, 18, 20,
                                  ["attack", "breathe", "tail", "ignite"], boss=True)],
    },
    4: {
        DayPhase.DAWN: [_template("cultist1", "Cultist", 45, 12, 10, ["attack", "ritual"])],
        DayPhase.DUSK: [_template("wraith1", "Wraith", 50, 15, 14,
                                  ["attack", "phase", "rend", "mend"])],
        DayPhase.DARK: [_template("spider1", "Spider Queen", 70, 20, 25,
                                  ["attack", "web", "bite", "poison"], boss=True)],
    },
}

MAX_AUTHORED_DAY = max(ENEMY_POOL)


def encounter_pool(day: int, phase: DayPhase) -> Tuple[List[EnemyTemplate], int]:
    """Templates for a day/phase and the number of days to scale them by."""
    if day in ENEMY_POOL:
        return ENEMY_POOL[day][phase], 0
    if day > MAX_AUTHORED_DAY:
        return ENEMY_POOL[MAX_AUTHORED_DAY][phase], day - MAX_AUTHORED_DAY
    return ENEMY_POOL[1][phase], 0


def pick_template(day: int, phase: DayPhase, rng, health_per_day: int = 5,
                  attack_per_day: int = 1) -> EnemyTemplate:
    """Choose a (scaled) template for an encounter using `rng`."""
    pool, extra_days = encounter_pool(day, phase)
    template = pool[0] if len(pool) == 1 else rng.choice(pool)
    return template.scaled(extra_days, health_per_day, attack_per_day)
