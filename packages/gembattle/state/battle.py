"""Per-encounter battle state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..content.enemies import DayPhase
from .combatants import Enemy


class BattlePhase(Enum):
    """Where the battle state machine currently is."""
    NOT_STARTED = "NOT_STARTED"
    PLAYER_TURN = "PLAYER_TURN"
    ENEMY_TURN = "ENEMY_TURN"
    BATTLE_OVER = "BATTLE_OVER"


class BattleOutcome(Enum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"


@dataclass
class Battle:
    """One encounter between the player and a single enemy."""
    enemy: Enemy
    day: int = 1
    phase: DayPhase = DayPhase.DAWN
    state: BattlePhase = BattlePhase.NOT_STARTED
    outcome: Optional[BattleOutcome] = None
    round: int = 0
    stamina_spent: int = 0
    turns_skipped: int = 0  # consecutive player turns lost to stuns

    @property
    def in_progress(self) -> bool:
        return self.state in (BattlePhase.PLAYER_TURN, BattlePhase.ENEMY_TURN)

    @property
    def is_boss(self) -> bool:
        return self.phase.is_boss

    @property
    def is_over(self) -> bool:
        return self.state == BattlePhase.BATTLE_OVER
