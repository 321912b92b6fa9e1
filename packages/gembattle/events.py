"""
Structured battle events for presentation layers.

The engine never formats text. Each operation returns the events it
emitted and also appends them to the battle's EventLog for replay.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class EventType(Enum):
    BATTLE_STARTED = "battle_started"
    TURN_STARTED = "turn_started"
    TURN_SKIPPED = "turn_skipped"
    GEM_PLAYED = "gem_played"
    GEM_FAILED = "gem_failed"
    GEMS_DRAWN = "gems_drawn"
    DAMAGE_DEALT = "damage_dealt"
    HEAL_APPLIED = "heal_applied"
    BUFF_APPLIED = "buff_applied"
    BUFF_EXPIRED = "buff_expired"
    STUNNED = "stunned"
    PARRY_REFLECT = "parry_reflect"
    MASTERY_CHANGED = "mastery_changed"
    ENEMY_ACTION = "enemy_action"
    ENEMY_INTENT = "enemy_intent"
    ZENNY_CHANGED = "zenny_changed"
    PHASE_SHIFT = "phase_shift"
    VICTORY = "victory"
    DEFEAT = "defeat"
    FLED = "fled"


@dataclass(frozen=True)
class BattleEvent:
    """A single notification: who did what to whom, and how much."""
    turn: int
    event_type: EventType
    source: Optional[str] = None
    target: Optional[str] = None
    amount: int = 0
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "turn": self.turn,
            "event_type": self.event_type.value,
            "source": self.source,
            "target": self.target,
            "amount": self.amount,
            "data": dict(self.data),
        }


@dataclass
class EventLog:
    """Append-only event list for one battle."""
    entries: List[BattleEvent] = field(default_factory=list)

    def add(self, event: BattleEvent) -> BattleEvent:
        self.entries.append(event)
        return event

    def since(self, index: int) -> List[BattleEvent]:
        """Events emitted after the first `index` entries."""
        return self.entries[index:]

    def of_type(self, event_type: EventType) -> List[BattleEvent]:
        return [e for e in self.entries if e.event_type == event_type]

    def to_dicts(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self.entries]

    def __len__(self) -> int:
        return len(self.entries)
