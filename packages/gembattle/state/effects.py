"""
Status effect ledger attached to each combatant.

A ledger holds at most one effect per StatusEffectKind. Applying a kind
that is already present replaces the old entry (magnitude and duration),
it never stacks. Insertion order is kept so ticks and notifications are
reproducible.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from ..content.effects import CONSUMED_ON_TURN, PERMANENT_DURATION, StatusEffectKind


@dataclass
class StatusEffect:
    kind: StatusEffectKind
    magnitude: int = 0
    remaining: int = 1

    @property
    def permanent(self) -> bool:
        return self.remaining == PERMANENT_DURATION

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "magnitude": self.magnitude, "remaining": self.remaining}

    @classmethod
    def from_dict(cls, data: dict) -> StatusEffect:
        return cls(StatusEffectKind(data["kind"]), data.get("magnitude", 0), data.get("remaining", 1))


class StatusLedger:
    """Buffs and debuffs on one combatant, keyed by kind."""

    def __init__(self, effects: Optional[List[StatusEffect]] = None):
        self._effects: Dict[StatusEffectKind, StatusEffect] = {}
        for effect in effects or []:
            self._effects[effect.kind] = effect

    def apply(self, kind: StatusEffectKind, magnitude: int = 0, duration: int = 1) -> StatusEffect:
        """Apply an effect, replacing any active effect of the same kind."""
        self._effects.pop(kind, None)
        effect = StatusEffect(kind, magnitude, duration)
        self._effects[kind] = effect
        return effect

    def get(self, kind: StatusEffectKind) -> Optional[StatusEffect]:
        return self._effects.get(kind)

    def has(self, kind: StatusEffectKind) -> bool:
        return kind in self._effects

    def magnitude(self, kind: StatusEffectKind, default: int = 0) -> int:
        effect = self._effects.get(kind)
        return effect.magnitude if effect else default

    def remove(self, kind: StatusEffectKind) -> Optional[StatusEffect]:
        return self._effects.pop(kind, None)

    def clear(self) -> None:
        self._effects.clear()

    def decrement(self) -> List[StatusEffect]:
        """Count every timed effect down by one; return the ones that expired."""
        expired = []
        for kind, effect in list(self._effects.items()):
            if effect.permanent or kind in CONSUMED_ON_TURN:
                continue
            effect.remaining -= 1
            if effect.remaining <= 0:
                del self._effects[kind]
                expired.append(effect)
        return expired

    def consume(self, kind: StatusEffectKind) -> Optional[StatusEffect]:
        """Spend one turn of a turn-consumed effect; returns it if it expired."""
        effect = self._effects.get(kind)
        if effect is None:
            return None
        effect.remaining -= 1
        if effect.remaining <= 0:
            del self._effects[kind]
            return effect
        return None

    def __iter__(self) -> Iterator[StatusEffect]:
        return iter(list(self._effects.values()))

    def __len__(self) -> int:
        return len(self._effects)

    def __contains__(self, kind: StatusEffectKind) -> bool:
        return kind in self._effects

    def copy(self) -> StatusLedger:
        return StatusLedger([StatusEffect(e.kind, e.magnitude, e.remaining) for e in self])

    def to_list(self) -> List[dict]:
        return [e.to_dict() for e in self]

    @classmethod
    def from_list(cls, data: List[dict]) -> StatusLedger:
        return cls([StatusEffect.from_dict(d) for d in data])
