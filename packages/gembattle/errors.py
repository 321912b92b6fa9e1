"""
Recoverable error conditions raised by engine operations.

Every error is raised before any state is touched, so a caller can catch
it, show the reason and keep using the same battle.
"""

from __future__ import annotations

from typing import Iterable, Optional


class GemBattleError(ValueError):
    """Base class for all rejected engine operations."""


class InvalidSelection(GemBattleError):
    """A referenced gem instance is not in the expected zone."""

    def __init__(self, instance_ids: Iterable[int], zone: str = "hand"):
        self.instance_ids = tuple(instance_ids)
        self.zone = zone
        super().__init__(f"Gem(s) {list(self.instance_ids)} not in {zone}")


class InsufficientStamina(GemBattleError):
    """A play costs more stamina than the player has."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(f"Need {required} stamina, have {available}")


class InsufficientFunds(GemBattleError):
    """A shop action costs more zenny than the wallet holds."""

    def __init__(self, required: int, available: int, wallet: str = "zenny"):
        self.required = required
        self.available = available
        self.wallet = wallet
        super().__init__(f"Need {required} {wallet}, have {available}")


class NoTarget(GemBattleError):
    """The action needs a living combatant and there is none."""


class InvalidEncounterContext(GemBattleError):
    """The action is not allowed in the current battle state."""

    def __init__(self, message: str, state: Optional[str] = None):
        self.state = state
        super().__init__(message)
