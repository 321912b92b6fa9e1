"""
Decorator-based registries for enemy actions and status effect ticks.

Each EnemyActionKind and each ticking StatusEffectKind maps to one handler,
so adding a variant means adding one decorated function.

Usage:
    from packages.gembattle.registry import enemy_action, status_tick

    @enemy_action(EnemyActionKind.HOWL)
    def howl(ctx: ActionContext) -> None:
        ctx.apply_buff(ctx.enemy, StatusEffectKind.ATTACK_BOOST, int(ctx.attack * 0.5), 2)

    @status_tick(StatusEffectKind.POISON)
    def poison_tick(ctx: StatusContext) -> None:
        ctx.damage_holder(ctx.magnitude)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from ..calc.combat import mitigate
from ..content.effects import TICKING_KINDS, StatusEffectKind
from ..content.enemies import EnemyActionKind
from ..events import BattleEvent, EventLog, EventType

if TYPE_CHECKING:
    from ..config import EngineConfig
    from ..state.battle import Battle
    from ..state.combatants import Combatant, Enemy, Player
    from ..state.effects import StatusEffect
    from ..state.rng import GameRNG

logger = logging.getLogger(__name__)


# =============================================================================
# Context Classes - Passed to handlers
# =============================================================================

@dataclass
class BattleContext:
    """Everything a rule needs to read or change during a battle."""
    player: Player
    enemy: Enemy
    battle: Battle
    rng: GameRNG
    config: EngineConfig
    log: EventLog

    @property
    def turn(self) -> int:
        return self.battle.round

    @property
    def someone_dead(self) -> bool:
        return self.player.is_dead or self.enemy.is_dead

    def emit(self, event_type: EventType, source: Optional[str] = None,
             target: Optional[str] = None, amount: int = 0, **data) -> BattleEvent:
        return self.log.add(BattleEvent(self.turn, event_type, source, target, amount, data))

    def apply_buff(self, holder: Combatant, kind: StatusEffectKind, magnitude: int = 0,
                   duration: int = 1, source: Optional[str] = None) -> None:
        """Apply (replace) an effect on `holder` and announce it."""
        holder.buffs.apply(kind, magnitude, duration)
        self.emit(EventType.BUFF_APPLIED, source, holder.id, magnitude,
                  kind=kind.value, duration=duration)
        if kind == StatusEffectKind.STUNNED:
            self.emit(EventType.STUNNED, source, holder.id)

    def heal(self, holder: Combatant, amount: int, source: Optional[str] = None) -> int:
        gained = holder.heal(amount)
        self.emit(EventType.HEAL_APPLIED, source or holder.id, holder.id, gained)
        return gained

    def lose_health(self, holder: Combatant, amount: int, source: Optional[str] = None,
                    **data) -> int:
        """Direct health loss that ignores defense (DoTs, failures, reflects)."""
        lost = holder.take_damage(amount)
        self.emit(EventType.DAMAGE_DEALT, source, holder.id, lost, **data)
        return lost

    def hit(self, target: Combatant, damage: int, source: Optional[str] = None,
            piercing: bool = False, **data) -> int:
        """An attack: apply the target's defense and phased state, then damage."""
        landed = mitigate(
            damage,
            defense=target.buffs.magnitude(StatusEffectKind.DEFENSE),
            piercing=piercing,
            phased=target.buffs.has(StatusEffectKind.PHASED),
            piercing_bypass=self.config.piercing_bypass,
        )
        return self.lose_health(target, landed, source, attack=damage, **data)


@dataclass
class ActionContext(BattleContext):
    """Context for one enemy action."""
    action: EnemyActionKind = EnemyActionKind.ATTACK

    @property
    def attack(self) -> int:
        return self.enemy.attack

    def strike(self, damage: int, **data) -> int:
        """Enemy attack on the player, including flat enemy bonuses."""
        total = damage + self.enemy.damage_bonus
        return self.hit(self.player, total, self.enemy.id, action=self.action.value, **data)


@dataclass
class StatusContext(BattleContext):
    """Context for one status effect tick."""
    holder: Combatant = None
    effect: StatusEffect = None

    @property
    def magnitude(self) -> int:
        return self.effect.magnitude

    def damage_holder(self, amount: int) -> int:
        return self.lose_health(self.holder, amount, self.effect.kind.value,
                                kind=self.effect.kind.value)


# =============================================================================
# Registry
# =============================================================================

class HandlerRegistry:
    """One handler per enum member."""

    def __init__(self, name: str):
        self.name = name
        self._handlers: Dict[Enum, Callable] = {}

    def register(self, key: Enum, handler: Callable) -> None:
        self._handlers[key] = handler

    def get(self, key: Enum) -> Optional[Callable]:
        return self._handlers.get(key)


ACTION_REGISTRY = HandlerRegistry("enemy_actions")
STATUS_REGISTRY = HandlerRegistry("status_ticks")


# =============================================================================
# Decorators
# =============================================================================

def enemy_action(action: EnemyActionKind):
    """
    Decorator to register the handler for an enemy action.

    Usage:
        @enemy_action(EnemyActionKind.DEFEND)
        def defend(ctx: ActionContext) -> None:
            ...
    """
    def decorator(func: Callable[[ActionContext], Any]) -> Callable:
        ACTION_REGISTRY.register(action, func)
        return func
    return decorator


def status_tick(kind: StatusEffectKind):
    """Decorator to register the round-tick handler for a status effect."""
    def decorator(func: Callable[[StatusContext], Any]) -> Callable:
        STATUS_REGISTRY.register(kind, func)
        return func
    return decorator


# =============================================================================
# Execution
# =============================================================================

def execute_enemy_action(action: EnemyActionKind, ctx: BattleContext) -> Any:
    """Run the handler for `action`; actions without one fall back to attack."""
    handler = ACTION_REGISTRY.get(action)
    if handler is None:
        logger.warning("No handler for enemy action %s, using attack", action.value)
        action = EnemyActionKind.ATTACK
        handler = ACTION_REGISTRY.get(action)

    action_ctx = ActionContext(
        player=ctx.player, enemy=ctx.enemy, battle=ctx.battle,
        rng=ctx.rng, config=ctx.config, log=ctx.log, action=action,
    )
    return handler(action_ctx)


def execute_status_ticks(holder: Combatant, ctx: BattleContext) -> bool:
    """
    Apply every ticking effect on `holder` in TICKING_KINDS order.

    Stops and returns True as soon as a combatant dies.
    """
    for kind in TICKING_KINDS:
        effect = holder.buffs.get(kind)
        if effect is None:
            continue
        handler = STATUS_REGISTRY.get(kind)
        if handler is None:
            continue
        handler(StatusContext(
            player=ctx.player, enemy=ctx.enemy, battle=ctx.battle,
            rng=ctx.rng, config=ctx.config, log=ctx.log,
            holder=holder, effect=effect,
        ))
        if ctx.someone_dead:
            return True
    return False


__all__ = [
    # Context classes
    "BattleContext",
    "ActionContext",
    "StatusContext",

    # Registry
    "HandlerRegistry",
    "ACTION_REGISTRY",
    "STATUS_REGISTRY",

    # Decorators
    "enemy_action",
    "status_tick",

    # Execution
    "execute_enemy_action",
    "execute_status_ticks",
]

# Import handlers to register them (decorators populate the registries)
from . import enemy_actions as _enemy_actions  # noqa: F401, E402
from . import status_ticks as _status_ticks  # noqa: F401, E402
