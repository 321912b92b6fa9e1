"""
Enemy AI - picks the enemy's next action.

Selection rules, in order:
1. A pending boss ultimate is always chosen.
2. Below the low-health threshold, heal > defend > harden when available.
3. Otherwise, with `greedy_chance` take the highest-weighted action (first
   listed wins ties), else pick uniformly from all actions, ignoring
   weights.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from .config import DEFAULT_CONFIG, EngineConfig
from .content.effects import PERMANENT_DURATION, StatusEffectKind
from .content.enemies import EnemyActionKind
from .events import EventType
from .state.rng import Random

if TYPE_CHECKING:
    from .registry import BattleContext
    from .state.combatants import Enemy

logger = logging.getLogger(__name__)

LOW_HEALTH_PRIORITY = (
    EnemyActionKind.HEAL,
    EnemyActionKind.DEFEND,
    EnemyActionKind.HARDEN,
)


def action_weight(action: EnemyActionKind, config: EngineConfig = DEFAULT_CONFIG) -> float:
    return config.ai_weights.get(action.value, config.unknown_action_weight)


def best_weighted(actions: Sequence[EnemyActionKind],
                  config: EngineConfig = DEFAULT_CONFIG) -> EnemyActionKind:
    """Highest-weighted action; the earliest one wins ties."""
    best = actions[0]
    for action in actions[1:]:
        if action_weight(action, config) > action_weight(best, config):
            best = action
    return best


def determine_next_action(enemy: Enemy, rng: Random,
                          config: EngineConfig = DEFAULT_CONFIG) -> EnemyActionKind:
    """Choose the enemy's next action."""
    if enemy.pending_ultimate:
        return EnemyActionKind.ULTIMATE

    actions = [a for a in enemy.actions if a != EnemyActionKind.ULTIMATE]
    if not actions:
        logger.warning("%s has no actions, using attack", enemy.name)
        return EnemyActionKind.ATTACK

    if enemy.health < config.low_health_threshold * enemy.max_health:
        for preferred in LOW_HEALTH_PRIORITY:
            if preferred in actions:
                return preferred

    if rng.random_boolean(config.greedy_chance):
        return best_weighted(actions, config)
    return rng.choice(actions)


def check_phase_shift(ctx: BattleContext) -> bool:
    """
    Trigger a boss's one-time phase shift once its health first falls to the
    threshold.

    The enemy gains permanent empowerment and its next action becomes its
    ultimate. Returns True if the shift fired now.
    """
    enemy = ctx.enemy
    if not enemy.is_boss or enemy.phase_triggered or enemy.is_dead:
        return False
    if enemy.health > enemy.phase_threshold * enemy.max_health:
        return False

    enemy.phase_triggered = True
    enemy.pending_ultimate = True
    enemy.next_action = EnemyActionKind.ULTIMATE
    empowerment = int(enemy.attack * 0.5)
    ctx.apply_buff(enemy, StatusEffectKind.EMPOWERED, empowerment, PERMANENT_DURATION, enemy.id)
    ctx.emit(EventType.PHASE_SHIFT, enemy.id, enemy.id, empowerment)
    ctx.emit(EventType.ENEMY_INTENT, enemy.id, ctx.player.id, 0,
             action=EnemyActionKind.ULTIMATE.value)
    logger.debug("%s phase shift at %d/%d", enemy.name, enemy.health, enemy.max_health)
    return True
